from datetime import date
from typing import Union

from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError

from colorgame import db
from colorgame.models import Attempt
from . import leaderboard, modifiers, scoring, settlement
from .locks import key_lock
from .results import (
    RGB,
    Admission,
    AttemptLimitReached,
    DailyTarget,
    InvariantViolation,
    TransientStoreError,
)


def attempt_count(user_id: str, day: date) -> int:
    """Number of stored attempts for the key, checked for gaps and duplicates."""
    count, highest = (
        db.session.query(func.count(Attempt.id), func.max(Attempt.attempt_number))
        .filter(Attempt.user_id == user_id, Attempt.date == day)
        .one()
    )
    count = int(count or 0)
    highest = int(highest or 0)
    if count != highest:
        current_app.logger.critical(
            f"[invariant] user={user_id} date={day.isoformat()} attempts={count} highest_number={highest}"
        )
        raise InvariantViolation(
            f'Attempt numbers for {user_id} on {day.isoformat()} are not contiguous ({count} rows, highest {highest})'
        )
    return count


def submit(user_id: str, day: date, submitted: RGB, target: DailyTarget) -> Union[Admission, AttemptLimitReached]:
    """Admit one attempt for (user_id, day) if the budget allows it.

    Count, cap check, insert and the leaderboard update commit as one unit
    while holding the key lock. The unique (user_id, date, attempt_number)
    constraint covers writers in other processes: whoever loses the race
    rolls back and recounts. If the new attempt uses up the budget, the day
    is settled before the lock is released; a transient settlement failure
    leaves ``settlement`` as None and the payout to a later submission.
    """
    retries = max(1, int(current_app.config.get('ATTEMPT_CLAIM_RETRIES', 3)))

    with key_lock(user_id, day):
        for claim in range(1, retries + 1):
            try:
                cap = modifiers.max_attempts(modifiers.get(user_id, day))
                count = attempt_count(user_id, day)
                if count >= cap:
                    db.session.rollback()
                    current_app.logger.info(f"[attempt-limit] user={user_id} date={day.isoformat()} used={count} cap={cap}")
                    return AttemptLimitReached(max_attempts=cap, attempts_used=count)

                attempt = Attempt(
                    user_id=user_id,
                    date=day,
                    attempt_number=count + 1,
                    score=scoring.score(target.color, submitted),
                    submitted_r=submitted.r,
                    submitted_g=submitted.g,
                    submitted_b=submitted.b,
                    target_r=target.color.r,
                    target_g=target.color.g,
                    target_b=target.color.b,
                )
                db.session.add(attempt)
                db.session.flush()
                best = leaderboard.record(attempt)
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                current_app.logger.warning(
                    f"[attempt-conflict] user={user_id} date={day.isoformat()} claim={claim}/{retries} number taken, recounting"
                )
                continue
            except OperationalError as exc:
                db.session.rollback()
                raise TransientStoreError(f'Could not record attempt for {user_id}: {exc}') from exc
            except Exception:
                db.session.rollback()
                raise

            current_app.logger.info(
                f"[attempt-admit] user={user_id} date={day.isoformat()} n={attempt.attempt_number} score={attempt.score} cap={cap}"
            )
            outcome = None
            if attempt.attempt_number == cap:
                try:
                    outcome = settlement.settle(user_id, day)
                except TransientStoreError as exc:
                    # The attempt is committed; the next submission retries the payout
                    current_app.logger.warning(f"[settle-deferred] user={user_id} date={day.isoformat()} error={exc}")
            return Admission(attempt=attempt, max_attempts=cap, best=best, settlement=outcome)

    raise TransientStoreError(f'Could not claim an attempt slot for {user_id} on {day.isoformat()} after {retries} tries')
