"""Entry points used by the HTTP layer."""
from datetime import date
from typing import List, Union

from flask import current_app
from sqlalchemy.exc import OperationalError

from colorgame import db
from colorgame.models import Attempt, DailySettlement, LeaderboardEntry
from . import collaborators, leaderboard, ledger, modifiers, scoring, settlement
from .locks import key_lock
from .results import (
    RGB,
    AttemptLimitReached,
    DaySummary,
    InvariantViolation,
    NotPublished,
    RankedEntry,
    Settlement,
    SubmissionResult,
    TransientStoreError,
)


def submit_attempt(user_id: str, day: date, submitted: RGB) -> Union[SubmissionResult, AttemptLimitReached, NotPublished]:
    target = collaborators.get_target(day)
    if isinstance(target, NotPublished):
        current_app.logger.info(f"[attempt-no-target] user={user_id} date={day.isoformat()}")
        return target

    outcome = ledger.submit(user_id, day, submitted, target)
    if isinstance(outcome, AttemptLimitReached):
        _settle_if_pending(user_id, day)
        return outcome

    attempt = outcome.attempt
    exhausted = outcome.attempts_left == 0
    paid = outcome.settlement if isinstance(outcome.settlement, Settlement) else None
    return SubmissionResult(
        score=attempt.score,
        attempt_number=attempt.attempt_number,
        attempts_left=outcome.attempts_left,
        max_attempts=outcome.max_attempts,
        best_score=outcome.best.best_score,
        is_new_best=outcome.best.is_new_best,
        message=scoring.feedback_message(attempt.score, exhausted=exhausted),
        submitted_color=submitted.css(),
        target_color=target.color.css(),
        settlement=paid,
    )


def _settle_if_pending(user_id: str, day: date) -> None:
    # An earlier exhausting submission may have failed to settle
    if settlement.is_settled(user_id, day) or leaderboard.get_entry(user_id, day) is None:
        return
    result = settlement.settle(user_id, day)
    if isinstance(result, Settlement):
        current_app.logger.warning(f"[settle-recovered] user={user_id} date={day.isoformat()}")


def get_leaderboard(day: date, limit: int = None) -> List[RankedEntry]:
    return leaderboard.rank(day, limit)


def get_user_day_summary(user_id: str, day: date) -> DaySummary:
    attempts = (
        Attempt.query
        .filter_by(user_id=user_id, date=day)
        .order_by(Attempt.attempt_number.asc())
        .all()
    )
    numbers = [a.attempt_number for a in attempts]
    if numbers != list(range(1, len(attempts) + 1)):
        current_app.logger.critical(f"[invariant] user={user_id} date={day.isoformat()} attempt_numbers={numbers}")
        raise InvariantViolation(f'Attempt numbers for {user_id} on {day.isoformat()} are not contiguous: {numbers}')

    entry = leaderboard.get_entry(user_id, day)
    if entry is not None:
        best_score = entry.best_score
    else:
        best_score = max((a.score for a in attempts), default=0)

    extra = modifiers.get(user_id, day)
    cap = modifiers.max_attempts(extra)
    return DaySummary(
        date=day,
        attempts=[a.to_dict() for a in attempts],
        best_score=best_score,
        attempts_used=len(attempts),
        attempts_left=max(0, cap - len(attempts)),
        extra_attempts=extra,
        max_attempts=cap,
        rank=leaderboard.user_rank(user_id, day),
        settled=settlement.is_settled(user_id, day),
    )


def grant_extra_attempts(user_id: str, day: date, effect_metadata: dict) -> dict:
    extra = collaborators.extra_attempts_from_effect(effect_metadata)
    total = modifiers.grant(user_id, day, extra)
    return {
        'extra_attempts_applied': extra,
        'total_extra_attempts': total,
        'max_attempts': modifiers.max_attempts(total),
    }


def reset_user_day(user_id: str, day: date) -> dict:
    """Admin correction: forget the user's attempts, best score and payout marker for day.

    Account economy already paid out is left as is.
    """
    with key_lock(user_id, day):
        try:
            scores_deleted = Attempt.query.filter_by(user_id=user_id, date=day).delete(synchronize_session=False)
            leaderboard_rows = LeaderboardEntry.query.filter_by(user_id=user_id, date=day).delete(synchronize_session=False)
            markers = DailySettlement.query.filter_by(user_id=user_id, date=day).delete(synchronize_session=False)
            db.session.commit()
        except OperationalError as exc:
            db.session.rollback()
            raise TransientStoreError(f'Could not reset {user_id} on {day.isoformat()}: {exc}') from exc
        except Exception:
            db.session.rollback()
            raise
    current_app.logger.warning(
        f"[admin-reset] user={user_id} date={day.isoformat()} scores={scores_deleted} leaderboard={leaderboard_rows} settlement={markers}"
    )
    return {
        'user_id': user_id,
        'date': day.isoformat(),
        'scores_deleted': scores_deleted,
        'leaderboard_cleared': leaderboard_rows > 0,
        'settlement_cleared': markers > 0,
    }
