from datetime import date, datetime, timezone

from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError

from colorgame import db
from colorgame.models import AttemptModifier
from .locks import key_lock
from .results import TransientStoreError


def max_attempts(extra_attempts: int) -> int:
    base = int(current_app.config.get('BASE_DAILY_ATTEMPTS', 5))
    ceiling = int(current_app.config.get('MAX_DAILY_ATTEMPTS', 10))
    return min(ceiling, base + max(0, extra_attempts))


def get(user_id: str, day: date) -> int:
    """Extra attempts granted to user_id for day; 0 when nothing was granted."""
    value = (
        db.session.query(AttemptModifier.extra_attempts)
        .filter(AttemptModifier.user_id == user_id, AttemptModifier.date == day)
        .scalar()
    )
    return int(value or 0)


def grant(user_id: str, day: date, n: int) -> int:
    """Add n extra attempts for (user_id, day) and return the new total.

    Grants only ever accumulate. The increment happens in SQL so concurrent
    grants add up instead of overwriting each other; if two first grants race
    on the insert, the loser retries as an increment.
    """
    if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
        raise ValueError('n must be a positive integer')

    with key_lock(user_id, day):
        for _ in range(2):
            try:
                now = datetime.now(timezone.utc)
                updated = (
                    db.session.query(AttemptModifier)
                    .filter(AttemptModifier.user_id == user_id, AttemptModifier.date == day)
                    .update(
                        {
                            AttemptModifier.extra_attempts: AttemptModifier.extra_attempts + n,
                            AttemptModifier.updated_at: now,
                        },
                        synchronize_session=False,
                    )
                )
                if not updated:
                    db.session.add(AttemptModifier(user_id=user_id, date=day, extra_attempts=n))
                    db.session.flush()
                total = get(user_id, day)
                db.session.commit()
            except IntegrityError:
                db.session.rollback()
                current_app.logger.info(f"[modifier-conflict] user={user_id} date={day.isoformat()} retrying as increment")
                continue
            except OperationalError as exc:
                db.session.rollback()
                raise TransientStoreError(f'Could not grant extra attempts: {exc}') from exc
            current_app.logger.info(f"[modifier-grant] user={user_id} date={day.isoformat()} n={n} total={total}")
            return total

    raise TransientStoreError(f'Could not grant extra attempts to {user_id} on {day.isoformat()}')
