import math
from datetime import date
from typing import Union

from flask import current_app
from sqlalchemy.exc import IntegrityError, OperationalError

from colorgame import db
from colorgame.models import DailySettlement
from . import collaborators, leaderboard
from .locks import key_lock
from .results import AlreadySettled, InvariantViolation, Settlement, TransientStoreError


def is_settled(user_id: str, day: date) -> bool:
    return db.session.query(DailySettlement.id).filter_by(user_id=user_id, date=day).first() is not None


def levels_gained(current_points: int, points_awarded: int) -> int:
    per_level = int(current_app.config.get('POINTS_PER_LEVEL', 1000))
    gained = (current_points + points_awarded) // per_level - current_points // per_level
    return max(0, gained)


def settle(user_id: str, day: date) -> Union[Settlement, AlreadySettled]:
    """Pay out the day's best score to the account, at most once.

    The marker row is inserted first; the unique constraint on
    (user_id, date) decides which caller owns the payout. The account delta
    is committed together with the marker, so a failure leaves nothing
    behind and the call can simply be repeated.
    """
    with key_lock(user_id, day):
        if is_settled(user_id, day):
            return AlreadySettled(user_id=user_id, date=day)

        marker = DailySettlement(user_id=user_id, date=day)
        try:
            db.session.add(marker)
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            current_app.logger.info(f"[settle-skip] user={user_id} date={day.isoformat()} marker claimed elsewhere")
            return AlreadySettled(user_id=user_id, date=day)
        except OperationalError as exc:
            db.session.rollback()
            raise TransientStoreError(f'Could not claim settlement marker: {exc}') from exc

        try:
            entry = leaderboard.get_entry(user_id, day)
            if entry is None:
                raise InvariantViolation(f'Settlement for {user_id} on {day.isoformat()} has no leaderboard entry')
            economy = collaborators.get_economy(user_id, for_update=True)
            if economy is None:
                raise InvariantViolation(f'Settlement for unknown account {user_id}')

            points_awarded = entry.best_score
            credits_awarded = math.ceil(points_awarded / 2)
            levels = levels_gained(economy.points, points_awarded)
            updated = collaborators.apply_economy_delta(user_id, points_awarded, credits_awarded, levels)

            marker.points_awarded = points_awarded
            marker.credits_awarded = credits_awarded
            marker.levels_gained = levels
            db.session.add(marker)
            db.session.commit()
        except InvariantViolation as exc:
            db.session.rollback()
            current_app.logger.critical(f"[invariant] {exc}")
            raise
        except IntegrityError:
            db.session.rollback()
            return AlreadySettled(user_id=user_id, date=day)
        except OperationalError as exc:
            db.session.rollback()
            raise TransientStoreError(f'Settlement failed for {user_id} on {day.isoformat()}: {exc}') from exc
        except Exception:
            db.session.rollback()
            raise

    current_app.logger.info(
        f"[settle] user={user_id} date={day.isoformat()} points=+{points_awarded} credits=+{credits_awarded} levels=+{levels} total_points={updated.points}"
    )
    return Settlement(
        points_awarded=points_awarded,
        credits_awarded=credits_awarded,
        levels_gained=levels,
        economy=updated,
    )
