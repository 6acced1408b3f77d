"""Adapters over data this core reads but does not own: the published daily
color, the account economy columns, and item effect metadata handed over by
the inventory flow.
"""
from datetime import date
from typing import Optional, Union

from colorgame import db
from colorgame.models import Account, DailyColor
from .results import RGB, DailyTarget, NotPublished, UserEconomy


def get_target(day: date) -> Union[DailyTarget, NotPublished]:
    row = DailyColor.query.filter_by(date=day).first()
    if row is None:
        return NotPublished(date=day)
    return DailyTarget(date=row.date, color=RGB(row.r, row.g, row.b), color_name=row.color_name)


def get_economy(user_id: str, for_update: bool = False) -> Optional[UserEconomy]:
    query = db.session.query(Account).filter(Account.id == user_id)
    if for_update:
        query = query.with_for_update()
    account = query.first()
    if account is None:
        return None
    return UserEconomy(points=account.points, level=account.level, credits=account.credits)


def apply_economy_delta(user_id: str, points_delta: int, credits_delta: int, level_delta: int) -> UserEconomy:
    """Add the deltas in place on the account row. Does not commit."""
    db.session.query(Account).filter(Account.id == user_id).update(
        {
            Account.points: Account.points + points_delta,
            Account.credits: Account.credits + credits_delta,
            Account.level: Account.level + level_delta,
        },
        synchronize_session=False,
    )
    account = db.session.query(Account).filter(Account.id == user_id).populate_existing().first()
    return UserEconomy(points=account.points, level=account.level, credits=account.credits)


def extra_attempts_from_effect(effect_metadata: dict) -> int:
    """Number of attempts an ``extra_attempt`` item grants.

    Missing, unparsable or non-positive amounts fall back to a single attempt.
    Other effect types are not ours to interpret.
    """
    if (effect_metadata or {}).get('effect_type') != 'extra_attempt':
        raise ValueError('Item has no extra attempt effect')
    raw = effect_metadata.get('extra_attempts')
    parsed = 0
    if isinstance(raw, bool):
        parsed = 0
    elif isinstance(raw, (int, float)):
        parsed = int(raw)
    elif isinstance(raw, str):
        try:
            parsed = int(raw.strip())
        except ValueError:
            parsed = 0
    return parsed if parsed > 0 else 1
