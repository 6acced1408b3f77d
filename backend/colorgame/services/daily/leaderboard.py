from datetime import date, datetime, timezone
from typing import List, Optional

from flask import current_app
from sqlalchemy import func

from colorgame import db
from colorgame.models import Account, Attempt, LeaderboardEntry
from .results import BestScoreOutcome, RankedEntry


def _ranking_order():
    # Higher score first, then fewer attempts, then whoever got there first
    return (
        LeaderboardEntry.best_score.desc(),
        LeaderboardEntry.attempts_used.asc(),
        LeaderboardEntry.updated_at.asc(),
        LeaderboardEntry.id.asc(),
    )


def record(attempt: Attempt) -> BestScoreOutcome:
    """Fold a freshly inserted attempt into the user's best-score row.

    Only a strictly higher score replaces the best; a tie keeps the earlier
    attempt. Runs inside the caller's transaction and does not commit.
    """
    entry = (
        LeaderboardEntry.query
        .filter_by(user_id=attempt.user_id, date=attempt.date)
        .first()
    )
    if entry is None:
        entry = LeaderboardEntry(
            user_id=attempt.user_id,
            date=attempt.date,
            best_score=attempt.score,
            attempts_used=attempt.attempt_number,
        )
        db.session.add(entry)
        db.session.flush()
        return BestScoreOutcome(is_new_best=True, best_score=attempt.score, attempts_used=attempt.attempt_number)

    if attempt.score > entry.best_score:
        previous = entry.best_score
        entry.best_score = attempt.score
        entry.attempts_used = attempt.attempt_number
        entry.updated_at = datetime.now(timezone.utc)
        db.session.add(entry)
        db.session.flush()
        current_app.logger.info(
            f"[leaderboard-best] user={attempt.user_id} date={attempt.date.isoformat()} {previous} -> {attempt.score} at attempt={attempt.attempt_number}"
        )
        return BestScoreOutcome(is_new_best=True, best_score=attempt.score, attempts_used=attempt.attempt_number)

    return BestScoreOutcome(is_new_best=False, best_score=entry.best_score, attempts_used=entry.attempts_used)


def get_entry(user_id: str, day: date) -> Optional[LeaderboardEntry]:
    return LeaderboardEntry.query.filter_by(user_id=user_id, date=day).first()


def rank(day: date, limit: int = None) -> List[RankedEntry]:
    if limit is None:
        limit = int(current_app.config.get('LEADERBOARD_LIMIT', 100))
    rows = (
        db.session.query(LeaderboardEntry, Account.username)
        .outerjoin(Account, Account.id == LeaderboardEntry.user_id)
        .filter(LeaderboardEntry.date == day)
        .order_by(*_ranking_order())
        .limit(limit)
        .all()
    )
    return [
        RankedEntry(
            rank=position,
            user_id=entry.user_id,
            username=username,
            best_score=entry.best_score,
            attempts_used=entry.attempts_used,
        )
        for position, (entry, username) in enumerate(rows, start=1)
    ]


def user_rank(user_id: str, day: date) -> Optional[int]:
    ranked = (
        db.session.query(
            LeaderboardEntry.user_id.label('user_id'),
            func.row_number().over(order_by=_ranking_order()).label('rank'),
        )
        .filter(LeaderboardEntry.date == day)
        .subquery()
    )
    value = db.session.query(ranked.c.rank).filter(ranked.c.user_id == user_id).scalar()
    return int(value) if value is not None else None
