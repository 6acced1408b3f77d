from datetime import datetime, timedelta, timezone

from colorgame import db
from colorgame.models import Attempt, LeaderboardEntry
from colorgame.services.daily import leaderboard


def _attempt(user_id, day, number, score):
    attempt = Attempt(
        user_id=user_id, date=day, attempt_number=number, score=score,
        submitted_r=0, submitted_g=0, submitted_b=0,
        target_r=0, target_g=0, target_b=0,
    )
    db.session.add(attempt)
    db.session.flush()
    return attempt


def _entry(user_id, day, best, used, updated_at=None):
    stamp = updated_at or datetime.now(timezone.utc)
    db.session.add(LeaderboardEntry(user_id=user_id, date=day, best_score=best, attempts_used=used, created_at=stamp, updated_at=stamp))
    db.session.commit()


def test_first_attempt_creates_entry(flask_app, today):
    outcome = leaderboard.record(_attempt('u1', today, 1, 40))
    assert (outcome.is_new_best, outcome.best_score, outcome.attempts_used) == (True, 40, 1)
    assert leaderboard.get_entry('u1', today).best_score == 40


def test_only_strict_improvement_replaces_best(flask_app, today):
    scores = [40, 95, 95, 10, 60]
    outcomes = [leaderboard.record(_attempt('u1', today, n, s)) for n, s in enumerate(scores, start=1)]
    db.session.commit()

    assert [o.is_new_best for o in outcomes] == [True, True, False, False, False]
    entry = leaderboard.get_entry('u1', today)
    assert entry.best_score == max(scores)
    # earliest attempt reaching the max wins
    assert entry.attempts_used == 2


def test_lower_score_keeps_existing_entry(flask_app, today):
    leaderboard.record(_attempt('u1', today, 1, 80))
    outcome = leaderboard.record(_attempt('u1', today, 2, 79))
    assert (outcome.is_new_best, outcome.best_score, outcome.attempts_used) == (False, 80, 1)


def test_rank_orders_by_score_then_attempts(flask_app, make_account, today):
    for user_id in ('A', 'B', 'C'):
        make_account(user_id)
    _entry('A', today, 90, 3)
    _entry('B', today, 90, 2)
    _entry('C', today, 95, 5)

    ranked = leaderboard.rank(today, 10)
    assert [(r.rank, r.user_id, r.best_score, r.attempts_used) for r in ranked] == [
        (1, 'C', 95, 5),
        (2, 'B', 90, 2),
        (3, 'A', 90, 3),
    ]
    assert ranked[0].username == 'name-C'


def test_rank_breaks_full_ties_by_earliest_update(flask_app, today):
    base = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)
    _entry('late', today, 80, 1, updated_at=base + timedelta(minutes=5))
    _entry('early', today, 80, 1, updated_at=base)

    ranked = leaderboard.rank(today, 10)
    assert [r.user_id for r in ranked] == ['early', 'late']
    assert [r.rank for r in ranked] == [1, 2]


def test_rank_respects_limit_and_day(flask_app, today):
    for n in range(5):
        _entry(f'u{n}', today, 50 + n, 1)
    _entry('yesterday', today - timedelta(days=1), 100, 1)

    ranked = leaderboard.rank(today, 3)
    assert [r.user_id for r in ranked] == ['u4', 'u3', 'u2']
    assert [r.rank for r in ranked] == [1, 2, 3]


def test_rank_is_stable_across_requeries(flask_app, today):
    for n in range(4):
        _entry(f'u{n}', today, 70, 2)
    assert leaderboard.rank(today, 10) == leaderboard.rank(today, 10)


def test_rank_of_empty_day(flask_app, today):
    assert leaderboard.rank(today, 10) == []


def test_user_rank_matches_board(flask_app, today):
    _entry('A', today, 90, 3)
    _entry('B', today, 90, 2)
    _entry('C', today, 95, 5)
    assert leaderboard.user_rank('C', today) == 1
    assert leaderboard.user_rank('B', today) == 2
    assert leaderboard.user_rank('A', today) == 3
    assert leaderboard.user_rank('nobody', today) is None
