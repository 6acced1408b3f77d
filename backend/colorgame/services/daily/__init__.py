"""Daily challenge domain services: scoring, attempt admission, leaderboard
and reward settlement.

HTTP routes and socket handlers import from here; nothing in this package
knows about requests or rooms. Every write is scoped to a (user_id, date)
key, see ``locks.key_lock``.
"""
