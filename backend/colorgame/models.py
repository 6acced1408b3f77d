from colorgame import db
from datetime import datetime, timezone


def _utcnow():
    return datetime.now(timezone.utc)


class Account(db.Model):
    """Economy view of a player account.

    Identity and profile data belong to the account service; this core only
    reads and writes the points/level/credits columns.
    """
    __tablename__ = 'account'
    id = db.Column(db.String(64), primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    points = db.Column(db.Integer, nullable=False, default=0)
    level = db.Column(db.Integer, nullable=False, default=1)
    credits = db.Column(db.Integer, nullable=False, default=0)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'points': self.points,
            'level': self.level,
            'credits': self.credits,
        }


class DailyColor(db.Model):
    __tablename__ = 'daily_color'
    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.Date, unique=True, nullable=False, index=True)
    color_name = db.Column(db.String(128), nullable=False)
    r = db.Column(db.Integer, nullable=False)
    g = db.Column(db.Integer, nullable=False)
    b = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            'date': self.date.isoformat(),
            'color_name': self.color_name,
            'rgb': f'rgb({self.r},{self.g},{self.b})',
            'hex': f'#{self.r:02X}{self.g:02X}{self.b:02X}',
        }


class Attempt(db.Model):
    __tablename__ = 'daily_attempt'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'date', 'attempt_number', name='uq_daily_attempt_user_date_number'),
        db.CheckConstraint('score >= 0 AND score <= 100', name='ck_daily_attempt_score'),
        db.CheckConstraint('attempt_number >= 1', name='ck_daily_attempt_number'),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    date = db.Column(db.Date, nullable=False, index=True)
    attempt_number = db.Column(db.Integer, nullable=False)
    score = db.Column(db.Integer, nullable=False)
    submitted_r = db.Column(db.Integer, nullable=False)
    submitted_g = db.Column(db.Integer, nullable=False)
    submitted_b = db.Column(db.Integer, nullable=False)
    target_r = db.Column(db.Integer, nullable=False)
    target_g = db.Column(db.Integer, nullable=False)
    target_b = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'date': self.date.isoformat(),
            'attempt_number': self.attempt_number,
            'score': self.score,
            'submitted_color': f'rgb({self.submitted_r},{self.submitted_g},{self.submitted_b})',
            'target_color': f'rgb({self.target_r},{self.target_g},{self.target_b})',
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }


class AttemptModifier(db.Model):
    __tablename__ = 'daily_attempt_modifier'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'date', name='uq_daily_attempt_modifier_user_date'),
        db.CheckConstraint('extra_attempts >= 0', name='ck_daily_attempt_modifier_extra'),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False)
    date = db.Column(db.Date, nullable=False)
    extra_attempts = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)


class LeaderboardEntry(db.Model):
    __tablename__ = 'daily_leaderboard'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'date', name='uq_daily_leaderboard_user_date'),
        db.Index('ix_daily_leaderboard_date_score', 'date', 'best_score'),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False)
    date = db.Column(db.Date, nullable=False)
    best_score = db.Column(db.Integer, nullable=False)
    attempts_used = db.Column(db.Integer, nullable=False)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)

    def to_dict(self):
        return {
            'user_id': self.user_id,
            'date': self.date.isoformat(),
            'best_score': self.best_score,
            'attempts_used': self.attempts_used,
        }


class DailySettlement(db.Model):
    """Marker row: the day's reward for (user_id, date) has been paid out."""
    __tablename__ = 'daily_settlement'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'date', name='uq_daily_settlement_user_date'),
    )
    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False)
    date = db.Column(db.Date, nullable=False)
    points_awarded = db.Column(db.Integer, nullable=False, default=0)
    credits_awarded = db.Column(db.Integer, nullable=False, default=0)
    levels_gained = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime(timezone=True), nullable=False, default=_utcnow)
