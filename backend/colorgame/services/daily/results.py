"""Typed outcomes and errors shared by the daily services.

Expected outcomes (limit reached, already settled, no color yet) are returned
as values. Infrastructure failures and corrupted data are raised.
"""
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


@dataclass(frozen=True)
class RGB:
    r: int
    g: int
    b: int

    def __post_init__(self):
        for channel, value in (('r', self.r), ('g', self.g), ('b', self.b)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f'{channel} must be an integer')
            if value < 0 or value > 255:
                raise ValueError('RGB values must be between 0 and 255')

    def css(self) -> str:
        return f'rgb({self.r},{self.g},{self.b})'

    def hex(self) -> str:
        return f'#{self.r:02X}{self.g:02X}{self.b:02X}'


@dataclass(frozen=True)
class DailyTarget:
    date: date
    color: RGB
    color_name: str = ''


@dataclass(frozen=True)
class UserEconomy:
    points: int
    level: int
    credits: int

    def to_dict(self):
        return {'points': self.points, 'level': self.level, 'credits': self.credits}


@dataclass(frozen=True)
class NotPublished:
    date: date

    def to_dict(self):
        return {'error': 'No daily color available for this date', 'date': self.date.isoformat()}


@dataclass(frozen=True)
class AttemptLimitReached:
    max_attempts: int
    attempts_used: int

    def to_dict(self):
        return {
            'error': f'Maximum attempts ({self.max_attempts}) reached for today',
            'max_attempts': self.max_attempts,
            'attempts_used': self.attempts_used,
            'attempts_left': 0,
        }


@dataclass(frozen=True)
class AlreadySettled:
    user_id: str
    date: date


@dataclass(frozen=True)
class BestScoreOutcome:
    is_new_best: bool
    best_score: int
    attempts_used: int


@dataclass(frozen=True)
class Settlement:
    points_awarded: int
    credits_awarded: int
    levels_gained: int
    economy: UserEconomy

    def to_dict(self):
        return {
            'points_awarded': self.points_awarded,
            'credits_awarded': self.credits_awarded,
            'levels_gained': self.levels_gained,
            'economy': self.economy.to_dict(),
        }


@dataclass(frozen=True)
class Admission:
    """An attempt that made it through the gate, plus what it caused."""
    attempt: object
    max_attempts: int
    best: BestScoreOutcome
    settlement: object = None

    @property
    def attempts_left(self) -> int:
        return max(0, self.max_attempts - self.attempt.attempt_number)


@dataclass(frozen=True)
class RankedEntry:
    rank: int
    user_id: str
    username: Optional[str]
    best_score: int
    attempts_used: int

    def to_dict(self):
        return {
            'rank': self.rank,
            'user_id': self.user_id,
            'username': self.username,
            'best_score': self.best_score,
            'attempts_used': self.attempts_used,
        }


@dataclass(frozen=True)
class SubmissionResult:
    score: int
    attempt_number: int
    attempts_left: int
    max_attempts: int
    best_score: int
    is_new_best: bool
    message: str
    submitted_color: str
    target_color: str
    settlement: Optional[Settlement] = None

    def to_dict(self):
        return {
            'score': self.score,
            'attempt_number': self.attempt_number,
            'attempts_left': self.attempts_left,
            'max_attempts': self.max_attempts,
            'best_score': self.best_score,
            'is_new_best': self.is_new_best,
            'message': self.message,
            'submitted_color': self.submitted_color,
            'target_color': self.target_color,
            'settlement': self.settlement.to_dict() if self.settlement else None,
        }


@dataclass(frozen=True)
class DaySummary:
    date: date
    attempts: List[dict] = field(default_factory=list)
    best_score: int = 0
    attempts_used: int = 0
    attempts_left: int = 0
    extra_attempts: int = 0
    max_attempts: int = 0
    rank: Optional[int] = None
    settled: bool = False

    def to_dict(self):
        return {
            'date': self.date.isoformat(),
            'attempts': list(self.attempts),
            'best_score': self.best_score,
            'attempts_used': self.attempts_used,
            'attempts_left': self.attempts_left,
            'extra_attempts': self.extra_attempts,
            'max_attempts': self.max_attempts,
            'rank': self.rank,
            'settled': self.settled,
        }


class TransientStoreError(Exception):
    """Store or lock failure; the caller may retry."""


class InvariantViolation(Exception):
    """Stored daily state is inconsistent. Needs an operator, never auto-repaired."""
