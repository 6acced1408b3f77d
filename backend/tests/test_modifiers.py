import pytest

from colorgame.services.daily import modifiers
from colorgame.services.daily.collaborators import extra_attempts_from_effect


def test_get_defaults_to_zero(flask_app, today):
    assert modifiers.get('u1', today) == 0
    assert modifiers.max_attempts(modifiers.get('u1', today)) == 5


def test_grants_accumulate(flask_app, today):
    assert modifiers.grant('u1', today, 2) == 2
    assert modifiers.grant('u1', today, 1) == 3
    assert modifiers.get('u1', today) == 3
    assert modifiers.max_attempts(3) == 8


def test_cap_is_clamped_to_ten(flask_app, today):
    modifiers.grant('u1', today, 4)
    modifiers.grant('u1', today, 4)
    assert modifiers.get('u1', today) == 8
    assert modifiers.max_attempts(modifiers.get('u1', today)) == 10


def test_grants_are_scoped_to_user_and_day(flask_app, today):
    from datetime import timedelta
    modifiers.grant('u1', today, 2)
    assert modifiers.get('u2', today) == 0
    assert modifiers.get('u1', today - timedelta(days=1)) == 0


@pytest.mark.parametrize('n', [0, -1, 1.5, True])
def test_grant_rejects_non_positive_amounts(flask_app, today, n):
    with pytest.raises(ValueError):
        modifiers.grant('u1', today, n)
    assert modifiers.get('u1', today) == 0


@pytest.mark.parametrize('metadata,expected', [
    ({'effect_type': 'extra_attempt'}, 1),
    ({'effect_type': 'extra_attempt', 'extra_attempts': 2}, 2),
    ({'effect_type': 'extra_attempt', 'extra_attempts': 3.0}, 3),
    ({'effect_type': 'extra_attempt', 'extra_attempts': '4'}, 4),
    ({'effect_type': 'extra_attempt', 'extra_attempts': 'lots'}, 1),
    ({'effect_type': 'extra_attempt', 'extra_attempts': 0}, 1),
    ({'effect_type': 'extra_attempt', 'extra_attempts': -2}, 1),
])
def test_extra_attempts_from_effect(metadata, expected):
    assert extra_attempts_from_effect(metadata) == expected


def test_other_effects_are_rejected():
    with pytest.raises(ValueError):
        extra_attempts_from_effect({'effect_type': 'hint'})
    with pytest.raises(ValueError):
        extra_attempts_from_effect({})
