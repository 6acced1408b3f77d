from datetime import date, datetime
from flask import Blueprint, jsonify, request, current_app
from colorgame import socketio
from colorgame.models import DailyColor
from colorgame.services.daily import collaborators, engine
from colorgame.services.daily.results import (
    RGB,
    AttemptLimitReached,
    InvariantViolation,
    NotPublished,
    TransientStoreError,
)


daily = Blueprint('daily', __name__)


def _parse_day(value):
    """YYYY-MM-DD -> date; missing means today."""
    if not value:
        return date.today()
    return datetime.strptime(value, '%Y-%m-%d').date()


def _emit_leaderboard_update(day: date) -> None:
    socketio.emit('leaderboard_update', {'date': day.isoformat()}, to=f"leaderboard:{day.isoformat()}", namespace='/ws')


@daily.errorhandler(TransientStoreError)
def handle_transient(exc):
    current_app.logger.warning(f"[transient] {exc}")
    return jsonify({'error': 'Temporarily unavailable, please retry'}), 503


@daily.errorhandler(InvariantViolation)
def handle_invariant(exc):
    current_app.logger.critical(f"[invariant] {exc}")
    return jsonify({'error': 'Daily challenge data is inconsistent'}), 500


@daily.route('/color', methods=['GET'])
def get_daily_color():
    try:
        day = _parse_day(request.args.get('date'))
    except ValueError:
        return jsonify({'error': 'date must be in YYYY-MM-DD format'}), 400
    color = DailyColor.query.filter_by(date=day).first()
    if not color:
        return jsonify(NotPublished(date=day).to_dict()), 404
    return jsonify(color.to_dict())


@daily.route('/colors', methods=['GET'])
def list_daily_colors():
    colors = DailyColor.query.order_by(DailyColor.date.desc()).all()
    return jsonify([c.to_dict() for c in colors])


@daily.route('/attempts', methods=['POST'])
def submit_attempt():
    data = request.get_json(silent=True) or {}
    user_id = data.get('user_id')
    if not user_id:
        return jsonify({'error': 'user_id is required'}), 400
    try:
        submitted = RGB(data.get('r'), data.get('g'), data.get('b'))
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400

    if collaborators.get_economy(user_id) is None:
        return jsonify({'error': 'User not found'}), 404

    day = date.today()
    result = engine.submit_attempt(user_id, day, submitted)
    if isinstance(result, NotPublished):
        return jsonify(result.to_dict()), 404
    if isinstance(result, AttemptLimitReached):
        return jsonify(result.to_dict()), 400

    if result.is_new_best:
        _emit_leaderboard_update(day)
    return jsonify(result.to_dict())


@daily.route('/leaderboard', methods=['GET'])
def get_leaderboard():
    try:
        day = _parse_day(request.args.get('date'))
    except ValueError:
        return jsonify({'error': 'date must be in YYYY-MM-DD format'}), 400
    max_limit = int(current_app.config.get('LEADERBOARD_LIMIT', 100))
    limit = request.args.get('limit', default=max_limit, type=int)
    if limit is None or limit < 1:
        return jsonify({'error': 'limit must be a positive integer'}), 400
    entries = engine.get_leaderboard(day, min(limit, max_limit))
    return jsonify([e.to_dict() for e in entries])


@daily.route('/summary', methods=['GET'])
def get_summary():
    user_id = request.args.get('user_id')
    if not user_id:
        return jsonify({'error': 'user_id is required'}), 400
    try:
        day = _parse_day(request.args.get('date'))
    except ValueError:
        return jsonify({'error': 'date must be in YYYY-MM-DD format'}), 400
    return jsonify(engine.get_user_day_summary(user_id, day).to_dict())


@daily.route('/modifiers', methods=['POST'])
def apply_item_effect():
    """Called by the inventory flow after a consumable was used."""
    data = request.get_json(silent=True) or {}
    user_id = data.get('user_id')
    if not user_id:
        return jsonify({'error': 'user_id is required'}), 400
    if collaborators.get_economy(user_id) is None:
        return jsonify({'error': 'User not found'}), 404
    try:
        granted = engine.grant_extra_attempts(user_id, date.today(), data.get('effect_metadata') or {})
    except ValueError as exc:
        return jsonify({'error': str(exc)}), 400
    return jsonify(granted)


@daily.route('/admin/reset', methods=['POST'])
def reset_user_day():
    data = request.get_json(silent=True) or {}
    user_id = data.get('user_id')
    if not user_id:
        return jsonify({'error': 'user_id is required'}), 400
    try:
        day = _parse_day(data.get('date'))
    except ValueError:
        return jsonify({'error': 'date must be in YYYY-MM-DD format'}), 400
    result = engine.reset_user_day(user_id, day)
    _emit_leaderboard_update(day)
    return jsonify(result)
