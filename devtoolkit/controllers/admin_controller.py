# devtoolkit/controllers/admin_controller.py
"""Admin Controller for the DevToolkit account service
Account management, analytics and suggestion responses
"""
from flask import Blueprint, g, jsonify, request

from devtoolkit.services import admin_service, suggestion_service
from devtoolkit.utils.decorators import admin_required, token_required

admin_bp = Blueprint('admin', __name__)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _missing(*names):
    return jsonify({'success': False, 'message': f"{', '.join(names)} required"}), 400


def _admin_id():
    return int(g.current_claims.user_id)


@admin_bp.route('/users', methods=['GET'])
@token_required
@admin_required
def list_users():
    users = admin_service.list_users()
    return jsonify({'success': True, 'users': [u.to_dict() for u in users]})


@admin_bp.route('/users/status', methods=['POST'])
@token_required
@admin_required
def set_user_status():
    data = _json_body()
    if not data.get('userId'):
        return _missing('userId')

    result = admin_service.set_user_status(
        _admin_id(),
        data['userId'],
        is_active=data.get('isActive'),
        is_suspended=data.get('isSuspended'),
        reason=data.get('reason'),
    )
    return jsonify(result.to_dict()), result.http_status


@admin_bp.route('/users/limits', methods=['POST'])
@token_required
@admin_required
def set_user_limits():
    data = _json_body()
    if not data.get('userId') or data.get('dailyLimit') is None or data.get('monthlyLimit') is None:
        return _missing('userId', 'dailyLimit', 'monthlyLimit')

    result = admin_service.set_user_limits(_admin_id(), data['userId'],
                                           data['dailyLimit'], data['monthlyLimit'])
    return jsonify(result.to_dict()), result.http_status


@admin_bp.route('/users/role', methods=['POST'])
@token_required
@admin_required
def set_user_role():
    data = _json_body()
    if not data.get('userId') or not data.get('role'):
        return _missing('userId', 'role')

    result = admin_service.set_user_role(_admin_id(), data['userId'], data['role'])
    return jsonify(result.to_dict()), result.http_status


@admin_bp.route('/users/unlock', methods=['POST'])
@token_required
@admin_required
def unlock_user():
    data = _json_body()
    if not data.get('userId'):
        return _missing('userId')

    result = admin_service.unlock_user(_admin_id(), data['userId'])
    return jsonify(result.to_dict()), result.http_status


@admin_bp.route('/analytics', methods=['GET'])
@token_required
@admin_required
def analytics():
    return jsonify({
        'success': True,
        'analytics': admin_service.get_analytics(),
        'suggestions': suggestion_service.stats(),
    })


@admin_bp.route('/suggestions', methods=['GET'])
@token_required
@admin_required
def list_suggestions():
    limit = max(1, min(request.args.get('limit', 100, type=int) or 100, 500))
    suggestions = suggestion_service.list_all(
        status=request.args.get('status'),
        kind=request.args.get('type'),
        limit=limit,
    )
    return jsonify({
        'success': True,
        'suggestions': [s.to_dict(include_author=True) for s in suggestions],
        'stats': suggestion_service.stats(),
    })


@admin_bp.route('/suggestions/respond', methods=['POST'])
@token_required
@admin_required
def respond_to_suggestion():
    data = _json_body()
    if not data.get('suggestionId') or not data.get('status'):
        return _missing('suggestionId', 'status')

    result = suggestion_service.update_status(
        data['suggestionId'],
        data['status'],
        _admin_id(),
        admin_response=data.get('adminResponse'),
    )
    return jsonify(result.to_dict()), result.http_status
