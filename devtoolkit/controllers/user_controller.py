# devtoolkit/controllers/user_controller.py
"""User Controller for the DevToolkit account service
Profile, usage gate and accounting, sessions and suggestions for the signed-in user
"""
from flask import Blueprint, g, jsonify, request

from devtoolkit.errors import ErrorKind
from devtoolkit.schemas import PatchError, UserPatch
from devtoolkit.services import suggestion_service
from devtoolkit.services.auth_service import AuthService
from devtoolkit.services.quota_service import QuotaService
from devtoolkit.utils.decorators import token_required

user_bp = Blueprint('user', __name__)

MAX_HISTORY = 200


def _json_body():
    """JSON object body, or {} for anything else"""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _current_user():
    return AuthService.get_user_by_id(g.current_claims.user_id)


def _user_not_found():
    return jsonify({'success': False, 'message': 'User not found'}), 404


@user_bp.route('/profile', methods=['GET'])
@token_required
def get_profile():
    user = _current_user()
    if not user:
        return _user_not_found()
    return jsonify({'success': True, 'user': user.to_dict()})


@user_bp.route('/profile', methods=['PUT'])
@token_required
def update_profile():
    """UPDATE: profile and preferences only"""
    user = _current_user()
    if not user:
        return _user_not_found()

    try:
        patch = UserPatch.from_payload(request.get_json(silent=True))
    except PatchError as e:
        return jsonify({'success': False, 'message': str(e)}), 400

    if patch.is_empty():
        return jsonify({'success': False, 'message': 'No valid fields to update'}), 400

    AuthService.update_user(user.id, patch)
    return jsonify({'success': True, 'message': 'Profile updated successfully',
                    'user': AuthService.get_user_by_id(user.id).to_dict()})


@user_bp.route('/change-password', methods=['POST'])
@token_required
def change_password():
    data = _json_body()
    current_password = data.get('currentPassword')
    new_password = data.get('newPassword')
    if not current_password or not new_password:
        return jsonify({'success': False,
                        'message': 'Current password and new password are required'}), 400
    if not isinstance(current_password, str) or not isinstance(new_password, str):
        return jsonify({'success': False, 'message': 'Passwords must be strings'}), 400

    result = AuthService.change_password(g.current_claims.user_id, current_password, new_password)
    return jsonify(result.to_dict()), result.http_status


@user_bp.route('/check-limits', methods=['GET'])
@token_required
def check_limits():
    """Usage gate, without consuming a unit"""
    quota_service = QuotaService()
    check = quota_service.can_user_use_ai(g.current_claims.user_id)
    if check.error is ErrorKind.NOT_FOUND:
        return _user_not_found()

    return jsonify({
        'success': True,
        'canUse': check.can_use,
        'reason': check.reason,
        'usage': quota_service.get_usage_summary(g.current_claims.user_id),
    })


@user_bp.route('/track-usage', methods=['POST'])
@token_required
def track_usage():
    """Gate, then record one AI call"""
    data = _json_body()
    tool_name = data.get('toolName')
    if not isinstance(tool_name, str) or not tool_name.strip():
        return jsonify({'success': False, 'message': 'toolName is required'}), 400
    tool_name = tool_name.strip()
    success = data.get('success', True)
    if not isinstance(success, bool):
        return jsonify({'success': False, 'message': 'success must be a boolean'}), 400

    quota_service = QuotaService()
    user_id = g.current_claims.user_id
    check = quota_service.can_user_use_ai(user_id)
    if not check.can_use:
        if check.error is ErrorKind.NOT_FOUND:
            return _user_not_found()
        # 403 for suspended accounts, 429 once the daily limit is spent
        return jsonify({
            'success': False,
            'message': check.reason,
            'usage': quota_service.get_usage_summary(user_id),
        }), check.http_status

    quota_service.update_usage(user_id, tool_name, success)
    return jsonify({'success': True, 'message': 'Usage recorded',
                    'usage': quota_service.get_usage_summary(user_id)})


@user_bp.route('/usage-history', methods=['GET'])
@token_required
def usage_history():
    limit = max(1, min(request.args.get('limit', 50, type=int) or 50, MAX_HISTORY))
    history = QuotaService().get_usage_history(g.current_claims.user_id, limit=limit)
    return jsonify({'success': True, 'history': history})


@user_bp.route('/sessions', methods=['GET'])
@token_required
def sessions():
    active = AuthService.list_sessions(g.current_claims.user_id)
    return jsonify({'success': True, 'sessions': [s.to_dict() for s in active]})


@user_bp.route('/suggestions', methods=['GET'])
@token_required
def list_suggestions():
    suggestions = suggestion_service.list_for_user(int(g.current_claims.user_id))
    return jsonify({'success': True, 'suggestions': [s.to_dict() for s in suggestions]})


@user_bp.route('/suggestions', methods=['POST'])
@token_required
def create_suggestion():
    user = _current_user()
    if not user:
        return _user_not_found()

    result = suggestion_service.create_suggestion(user.id, _json_body())
    status = 201 if result.success else result.http_status
    return jsonify(result.to_dict()), status


@user_bp.route('/suggestions/<int:suggestion_id>/vote', methods=['POST'])
@token_required
def vote_suggestion(suggestion_id):
    user = _current_user()
    if not user:
        return _user_not_found()

    result = suggestion_service.vote(suggestion_id, user.id, _json_body().get('vote'))
    return jsonify(result.to_dict()), result.http_status
