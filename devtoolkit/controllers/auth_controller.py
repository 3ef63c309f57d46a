# devtoolkit/controllers/auth_controller.py
"""Authentication Controller for the DevToolkit account service
Registration, login/logout, email verification and password reset
"""
from flask import Blueprint, current_app, jsonify, request

from devtoolkit.services.auth_service import AuthService
from devtoolkit.utils.decorators import bearer_token
from devtoolkit.utils.device import DeviceInfo

auth_bp = Blueprint('auth', __name__)


def _json_body():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _all_strings(*values):
    return all(isinstance(value, str) for value in values)


@auth_bp.route('/register', methods=['POST'])
def register():
    """CREATE: account registration"""
    data = _json_body()
    email = data.get('email')
    password = data.get('password')
    if not email or not password:
        return jsonify({'success': False, 'message': 'Email and password are required'}), 400
    if not _all_strings(email, password):
        return jsonify({'success': False, 'message': 'Email and password must be strings'}), 400

    result = AuthService.register(email, password, data.get('name', ''),
                                  DeviceInfo.from_request(request))
    status = 201 if result.success else 400
    return jsonify(result.to_dict()), status


@auth_bp.route('/login', methods=['POST'])
def login():
    """READ: credential check, token issue and login cookie"""
    data = _json_body()
    email = data.get('email')
    password = data.get('password')
    if not email or not password:
        return jsonify({'success': False, 'message': 'Email and password are required'}), 400
    if not _all_strings(email, password):
        return jsonify({'success': False, 'message': 'Email and password must be strings'}), 400

    result = AuthService.login(email, password, DeviceInfo.from_request(request))
    if not result.success:
        return jsonify(result.to_dict()), 401

    response = jsonify(result.to_dict())
    response.set_cookie(
        current_app.config['AUTH_COOKIE_NAME'],
        result.token,
        max_age=current_app.config['JWT_EXPIRES_DAYS'] * 24 * 60 * 60,
        httponly=True,
        secure=current_app.config['AUTH_COOKIE_SECURE'],
        samesite='Lax',
        path='/',
    )
    return response


@auth_bp.route('/logout', methods=['POST'])
def logout():
    """Close the device session and clear the login cookie"""
    token = bearer_token()
    if token:
        AuthService.logout(token)

    response = jsonify({'success': True, 'message': 'Logged out successfully'})
    response.delete_cookie(current_app.config['AUTH_COOKIE_NAME'], path='/')
    return response


@auth_bp.route('/verify', methods=['POST'])
def verify_email():
    token = _json_body().get('token') or request.args.get('token')
    if not token or not _all_strings(token):
        return jsonify({'success': False, 'message': 'Verification token is required'}), 400

    result = AuthService.verify_email(token)
    return jsonify(result.to_dict()), result.http_status


@auth_bp.route('/forgot-password', methods=['POST'])
def forgot_password():
    email = _json_body().get('email')
    if not email or not _all_strings(email):
        return jsonify({'success': False, 'message': 'Email is required'}), 400

    result = AuthService.request_password_reset(email)
    return jsonify(result.to_dict()), 200


@auth_bp.route('/reset-password', methods=['POST'])
def reset_password():
    """UPDATE: password replacement with a reset token"""
    data = _json_body()
    token = data.get('token')
    password = data.get('password')
    if not token or not password:
        return jsonify({'success': False, 'message': 'Token and password are required'}), 400
    if not _all_strings(token, password):
        return jsonify({'success': False, 'message': 'Token and password must be strings'}), 400

    result = AuthService.reset_password(token, password)
    return jsonify(result.to_dict()), result.http_status
