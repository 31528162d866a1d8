from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from bookinghub import login_manager
from bookinghub.auth.forms import RegistrationForm, LoginForm
from bookinghub.errors import ValidationError
from bookinghub.storage import storage
from bookinghub.utils.audit import record_audit

auth_bp = Blueprint('auth', __name__, url_prefix='/api')


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'message': 'Unauthorized'}), 401


@auth_bp.route('/register', methods=['POST'])
def register():
    """Create an owner account and sign it in"""
    data = RegistrationForm.load(request.get_json(silent=True))

    errors = {}
    if storage.get_user_by_username(data['username']):
        errors['username'] = ['Username already taken.']
    if storage.get_user_by_email(data['email']):
        errors['email'] = ['Email already registered.']
    if errors:
        raise ValidationError('Registration failed', errors=errors)

    with storage.transaction('register user'):
        user = storage.create_user(data['username'], data['email'], data['password'])
        record_audit('create', 'user', entity_id=user.id,
                     details={'username': user.username, 'email': user.email})

    login_user(user)
    return jsonify(user.to_dict()), 201


@auth_bp.route('/login', methods=['POST'])
def login():
    data = LoginForm.load(request.get_json(silent=True))
    user = storage.get_user_by_username(data['username'])

    if user is None or not user.check_password(data['password']):
        return jsonify({'message': 'Invalid username or password'}), 401

    login_user(user)
    return jsonify(user.to_dict())


@auth_bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return '', 204


@auth_bp.route('/user')
@login_required
def user():
    """Current user, with the business they own if onboarding is done"""
    payload = current_user.to_dict()
    business = storage.get_business_by_user_id(current_user.id)
    payload['business'] = business.to_dict() if business else None
    return jsonify(payload)
