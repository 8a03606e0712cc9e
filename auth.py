import hmac
import secrets
from functools import wraps

from flask import current_app, request, session
from flask_bcrypt import Bcrypt
from flask_login import LoginManager, login_user, logout_user
from sqlalchemy.exc import IntegrityError

from errors import CsrfError, DuplicateEmail, InvalidCredentials, ValidationError
from models import db, User

CSRF_SESSION_KEY = 'csrf_token'
CSRF_FORM_FIELD = 'csrf_token'

bcrypt = Bcrypt()
login_manager = LoginManager()
login_manager.login_view = 'login'
login_manager.login_message = 'Please log in to continue.'
login_manager.login_message_category = 'info'


@login_manager.user_loader
def load_user(user_id):
    return db.session.get(User, int(user_id))


def register(email, password):
    email = (email or '').strip()
    password = password or ''

    errors = []
    if not email:
        errors.append('Email is required.')
    if not password:
        errors.append('Password is required.')
    if errors:
        raise ValidationError(errors)

    password_hash = bcrypt.generate_password_hash(password).decode('utf-8')
    user = User(email=email, password_hash=password_hash)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        current_app.logger.info('Registration rejected for an existing email')
        raise DuplicateEmail()

    login_user(user)
    current_app.logger.info('Registered user_id=%s', user.id)
    return user.id


def login(email, password):
    email = (email or '').strip()
    password = password or ''

    user = User.query.filter_by(email=email).first() if email else None
    if user is None:
        # same cost as a real verification
        bcrypt.generate_password_hash(password or 'x')
        current_app.logger.warning('Failed login for unknown email')
        raise InvalidCredentials()
    if not bcrypt.check_password_hash(user.password_hash, password):
        current_app.logger.warning('Failed login for user_id=%s', user.id)
        raise InvalidCredentials()

    login_user(user)
    current_app.logger.info('Logged in user_id=%s', user.id)
    return user.id


def logout():
    logout_user()
    # Drops the CSRF token too; the next page view issues a fresh one
    session.clear()


def issue_csrf_token():
    token = session.get(CSRF_SESSION_KEY)
    if not token:
        token = secrets.token_hex(32)
        session[CSRF_SESSION_KEY] = token
    return token


def verify_csrf(supplied):
    expected = session.get(CSRF_SESSION_KEY)
    if not expected or not supplied:
        raise CsrfError('Missing CSRF token.')
    if not hmac.compare_digest(expected.encode('utf-8'), supplied.encode('utf-8')):
        raise CsrfError('CSRF token mismatch.')


def csrf_protected(f):
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verify_csrf(request.form.get(CSRF_FORM_FIELD, ''))
        return f(*args, **kwargs)
    return decorated_function
