from flask import Blueprint, render_template, redirect, url_for, request, session, current_app
from flask_login import login_user, logout_user, current_user
from maintrack.models import ROLE_SUPERUSER, ROLE_SPV, ROLE_TECHNICIAN
from maintrack.errors import MaintrackError

auth = Blueprint('auth', __name__)


def landing_url(user):
    if user.role == ROLE_SUPERUSER:
        return url_for('admin.dashboard')
    if user.role == ROLE_SPV:
        return url_for('checklists.spv_dashboard')
    return url_for('auth.home')


@auth.route('/')
def home():
    return render_template('index.html', title='Home')


@auth.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'GET':
        if current_user.is_authenticated:
            return redirect(landing_url(current_user))
        return render_template('login.html', title='Login')

    email = request.form.get('email')
    password = request.form.get('password')

    # NotFound / InvalidCredentials are rendered as plain text by the app error handler
    try:
        user = current_app.services.users.authenticate(email, password)
    except MaintrackError as e:
        current_app.logger.info(f"Login failed for {email}: {e.message}")
        raise

    session.clear()
    login_user(user)
    session['user_role'] = user.role
    # Only SPV and Technician sessions carry a division
    session['user_division'] = user.division_id if user.role in (ROLE_SPV, ROLE_TECHNICIAN) else None

    current_app.logger.info(f"Login success: user {user.id} ({user.role})")
    return redirect(landing_url(user))


@auth.route('/logout')
def logout():
    logout_user()
    session.clear()
    return redirect(url_for('auth.login'))
