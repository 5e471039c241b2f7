import os
import logging
import traceback
from dotenv import load_dotenv
from flask import Flask, render_template, request, redirect, url_for
from werkzeug.middleware.proxy_fix import ProxyFix
from flask_login import LoginManager
from flask_migrate import Migrate
from maintrack.models import db, User
from maintrack.errors import MaintrackError
from maintrack.services import Services
from maintrack.utils import api_response, mask_db_url

load_dotenv() # Load env vars before anything else


def configure_logging(app):
    level = os.environ.get('LOG_LEVEL', app.config.get('LOG_LEVEL', 'INFO')).upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    app.logger.setLevel(level)


def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True)
    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    # --- CONFIGURATION ---
    database_url = os.environ.get('DATABASE_URL')
    if database_url and database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql://", 1)
    if not database_url:
        database_url = f"sqlite:///{os.path.join(app.instance_path, 'maintrack.db')}"

    app.config.update(
        SECRET_KEY=os.environ.get('SECRET_KEY', 'maintrack-dev-key'),
        SQLALCHEMY_DATABASE_URI=database_url,
        SQLALCHEMY_TRACK_MODIFICATIONS=False,
        UPLOAD_FOLDER=os.environ.get('UPLOAD_FOLDER', os.path.join(app.root_path, 'static', 'uploads')),
        MAX_CONTENT_LENGTH=int(os.environ.get('MAX_UPLOAD_MB', '16')) * 1024 * 1024,
        SEED_DEFAULTS=os.environ.get('SEED_DEFAULTS', 'true').lower() in ('1', 'true', 'yes'),
        SUPERUSER_EMAIL=os.environ.get('SUPERUSER_EMAIL'),
        SUPERUSER_PASSWORD=os.environ.get('SUPERUSER_PASSWORD'),
        SUPERUSER_NAME=os.environ.get('SUPERUSER_NAME', 'Superuser'),
    )
    if test_config:
        app.config.update(test_config)

    configure_logging(app)
    app.logger.info(f"Database: {mask_db_url(app.config['SQLALCHEMY_DATABASE_URI'])}")

    os.makedirs(app.instance_path, exist_ok=True)
    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    # --- INITIALIZE EXTENSIONS ---
    db.init_app(app)
    Migrate(app, db)
    app.services = Services(db)

    login_manager = LoginManager()
    login_manager.login_view = 'auth.login'
    login_manager.init_app(app)

    @login_manager.user_loader
    def load_user(user_id):
        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        if request.path.startswith('/api/'):
            return api_response(False, error='Authentication required', status=401)
        return redirect(url_for('auth.login', next=request.path))

    # --- ERROR HANDLERS ---
    @app.errorhandler(MaintrackError)
    def handle_domain_error(error):
        if request.path.startswith('/api/'):
            return api_response(False, error=error.message, status=error.status_code)
        return error.message, error.status_code, {'Content-Type': 'text/plain; charset=utf-8'}

    @app.errorhandler(404)
    def not_found_error(error):
        if request.path.startswith('/api/'):
            return api_response(False, error='Not found', status=404)
        return render_template('404.html'), 404

    @app.errorhandler(500)
    def internal_error(error):
        db.session.rollback()
        app.logger.error(f"Unhandled error on {request.method} {request.path}: {error}\n{traceback.format_exc()}")
        return render_template('500.html', error=str(error)), 500

    # --- REGISTER BLUEPRINTS ---
    from maintrack.auth import auth as auth_blueprint
    from maintrack.routes.admin import admin_bp
    from maintrack.routes.assets import assets_bp
    from maintrack.routes.checklists import checklists_bp
    from maintrack.routes.technician import technician_bp

    app.register_blueprint(auth_blueprint)
    app.register_blueprint(admin_bp)
    app.register_blueprint(assets_bp)
    app.register_blueprint(checklists_bp)
    app.register_blueprint(technician_bp)

    # --- TABLE CREATION & SEEDING ---
    with app.app_context():
        db.create_all()
        if app.config['SEED_DEFAULTS']:
            app.services.taxonomy.ensure_seeded()

        email = app.config.get('SUPERUSER_EMAIL')
        password = app.config.get('SUPERUSER_PASSWORD')
        if email and password:
            app.services.users.ensure_superuser(email, password, app.config['SUPERUSER_NAME'])

    return app


if __name__ == '__main__':
    create_app().run(debug=True, port=5001)
