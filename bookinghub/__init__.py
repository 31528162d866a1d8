# Import important modules and create app package
from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate
from dotenv import load_dotenv
import os

from bookinghub.cache import QueryCache

# Load environment variables
load_dotenv()

# Initialize extensions
db = SQLAlchemy()
login_manager = LoginManager()
migrate = Migrate()
query_cache = QueryCache()


def _env_flag(name, default):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ('1', 'true', 'yes', 'on')


def create_app(config=None):
    # Initialize app
    app = Flask(__name__)

    # Configure app
    app.config['SECRET_KEY'] = os.environ.get('SECRET_KEY', 'dev-key')
    app.config['SQLALCHEMY_DATABASE_URI'] = os.environ.get('DATABASE_URL', 'sqlite:///booking.db')
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    app.config['SLOT_INTERVAL_MINUTES'] = int(os.environ.get('SLOT_INTERVAL_MINUTES', 30))
    app.config['QUERY_CACHE_TTL'] = int(os.environ.get('QUERY_CACHE_TTL', 300))
    app.config['QUERY_CACHE_MAX_SIZE'] = int(os.environ.get('QUERY_CACHE_MAX_SIZE', 512))
    app.config['LOG_LEVEL'] = os.environ.get('LOG_LEVEL', 'INFO')
    app.config['AUTO_CREATE_TABLES'] = _env_flag('AUTO_CREATE_TABLES', True)

    if config:
        app.config.update(config)

    if app.config['SLOT_INTERVAL_MINUTES'] <= 0:
        raise ValueError('SLOT_INTERVAL_MINUTES must be a positive number of minutes')

    app.logger.setLevel(app.config['LOG_LEVEL'])

    from bookinghub.utils.json_utils import BookingJSONProvider
    app.json = BookingJSONProvider(app)

    # Initialize extensions with app
    db.init_app(app)
    login_manager.init_app(app)
    migrate.init_app(app, db)
    query_cache.init_app(app)

    # Register blueprints
    from bookinghub.auth.routes import auth_bp
    from bookinghub.business.routes import business_bp
    from bookinghub.appointments.routes import appointments_bp
    from bookinghub.public.routes import public_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(business_bp)
    app.register_blueprint(appointments_bp)
    app.register_blueprint(public_bp)

    from bookinghub.errors import register_error_handlers
    register_error_handlers(app)

    from bookinghub import models  # noqa: F401
    from bookinghub.storage import use_immediate_transactions

    with app.app_context():
        if db.engine.dialect.name == 'sqlite':
            use_immediate_transactions(db.engine)

        # Create database tables
        if app.config['AUTO_CREATE_TABLES']:
            db.create_all()
            app.logger.info("Database tables created for %s", app.config['SQLALCHEMY_DATABASE_URI'])

    return app
