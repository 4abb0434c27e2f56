import os
from flask import Flask
from app.extensions import db, bcrypt, migrate, limiter, cors
from app.utils.error_handlers import register_error_handlers
from app.commands import register_commands
from config import config


def create_app(config_name=None):
    config_name = config_name or os.getenv('FLASK_CONFIG', 'default')
    config_class = config[config_name]

    app = Flask(__name__)
    app.config.from_object(config_class)

    # Initialize extensions
    db.init_app(app)
    bcrypt.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors.init_app(app, origins=app.config['ALLOWED_ORIGINS'])

    # Initialize app with config (logging, audit logger)
    config_class.init_app(app)

    # Make every model visible to create_all / migrations
    from app.models import patient_models, user_models, system_models  # noqa: F401

    # Register blueprints
    from app.api import api_bp
    app.register_blueprint(api_bp, url_prefix='/api')

    # Register error handlers and commands
    register_error_handlers(app)
    register_commands(app)

    return app
