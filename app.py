import logging
import os

import click
from dotenv import load_dotenv
load_dotenv()
from flask import Flask, jsonify
from flask_cors import CORS
from flask_migrate import Migrate
from config import config_dict
from models import db
from routes.authentication import auth_bp
from routes.courses import course_bp
from routes.progress import progress_bp
from routes.certificates import certificate_bp
from routes.users import users_bp

migrate = Migrate()


def configure_logging(app):
    level = getattr(logging, str(app.config.get("LOG_LEVEL", "INFO")).upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    app.logger.setLevel(level)


def register_commands(app):
    @app.cli.command("create-admin")
    @click.argument("email")
    @click.argument("full_name")
    @click.password_option()
    def create_admin(email, full_name, password):
        """Create an admin account (or promote an existing one)."""
        from classes.user_manager import UserManager

        user = UserManager.create_admin(email, full_name, password)
        click.echo(f"Admin ready: {user.email} (id {user.id})")


def create_app(config_name=None):
    app = Flask(__name__)

    env = config_name or os.environ.get("FLASK_ENV", "production")
    app.config.from_object(config_dict.get(env, config_dict["production"]))
    configure_logging(app)

    CORS(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"], "supports_credentials": True}})

    db.init_app(app)
    migrate.init_app(app, db)

    app.register_blueprint(auth_bp, url_prefix='/api/auth')
    app.register_blueprint(course_bp, url_prefix='/api/courses')
    app.register_blueprint(progress_bp, url_prefix='/api/progress')
    app.register_blueprint(certificate_bp, url_prefix='/api/certificates')
    app.register_blueprint(users_bp, url_prefix='/api/users')

    @app.route('/')
    def home():
        return "Welcome to the Internship LMS API!"

    @app.route('/health')
    def health():
        return jsonify({"status": "ok"})

    register_commands(app)

    app.logger.info("Loaded %s configuration", env)
    return app


app = create_app()

if __name__ == '__main__':
    app.run(debug=app.config['DEBUG'])
