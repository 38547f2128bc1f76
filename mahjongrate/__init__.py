"""Initialize the Flask app and the Firebase Admin SDK."""

import datetime
import json
import os

import click
import firebase_admin
from firebase_admin import credentials
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from .core.constants import (
    PRUNE_BATCH_SIZE,
    SWEEP_INTERVAL_MINUTES,
    UNVERIFIED_USER_MAX_AGE_MINUTES,
)


def _env_flag(name, default="false"):
    return (os.environ.get(name) or default).lower() in ["true", "1", "t"]


def _load_credentials(app):
    """Find Firebase credentials: env JSON, local file, then ADC."""
    cred = None
    project_id = None

    # First, try to load from environment variable (for production)
    cred_json = os.environ.get("FIREBASE_CREDENTIALS_JSON")
    if cred_json:
        try:
            cred_info = json.loads(cred_json)
            project_id = cred_info.get("project_id")
            cred = credentials.Certificate(cred_info)
        except (json.JSONDecodeError, ValueError) as e:
            app.logger.error(f"Error parsing FIREBASE_CREDENTIALS_JSON: {e}")

    # If env var fails or is not present, try loading from file (for local dev)
    if not cred:
        cred_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "firebase_credentials.json"
        )
        if os.path.exists(cred_path):
            try:
                with open(cred_path, "r") as f:
                    cred_info = json.load(f)
                project_id = cred_info.get("project_id")
                cred = credentials.Certificate(cred_path)
            except (json.JSONDecodeError, ValueError) as e:
                app.logger.error(f"Error loading credentials from file: {e}")

    # If both methods fail, fallback to default credentials
    if not cred:
        try:
            cred = credentials.ApplicationDefault()
            project_id = os.environ.get("FIREBASE_PROJECT_ID")
        except Exception as e:
            app.logger.error(
                f"Could not find any valid credentials (env, file, or default): {e}"
            )

    return cred, project_id


def _init_firebase(app):
    cred, project_id = _load_credentials(app)
    if not cred or firebase_admin._apps:
        return

    try:
        storage_bucket = app.config.get("FIREBASE_STORAGE_BUCKET")
        if not storage_bucket and project_id:
            storage_bucket = f"{project_id}.firebasestorage.app"

        firebase_options = {"storageBucket": storage_bucket}
        if project_id:
            firebase_options["projectId"] = project_id

        firebase_admin.initialize_app(cred, firebase_options)
    except ValueError:
        # This can happen if the app is already initialized, which is fine.
        app.logger.info("Firebase app already initialized.")


def create_app(test_config=None):
    """Create and configure an instance of the Flask application."""
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    app.config.from_mapping(
        FIREBASE_STORAGE_BUCKET=os.environ.get("FIREBASE_STORAGE_BUCKET"),
        PRUNE_BATCH_SIZE=int(os.environ.get("PRUNE_BATCH_SIZE") or PRUNE_BATCH_SIZE),
        UNVERIFIED_USER_MAX_AGE_MINUTES=int(
            os.environ.get("UNVERIFIED_USER_MAX_AGE_MINUTES")
            or UNVERIFIED_USER_MAX_AGE_MINUTES
        ),
        SWEEP_INTERVAL_MINUTES=int(
            os.environ.get("SWEEP_INTERVAL_MINUTES") or SWEEP_INTERVAL_MINUTES
        ),
        # Enable on one worker only; multi-worker deployments run the
        # sweep-unverified command from cron instead
        SWEEP_SCHEDULER_ENABLED=_env_flag("SWEEP_SCHEDULER_ENABLED"),
    )

    if test_config:
        app.config.update(test_config)

    # Initialize Firebase Admin SDK only if not in testing mode
    if not app.config.get("TESTING"):
        _init_firebase(app)

    # Register blueprints
    from . import account as account_bp

    app.register_blueprint(account_bp.bp)

    from . import group as group_bp

    app.register_blueprint(group_bp.bp)

    from . import error_handlers

    app.register_blueprint(error_handlers.error_handlers_bp)

    @app.route("/health")
    def health_check():
        """Perform a simple health check."""
        return "OK", 200

    from .cleanup.scheduler import SweepScheduler

    scheduler = SweepScheduler(
        app, datetime.timedelta(minutes=app.config["SWEEP_INTERVAL_MINUTES"])
    )
    app.extensions["sweep_scheduler"] = scheduler

    @app.cli.command("sweep-unverified")
    def sweep_unverified_command():
        """Delete users that never verified their email.

        Use this from cron when the app runs on more than one worker.
        """
        report = scheduler.run_once()
        if report is None:
            click.echo("A sweep is already running.")
            return
        click.echo(
            f"Scanned {report.scanned}, deleted {report.deleted}, "
            f"failed {report.failed}."
        )

    if app.config["SWEEP_SCHEDULER_ENABLED"] and not app.config.get("TESTING"):
        scheduler.start()
        app.logger.info(
            f"Unverified user sweep scheduled every "
            f"{app.config['SWEEP_INTERVAL_MINUTES']} minutes in this process. "
            f"Enable SWEEP_SCHEDULER_ENABLED on a single worker only."
        )

    app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    return app
