"""Bootstrap helpers for configuring the Flask application."""

from __future__ import annotations

import logging
import os

from flask import Flask, jsonify
from sqlalchemy import inspect, text

from ..extensions import csrf_protect, db, login_manager, scheduler
from .error_handlers import register_error_handlers
from .logging_config import setup_logging
from .module_registry import register_default_modules

DIALOGUE_SYNC_JOB_ID = 'reconcile_global_dialogue_decks'


def configure_logging(app: Flask) -> None:
    """Configure the package logger and the Flask app logger."""

    log_dir = None if app.testing else app.config.get('LOG_DIR')
    setup_logging(app, log_level=app.config.get('LOG_LEVEL', 'INFO'), log_dir=log_dir)

    if app.logger.handlers:
        return

    app.logger.setLevel(logging.DEBUG if app.debug else logging.INFO)
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    app.logger.addHandler(handler)
    app.logger.propagate = False


def register_extensions(app: Flask) -> None:
    """Initialize shared extensions with the Flask app instance."""

    db.init_app(app)
    login_manager.init_app(app)
    csrf_protect.init_app(app)

    @login_manager.user_loader
    def load_user(user_id: str):
        from ..models import User

        return db.session.get(User, int(user_id))

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({'success': False, 'message': 'Authentication required', 'code': 'UNAUTHENTICATED'}), 401


def configure_scheduler(app: Flask) -> None:
    """Register the periodic reconcile job when an interval is configured."""

    interval = app.config.get('DIALOGUE_SYNC_INTERVAL_MINUTES')
    if not interval or app.testing:
        return
    if app.debug and os.environ.get("WERKZEUG_RUN_MAIN") != "true":
        return

    from apscheduler.schedulers import SchedulerAlreadyRunningError

    from ..modules.decks.tasks import reconcile_dialogue_decks_job

    try:
        scheduler.init_app(app)
        if not scheduler.get_job(DIALOGUE_SYNC_JOB_ID):
            scheduler.add_job(
                id=DIALOGUE_SYNC_JOB_ID,
                func=reconcile_dialogue_decks_job,
                trigger='interval',
                minutes=int(interval),
                replace_existing=True,
            )
        if not scheduler.running:
            scheduler.start()
        app.logger.info("Dialogue deck reconcile scheduled every %s minute(s).", interval)
    except SchedulerAlreadyRunningError:
        app.logger.info("Scheduler already running, skipping re-initialization.")


def register_blueprints(app: Flask) -> None:
    """Register all default blueprints with the app."""

    register_default_modules(app)
    register_error_handlers(app)


def initialize_database(app: Flask) -> None:
    """Create database tables."""

    from .. import models  # noqa: F401  (register mappers)

    db.create_all()

    # Databases created before clip ordering existed lack the video key column
    card_columns = {column['name'] for column in inspect(db.engine).get_columns('cards')}
    if 'video_order_key' not in card_columns:
        with db.engine.begin() as connection:
            connection.execute(text("ALTER TABLE cards ADD COLUMN video_order_key BIGINT"))
            connection.execute(text(
                "CREATE INDEX IF NOT EXISTS idx_cards_video_order ON cards (deck_id, video_order_key)"
            ))
        app.logger.info("Đã thêm cột video_order_key vào cards (migrate in place).")

    app.logger.info("Database ready at %s", app.config.get('SQLALCHEMY_DATABASE_URI'))
