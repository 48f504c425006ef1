# File: linguadeck_app/modules/decks/tasks.py
"""Background jobs of the decks module."""

import logging

from linguadeck_app.extensions import scheduler

from .services.sync_service import reconcile_global_decks

logger = logging.getLogger(__name__)


def reconcile_dialogue_decks_job():
    """Periodic reconcile of global dialogue decks (Flask-APScheduler job)."""
    app = scheduler.app
    if app is None:
        logger.warning("Scheduler has no app bound; skipping dialogue deck reconcile")
        return None
    with app.app_context():
        report = reconcile_global_decks()
        return report.to_dict()
