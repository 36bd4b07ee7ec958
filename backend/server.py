"""
Flask application entry point for the surgery scheduler backend.

Registers the scheduler routes around one shared SurgeryScheduler.
"""

import logging
from typing import Optional

from flask import Flask

from surgery_scheduler.config import config
from surgery_scheduler.core import SurgeryScheduler
from surgery_scheduler.api.scheduler import bp as scheduler_bp
from surgery_scheduler.db.database import close_db_session
from surgery_scheduler.services.auth_service import AuthService


def create_app(
    scheduler: Optional[SurgeryScheduler] = None,
    auth_service: Optional[AuthService] = None,
    init_database: bool = False,
):
    """Create and configure Flask app."""
    app = Flask(__name__)

    # Load config
    app.config["SECRET_KEY"] = config.SECRET_KEY
    app.config["DEBUG"] = config.DEBUG

    scheduler = scheduler or SurgeryScheduler.from_config(config)
    app.extensions["surgery_scheduler"] = scheduler
    app.extensions["auth_service"] = auth_service or AuthService()

    # Persist notifications when the ledger is enabled
    if config.ENABLE_EVENT_LOG:
        from surgery_scheduler.services.event_log import EventLogService
        EventLogService().attach(scheduler.bus)

    # Clean up database session at the end of each request
    @app.teardown_appcontext
    def shutdown_session(exception=None):
        close_db_session(exception)

    # Register blueprints
    app.register_blueprint(scheduler_bp)  # /api/v1/scheduler/*

    # Health check endpoint
    @app.route("/health")
    def health():
        return {
            "status": "ok",
            "event_log_enabled": config.ENABLE_EVENT_LOG,
            "current_slot_id": scheduler.current_id,
        }

    # Initialize database tables if requested (development only)
    if init_database or config.ENABLE_EVENT_LOG:
        with app.app_context():
            from surgery_scheduler.db.database import init_db
            init_db()
            print("[Scheduler] Ledger tables initialized")

    return app


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)
    app = create_app()
    print(f"[Scheduler] Starting server on port 5001...")
    print(f"[Scheduler] Admin principal: {config.ADMIN_PRINCIPAL}")
    print(f"[Scheduler] Event log enabled: {config.ENABLE_EVENT_LOG}")
    print(f"[Scheduler] Debug mode: {config.DEBUG}")
    print(f"[Scheduler] Routes:")
    print(f"  - /api/v1/scheduler/* (Slots, requests, assignments)")
    print(f"  - /health (Health check)")
    app.run(debug=config.DEBUG, port=5001)
