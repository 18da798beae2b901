"""
Nutrient Reminder — Entry Point.

`python main.py` runs the alarm service headless for the user named in
REMINDER_USER, logging fire events until interrupted.
"""

import logging
import os
import threading

from src.config import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

from src.adapters.logging_listener import LoggingListener
from src.adapters.static_session import StaticSession
from src.core.alarm_service import create_alarm_service

logger = logging.getLogger(__name__)


def main() -> None:
    session = StaticSession(os.getenv("REMINDER_USER") or None)
    service = create_alarm_service(session)
    service.subscribe(LoggingListener())
    service.start()
    logger.info(
        "Nutrient reminder running for %s with %d alarms",
        session.current_user_id() or "(no user)", len(service.list_alarms()),
    )
    try:
        threading.Event().wait()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        service.stop()


if __name__ == "__main__":
    main()
