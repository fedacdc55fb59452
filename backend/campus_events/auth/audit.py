"""Structured security event logging."""
import json
import logging
from datetime import datetime, timezone

security_logger = logging.getLogger("campus_events.security")


def log_security_event(event: str, **details) -> None:
    """Log an auth outcome as ``<event> {json}`` on the security logger."""
    payload = {"timestamp": datetime.now(timezone.utc).isoformat(), **details}
    security_logger.info("%s %s", event, json.dumps(payload, default=str, sort_keys=True))
