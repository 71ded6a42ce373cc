"""
Audit Logger

DESIGN DECISION: Every significant ledger action is logged.
This provides:
1. Complete traceability of balance changes
2. Debugging capability for snapshot imports
3. A history callers can inspect without parsing log output

The audit logger:
- Writes every event to the structured log
- Keeps a bounded in-memory history (oldest events are dropped first)
"""

from collections import deque
from typing import Optional

import structlog

from wallet.config import get_settings
from wallet.models.audit import AuditEvent, AuditSeverity


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service for one ledger.

    Events go both to:
    1. Structured local log (JSON via structlog)
    2. In-memory history (for inspection and tests)
    """

    def __init__(self, history_size: Optional[int] = None):
        """
        Initialize audit logger.

        Args:
            history_size: Number of events kept in memory.
                          Defaults to the app setting.
        """
        if history_size is None:
            history_size = get_settings().app.audit_history_size
        self._events: deque[AuditEvent] = deque(maxlen=history_size)
        self._logger = structlog.get_logger("wallet.audit")

    def log(self, event: AuditEvent) -> None:
        """Record an audit event."""
        log_dict = event.to_log_dict()

        if event.severity == AuditSeverity.ERROR:
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        self._events.append(event)

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all retained events for a specific entity.

        Returns:
            List of events in chronological order
        """
        return [
            event for event in self._events
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        """
        Get the most recent audit events.

        Returns:
            List of recent events (newest first)
        """
        if limit <= 0:
            return []
        return list(reversed(self._events))[:limit]

    def __len__(self) -> int:
        return len(self._events)
