"""
Event handlers for domain events.

These handlers process domain events for side effects like audit logging.
"""

import logging

from access_keys.domain.events import ExpiredKeysPurged, KeyGenerated, KeyRenewed
from core.domain.events import DomainEvent, EventHandler

logger = logging.getLogger(__name__)
audit_logger = logging.getLogger("audit")


class AuditLogEventHandler(EventHandler):
    """
    Event handler for audit logging.

    Writes one structured line per event to the "audit" logger.
    """

    async def handle(self, event: DomainEvent) -> None:
        """
        Handle domain event for audit logging.

        Args:
            event: Domain event to log
        """
        extra = {
            "event_id": str(event.event_id),
            "event_type": event.event_type,
            "aggregate_id": event.aggregate_id,
            "occurred_at": event.occurred_at.isoformat(),
        }
        if isinstance(event, KeyGenerated):
            extra["duration"] = event.duration
        elif isinstance(event, KeyRenewed):
            extra["renew_count"] = event.renew_count
            extra["new_expires_at"] = event.new_expires_at.isoformat()
        elif isinstance(event, ExpiredKeysPurged):
            extra["deleted_count"] = event.deleted_count
            extra["remaining_count"] = event.remaining_count
            extra["trigger"] = event.trigger

        audit_logger.info("Audit log: %s - %s", event.event_type, event.aggregate_id, extra=extra)


_audit_handler = AuditLogEventHandler()


# Register event handlers
def register_event_handlers():
    """Register all event handlers with the event bus."""
    from core.infrastructure.events import event_bus

    event_bus.subscribe(KeyGenerated, _audit_handler)
    event_bus.subscribe(KeyRenewed, _audit_handler)
    event_bus.subscribe(ExpiredKeysPurged, _audit_handler)

    logger.info("Event handlers registered")
