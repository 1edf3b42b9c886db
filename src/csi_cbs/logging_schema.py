"""Logging field schema.

Standard fields (added to JSON logs):
- service: Service name (csi-cbs-controller)
- event: Event type (volume_created, poll_timeout, etc.)
- request_id: Per-call correlation ID

High cardinality fields (OK in logs, NOT in metric labels):
- volume_id: CBS disk ID
- volume_name: CSI volume name (idempotency token)
- node_id: CVM instance ID
"""

from enum import StrEnum


class LogEvent(StrEnum):
    """Log event types.

    Used with logger.info/warning/error extra dict:
        logger.info("message", extra={"event": LogEvent.VOLUME_CREATED, ...})
    """

    # Lifecycle events
    VOLUME_CREATED = "volume_created"
    VOLUME_DELETED = "volume_deleted"
    VOLUME_ATTACHED = "volume_attached"
    VOLUME_DETACHED = "volume_detached"
    STATE_CHANGED = "state_changed"

    # Request handling
    REQUEST_REJECTED = "request_rejected"
    OPERATION_FAILED = "operation_failed"
    OPERATION_UNSUPPORTED = "operation_unsupported"

    # Polling
    POLL_RETRY = "poll_retry"
    POLL_TIMEOUT = "poll_timeout"

    # Provider API
    CBS_API_ERROR = "cbs_api_error"

    # Application lifecycle
    CONTROLLER_READY = "controller_ready"


class ErrorClass(StrEnum):
    """Error classification for structured error logging."""

    TRANSIENT = "transient"  # Retried inside the poll loop
    PERMANENT = "permanent"  # Invalid input, conflict
    TIMEOUT = "timeout"  # Poll deadline reached
    PROVIDER = "provider"  # CBS API rejected a mutating call


class Component(StrEnum):
    """Component identifiers for log filtering."""

    CONTROLLER = "controller"
    POLLER = "poller"
    GATEWAY = "gateway"
