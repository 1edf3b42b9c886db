"""Prometheus metrics definitions for the CBS controller.

Two tiers:
- CSI operations (CreateVolume, ControllerPublishVolume, ...) as seen by
  the orchestrator, including their poll loops
- CBS API calls issued by the gateway
"""

from prometheus_client import Counter, Histogram

# =============================================================================
# Histogram Buckets
# =============================================================================
# CSI operations include polling, bounded by the poll deadline (default 120s)
_BUCKETS_OPERATION = (
    0.1, 0.5, 1, 2.5, 5,
    10, 20, 40, 60, 90,
    120, 180,
)  # 12 buckets

# Single CBS API round trips
_BUCKETS_API = (
    0.05, 0.1, 0.2, 0.4, 0.8,
    1.5, 3, 6, 12, 30,
)  # 10 buckets

OPERATIONS = (
    "create_volume",
    "delete_volume",
    "controller_publish_volume",
    "controller_unpublish_volume",
)

API_CALLS = ("create", "describe", "attach", "detach", "terminate")

# =============================================================================
# CSI Operation Metrics
# =============================================================================

CSI_OPERATION_TOTAL = Counter(
    "csi_cbs_operation_total",
    "Total CSI controller operations",
    ["operation", "result"],  # result: success, or ErrorCode value
)

CSI_OPERATION_DURATION = Histogram(
    "csi_cbs_operation_duration_seconds",
    "Duration of CSI controller operations",
    ["operation"],
    buckets=_BUCKETS_OPERATION,
)

CSI_POLL_ATTEMPTS = Counter(
    "csi_cbs_poll_attempts_total",
    "Total disk state fetches issued by poll loops",
    ["operation"],
)

# =============================================================================
# CBS API Metrics
# =============================================================================

CBS_API_DURATION = Histogram(
    "csi_cbs_api_duration_seconds",
    "Duration of CBS API calls",
    ["operation"],  # create, describe, attach, detach, terminate
    buckets=_BUCKETS_API,
)

CBS_API_ERRORS = Counter(
    "csi_cbs_api_errors_total",
    "Total CBS API call errors",
    ["operation", "error_code"],  # error_code: provider code, or timeout
)


# =============================================================================
# Metric Initialization
# =============================================================================

def _init_metrics() -> None:
    """Initialize labeled metrics with zero values."""
    for op in OPERATIONS:
        CSI_OPERATION_DURATION.labels(operation=op)
        CSI_OPERATION_TOTAL.labels(operation=op, result="success")
        CSI_POLL_ATTEMPTS.labels(operation=op)

    for call in API_CALLS:
        CBS_API_DURATION.labels(operation=call)
        CBS_API_ERRORS.labels(operation=call, error_code="timeout")


_init_metrics()
