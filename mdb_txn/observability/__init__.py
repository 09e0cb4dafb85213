"""
Observability components.

Provides structured logging and metrics collection for transaction runs.
"""

from .logging import (
    ContextualLoggerAdapter,
    clear_correlation_id,
    clear_transaction_context,
    get_correlation_id,
    get_logger,
    log_operation,
    set_correlation_id,
    set_transaction_context,
    update_transaction_context,
)
from .metrics import (
    MetricsCollector,
    OperationMetrics,
    get_metrics_collector,
    record_operation,
)

__all__ = [
    # Metrics
    "MetricsCollector",
    "OperationMetrics",
    "get_metrics_collector",
    "record_operation",
    # Logging
    "get_correlation_id",
    "set_correlation_id",
    "clear_correlation_id",
    "set_transaction_context",
    "update_transaction_context",
    "clear_transaction_context",
    "ContextualLoggerAdapter",
    "get_logger",
    "log_operation",
]
