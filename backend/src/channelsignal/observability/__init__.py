"""Observability: structured logging, request ids, metrics and health checks."""

from .logging_config import configure_logging, get_logger
from .metrics import (
    entities_created_total,
    inbound_emails_total,
    ingestion_duration_seconds,
    mail_sent_total,
)
from .request_id import (
    request_id_var,
    get_request_id,
    generate_request_id,
    request_context,
)
from .health import HealthStatus, ComponentHealth
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "entities_created_total",
    "inbound_emails_total",
    "ingestion_duration_seconds",
    "mail_sent_total",
    # Request ID
    "request_id_var",
    "get_request_id",
    "generate_request_id",
    "request_context",
    # Health
    "HealthStatus",
    "ComponentHealth",
    # Middleware
    "RequestIDMiddleware",
]
