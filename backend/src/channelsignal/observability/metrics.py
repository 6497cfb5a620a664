"""Prometheus metrics for inbound email ingestion."""

from prometheus_client import Counter, Histogram

# outcome: processed|duplicate|unroutable|unknown_recipient|failed
inbound_emails_total = Counter(
    "channelsignal_inbound_emails_total",
    "Inbound emails handled, by outcome",
    ["outcome"]
)

# entity: org|contact|meeting
entities_created_total = Counter(
    "channelsignal_entities_created_total",
    "Records created by the ingestion pipeline",
    ["entity"]
)

ingestion_duration_seconds = Histogram(
    "channelsignal_ingestion_duration_seconds",
    "Time spent processing one inbound email",
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0]
)

mail_sent_total = Counter(
    "channelsignal_mail_sent_total",
    "Outgoing emails, by delivery status",
    ["status"]  # status: sent|dev|error
)
