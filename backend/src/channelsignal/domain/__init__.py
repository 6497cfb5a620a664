"""Domain layer: ingestion pipeline, account provisioning and mail ports."""
