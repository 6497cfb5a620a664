"""Infrastructure adapters: SQLAlchemy persistence and Resend mail delivery."""
