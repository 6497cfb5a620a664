from .ingestion_repository import SqlAlchemyIngestionRepository

__all__ = ["SqlAlchemyIngestionRepository"]
