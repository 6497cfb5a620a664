"""Inbound email webhook: provider payload translation and the POST endpoint."""

from .router import router
from .transform import InvalidPayloadError, transform_payload

__all__ = ["router", "InvalidPayloadError", "transform_payload"]
