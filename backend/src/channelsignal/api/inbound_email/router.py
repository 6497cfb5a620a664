"""Inbound email webhook endpoint.

POST /api/inbound-email receives provider webhooks (Resend, Postmark or a
generic JSON body), translates them and runs the ingestion pipeline on a
per-request database session.

Status codes:
- 200 {"success": true}: processed, duplicate, unroutable or unknown recipient
- 400 {"error": "Invalid payload format"}: body is not JSON or not a known shape
- 500 {"error": "Failed to process email"}: anything else
"""

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ...config import settings
from ...database import get_db
from ...domain.ingestion.handler import InboundEmailHandler
from ...infrastructure.repositories.ingestion_repository import SqlAlchemyIngestionRepository
from .schemas import InboundEmailAccepted, InboundEmailError
from .transform import InvalidPayloadError, transform_payload

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Inbound Email"])

SIGNATURE_HEADER = "x-webhook-signature"


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=InboundEmailError(error=message).model_dump(),
    )


@router.post(
    "/inbound-email",
    response_model=InboundEmailAccepted,
    responses={
        400: {"model": InboundEmailError},
        500: {"model": InboundEmailError},
    },
)
async def receive_inbound_email(request: Request, db: AsyncSession = Depends(get_db)):
    """Receive one inbound email from the mail provider."""
    # Signatures are not verified; a missing header is only reported
    if settings.INBOUND_EMAIL_WEBHOOK_SECRET and not request.headers.get(SIGNATURE_HEADER):
        logger.warning("No webhook signature provided")

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Inbound email webhook body is not valid JSON")
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid payload format")

    try:
        payload = transform_payload(body)
    except InvalidPayloadError as e:
        logger.warning(f"Rejected inbound email payload: {e}")
        return _error(status.HTTP_400_BAD_REQUEST, "Invalid payload format")

    handler = InboundEmailHandler(SqlAlchemyIngestionRepository(db))
    try:
        outcome = await handler.handle(payload)
    except Exception:
        logger.exception(
            "Error processing inbound email",
            extra={"message_id": payload.message_id},
        )
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to process email")

    logger.info(
        f"Inbound email accepted: {outcome.value}",
        extra={"message_id": payload.message_id, "outcome": outcome.value},
    )
    return InboundEmailAccepted()
