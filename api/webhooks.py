"""
Webhook API routes for WebPlot.

The external fitting process posts each fitted spectrum to ``/webhook``.
The dashboard reads them back through ``/latest-webhook`` and
``/all-webhooks``.
"""

from typing import Any, Dict, List

import orjson
from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from .records import MeasurementRecord, normalize_payload
from .shared.logger import get_logger
from .store import IngestionStore, get_store

logger = get_logger(__name__)

router = APIRouter()

NO_DATA_MESSAGE = "No webhook data received yet"


class WebhookAck(BaseModel):
    """Acknowledgement returned to the sender."""

    status: str = "received"
    id: Any
    impedancePoints: int


async def _read_json_body(request: Request) -> Any:
    """Decode the request body, treating anything undecodable as empty."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        logger.warning("Ignoring undecodable webhook body (%d bytes): %s", len(raw), e)
        return {}


def _ensure_serializable(record: MeasurementRecord) -> MeasurementRecord:
    """The record itself, or an all-default one if it cannot be written as JSON."""
    try:
        orjson.dumps(record.to_dict())
    except orjson.JSONEncodeError as e:
        logger.warning("Webhook payload cannot be served back as JSON, storing defaults: %s", e)
        return normalize_payload({})
    return record


@router.post("/webhook", response_model=WebhookAck)
async def receive_webhook(
    request: Request,
    store: IngestionStore = Depends(get_store),
) -> WebhookAck:
    """
    Receive one fitted spectrum.

    Missing fields are defaulted, the request is never rejected.

    Returns:
        The resolved record id and the number of impedance points received.
    """
    payload = await _read_json_body(request)
    if not isinstance(payload, dict):
        logger.warning("Webhook body is a %s, not an object; storing defaults", type(payload).__name__)

    record = _ensure_serializable(normalize_payload(payload))
    store.append(record)

    logger.info(
        "Received webhook id=%s points=%d circuit=%s",
        record.id,
        record.impedance_points,
        record.circuit_type,
    )
    logger.debug("Stored record: %s", record.to_dict())

    return WebhookAck(id=record.id, impedancePoints=record.impedance_points)


@router.get("/latest-webhook")
async def get_latest_webhook(store: IngestionStore = Depends(get_store)) -> Dict[str, Any]:
    """Get the most recent record, or a message when nothing arrived yet."""
    record = store.get_latest()
    if record is None:
        return {"message": NO_DATA_MESSAGE}
    return record.to_dict()


@router.get("/all-webhooks")
async def get_all_webhooks(store: IngestionStore = Depends(get_store)) -> List[Dict[str, Any]]:
    """Get every received record in arrival order."""
    return [record.to_dict() for record in store.get_all()]
