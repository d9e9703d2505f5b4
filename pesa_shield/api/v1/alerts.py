"""Fraud alert endpoints and the live alert stream"""

import asyncio
import logging
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect

from pesa_shield.api.dependencies import get_fraud_service
from pesa_shield.api.v1.schemas import AlertResponse, ResolveAlertRequest
from pesa_shield.domain.exceptions import AlertAlreadyResolvedError, AlertNotFoundError
from pesa_shield.domain.models import FraudAlert, RiskLevel
from pesa_shield.services.fraud_detection import FraudDetectionService

logger = logging.getLogger(__name__)

router = APIRouter()

STREAM_QUEUE_SIZE = 100


@router.get("/alerts", response_model=List[AlertResponse])
def list_alerts(
    min_level: Optional[Literal["low", "medium", "high", "critical"]] = None,
    service: FraudDetectionService = Depends(get_fraud_service),
):
    """Recent alerts, newest first, optionally limited to a minimum risk level"""
    alerts = service.get_recent_alerts()
    if min_level:
        threshold = RiskLevel.from_label(min_level)
        alerts = [alert for alert in alerts if alert.risk_assessment.risk_level >= threshold]
    return [AlertResponse.from_domain(alert) for alert in alerts]


@router.get("/alerts/{alert_id}", response_model=AlertResponse)
def get_alert(alert_id: str, service: FraudDetectionService = Depends(get_fraud_service)):
    try:
        return AlertResponse.from_domain(service.get_alert(alert_id))
    except AlertNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/alerts/{alert_id}/read", response_model=AlertResponse)
def mark_alert_read(alert_id: str, service: FraudDetectionService = Depends(get_fraud_service)):
    try:
        return AlertResponse.from_domain(service.mark_alert_read(alert_id))
    except AlertNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.post("/alerts/{alert_id}/resolve", response_model=AlertResponse)
def resolve_alert(
    alert_id: str,
    request_body: ResolveAlertRequest,
    service: FraudDetectionService = Depends(get_fraud_service),
):
    try:
        alert = service.resolve_alert(alert_id, request_body.resolved_by, request_body.resolution)
    except AlertNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except AlertAlreadyResolvedError as e:
        raise HTTPException(status_code=409, detail=str(e))

    return AlertResponse.from_domain(alert)


@router.websocket("/alerts/stream")
async def stream_alerts(websocket: WebSocket):
    """
    Push alerts to the client as they are emitted.

    Alerts raised before the connection are not replayed. A client that
    falls more than STREAM_QUEUE_SIZE alerts behind misses the overflow.
    """
    service: FraudDetectionService = websocket.app.state.fraud_service
    loop = asyncio.get_running_loop()
    queue: asyncio.Queue = asyncio.Queue(maxsize=STREAM_QUEUE_SIZE)

    def enqueue(payload: dict) -> None:
        try:
            queue.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning("Alert stream client is lagging; dropping alert", extra={"alert_id": payload["alert_id"]})

    def on_alert(alert: FraudAlert) -> None:
        # Scoring runs in worker threads; hop onto this connection's loop
        payload = AlertResponse.from_domain(alert).model_dump(mode="json")
        loop.call_soon_threadsafe(enqueue, payload)

    subscription = service.subscribe(on_alert)
    await websocket.accept()
    sender = asyncio.create_task(_forward_alerts(websocket, queue))
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        pass
    finally:
        subscription.cancel()
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.warning(f"Alert stream sender stopped with error: {e}")


async def _forward_alerts(websocket: WebSocket, queue: asyncio.Queue) -> None:
    while True:
        payload = await queue.get()
        await websocket.send_json(payload)
