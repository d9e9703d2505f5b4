"""POST /v1/transactions/analyze - transaction risk scoring endpoint"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request

from pesa_shield.api.dependencies import get_fraud_service, get_request_id
from pesa_shield.api.v1.schemas import AssessmentResponse, TransactionRequest, TransactionSchema
from pesa_shield.domain.alerts import should_alert
from pesa_shield.services.fraud_detection import FraudDetectionService

router = APIRouter()


@router.post("/transactions/analyze", response_model=AssessmentResponse)
def analyze_transaction(
    request_body: TransactionRequest,
    request: Request,
    service: FraudDetectionService = Depends(get_fraud_service),
):
    """
    Score a transaction for fraud risk.

    Flow:
    1. Score against the behavior profile and device fingerprint;
       aware timestamps are converted to local wall-clock time
    2. Emit an alert on the live feed for MEDIUM risk and above
    3. Return the assessment
    """
    request_id = get_request_id(request)
    assessment = service.analyze_transaction(request_body.to_domain())

    alert_generated = should_alert(assessment)
    if alert_generated:
        logging.warning(
            f"Transaction {assessment.transaction_id} flagged as {assessment.risk_level.label} risk",
            extra={"request_id": request_id, "transaction_id": assessment.transaction_id},
        )

    return AssessmentResponse.from_domain(assessment, alert_generated=alert_generated)


@router.get("/transactions", response_model=List[TransactionSchema])
def list_transactions(service: FraudDetectionService = Depends(get_fraud_service)):
    """Scored transactions, oldest first"""
    return [TransactionSchema.from_domain(t) for t in service.get_transaction_history()]
