"""Dashboard reads and engine settings"""

from fastapi import APIRouter, Depends

from pesa_shield.api.dependencies import get_fraud_service
from pesa_shield.api.v1.schemas import ProfileResponse, StatsResponse, ThresholdsSchema
from pesa_shield.domain.scoring import RiskThresholds
from pesa_shield.services.fraud_detection import FraudDetectionService

router = APIRouter()


@router.get("/stats", response_model=StatsResponse)
def get_stats(service: FraudDetectionService = Depends(get_fraud_service)):
    return StatsResponse.from_domain(service.get_fraud_stats())


@router.get("/profile", response_model=ProfileResponse)
def get_profile(service: FraudDetectionService = Depends(get_fraud_service)):
    return ProfileResponse.from_domain(service.get_profile())


@router.get("/settings/thresholds", response_model=ThresholdsSchema)
def get_thresholds(service: FraudDetectionService = Depends(get_fraud_service)):
    thresholds = service.thresholds
    return ThresholdsSchema(medium=thresholds.medium, high=thresholds.high, critical=thresholds.critical)


@router.put("/settings/thresholds", response_model=ThresholdsSchema)
def update_thresholds(
    request_body: ThresholdsSchema,
    service: FraudDetectionService = Depends(get_fraud_service),
):
    service.update_thresholds(
        RiskThresholds(medium=request_body.medium, high=request_body.high, critical=request_body.critical)
    )
    return request_body


@router.delete("/data", status_code=204)
def erase_all_data(service: FraudDetectionService = Depends(get_fraud_service)):
    """Erase history, alerts and the stored profile; thresholds return to defaults"""
    service.erase_all_data()
