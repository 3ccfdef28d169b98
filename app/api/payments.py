# app/api/payments.py
from fastapi import APIRouter, Depends

from app.config import get_settings
from app.db import get_payment_gateway
from app.models import ErrorResponse, PaymentOrderRequest, PaymentOrderResponse
from intake.payments import PaymentOrderGateway, new_receipt_id, to_minor_units

router = APIRouter()


@router.post(
    "/api/freelance/payment/order",
    response_model=PaymentOrderResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
def create_payment_order(payload: PaymentOrderRequest, gateway: PaymentOrderGateway = Depends(get_payment_gateway)):
    currency = (payload.currency or get_settings().payment_currency).upper()
    return gateway.create_order(to_minor_units(payload.amount), currency, new_receipt_id())
