from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class SubmitResponse(BaseModel):
    success: bool = True
    message: str = "Form submitted successfully"
    id: Optional[int] = None
    record: Dict[str, Any]


class ErrorResponse(BaseModel):
    success: bool = False
    message: str


class ListingsResponse(BaseModel):
    projects: List[Dict[str, Any]]


class ListingResponse(BaseModel):
    project: Dict[str, Any]


class PaymentOrderRequest(BaseModel):
    amount: float | str
    currency: Optional[str] = None


class PaymentOrderResponse(BaseModel):
    gateway_order_id: str
    amount: int
    currency: str
    status: str
    receipt: str


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    isAuthenticated: bool
    message: str
