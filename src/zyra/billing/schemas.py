"""Pydantic schemas for billing endpoints."""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field

from zyra.common.schemas import CamelModel


class PlanOut(CamelModel):
    id: str
    plan_name: str
    price: int
    interval: str
    features: list[str] = Field(default_factory=list)
    limits: dict[str, Any] = Field(default_factory=dict)
    stripe_price_id: Optional[str] = None
    is_active: bool
    currency: str
    description: Optional[str] = None


class SubscriptionOut(CamelModel):
    id: str
    user_id: str
    plan_id: str
    stripe_subscription_id: Optional[str] = None
    status: str
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False
    created_at: datetime
    updated_at: datetime


class CheckoutResponse(CamelModel):
    subscription_id: str
    client_secret: Optional[str] = None


class ChangePlanRequest(CamelModel):
    plan_id: str = Field(..., min_length=1)


class InvoiceOut(CamelModel):
    id: str
    subscription_id: Optional[str] = None
    stripe_invoice_id: Optional[str] = None
    amount: int
    currency: str
    status: str
    invoice_number: Optional[str] = None
    invoice_url: Optional[str] = None
    pdf_url: Optional[str] = None
    due_date: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    created_at: datetime


class PaymentMethodOut(CamelModel):
    id: str
    stripe_payment_method_id: str
    type: str
    card_brand: Optional[str] = None
    card_last4: Optional[str] = None
    card_exp_month: Optional[int] = None
    card_exp_year: Optional[int] = None
    is_default: bool


class AddPaymentMethodRequest(CamelModel):
    payment_method_id: Optional[str] = None


class AddPaymentMethodResponse(CamelModel):
    client_secret: Optional[str] = None
    payment_method: Optional[PaymentMethodOut] = None
