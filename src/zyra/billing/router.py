"""Billing API router."""

from typing import Optional

from fastapi import APIRouter, Depends

from zyra.billing.schemas import (
    AddPaymentMethodRequest,
    AddPaymentMethodResponse,
    ChangePlanRequest,
    CheckoutResponse,
    InvoiceOut,
    PaymentMethodOut,
    PlanOut,
    SubscriptionOut,
)
from zyra.common.schemas import MessageResponse
from zyra.common.security import require_user
from zyra.store.records import User

router = APIRouter()


def _get_service():
    from zyra.deps import get_billing_service
    return get_billing_service()


@router.get("/subscription-plans", response_model=list[PlanOut])
async def list_plans():
    plans = await _get_service().list_plans()
    return [PlanOut.model_validate(p) for p in plans]


@router.get("/subscription/current", response_model=Optional[SubscriptionOut])
async def current_subscription(user: User = Depends(require_user)):
    sub = await _get_service().current_subscription(user)
    return SubscriptionOut.model_validate(sub) if sub else None


@router.post("/create-subscription", response_model=CheckoutResponse)
async def create_subscription(user: User = Depends(require_user)):
    sub = await _get_service().create_checkout(user)
    return CheckoutResponse(subscription_id=sub.id, client_secret=sub.client_secret)


@router.post("/subscription/change-plan", response_model=SubscriptionOut)
async def change_plan(body: ChangePlanRequest, user: User = Depends(require_user)):
    sub = await _get_service().change_plan(user, body.plan_id)
    return SubscriptionOut.model_validate(sub)


@router.post("/subscription/cancel", response_model=SubscriptionOut)
async def cancel_subscription(user: User = Depends(require_user)):
    sub = await _get_service().cancel(user)
    return SubscriptionOut.model_validate(sub)


@router.get("/invoices", response_model=list[InvoiceOut])
async def list_invoices(user: User = Depends(require_user)):
    invoices = await _get_service().list_invoices(user)
    return [InvoiceOut.model_validate(i) for i in invoices]


@router.get("/payment-methods", response_model=list[PaymentMethodOut])
async def list_payment_methods(user: User = Depends(require_user)):
    methods = await _get_service().list_payment_methods(user)
    return [PaymentMethodOut.model_validate(m) for m in methods]


@router.post("/payment-methods/add", response_model=AddPaymentMethodResponse)
async def add_payment_method(
    body: Optional[AddPaymentMethodRequest] = None,
    user: User = Depends(require_user),
):
    svc = _get_service()
    if body is None or not body.payment_method_id:
        return AddPaymentMethodResponse(client_secret=await svc.start_card_setup(user))
    method = await svc.add_payment_method(user, body.payment_method_id)
    return AddPaymentMethodResponse(payment_method=PaymentMethodOut.model_validate(method))


@router.patch("/payment-methods/{method_id}/default", response_model=PaymentMethodOut)
async def set_default_payment_method(method_id: str, user: User = Depends(require_user)):
    method = await _get_service().set_default_payment_method(user, method_id)
    return PaymentMethodOut.model_validate(method)


@router.delete("/payment-methods/{method_id}", response_model=MessageResponse)
async def delete_payment_method(method_id: str, user: User = Depends(require_user)):
    await _get_service().delete_payment_method(user, method_id)
    return MessageResponse(message="Payment method removed")
