"""Payment provider adapters.

The provider owns money movement; Zyra only mirrors the resulting
subscription, invoice and card state into its own tables.
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

import stripe

from zyra.common.config import ZyraSettings
from zyra.common.exceptions import UpstreamServiceError
from zyra.common.logging import get_logger

logger = get_logger("billing.provider")


@dataclass
class ProviderSubscription:
    id: str
    status: str
    client_secret: Optional[str] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False


@dataclass
class ProviderInvoice:
    id: str
    amount: int
    currency: str
    status: str
    number: Optional[str] = None
    hosted_url: Optional[str] = None
    pdf_url: Optional[str] = None
    due_date: Optional[datetime] = None
    paid_at: Optional[datetime] = None


@dataclass
class ProviderCard:
    id: str
    type: str
    brand: Optional[str] = None
    last4: Optional[str] = None
    exp_month: Optional[int] = None
    exp_year: Optional[int] = None


class BillingProvider(ABC):
    """Narrow surface over the payment processor."""

    @abstractmethod
    async def create_customer(self, email: str, name: str) -> str: ...

    @abstractmethod
    async def create_subscription(self, customer_id: str, price_id: str) -> ProviderSubscription: ...

    @abstractmethod
    async def retrieve_subscription(self, subscription_id: str) -> ProviderSubscription: ...

    @abstractmethod
    async def change_subscription_price(self, subscription_id: str, price_id: str) -> ProviderSubscription: ...

    @abstractmethod
    async def cancel_subscription(self, subscription_id: str) -> ProviderSubscription:
        """Cancel at the end of the current period."""

    @abstractmethod
    async def list_invoices(self, customer_id: str) -> list[ProviderInvoice]: ...

    @abstractmethod
    async def create_setup_intent(self, customer_id: str) -> str:
        """Return a client secret the browser uses to collect a card."""

    @abstractmethod
    async def attach_payment_method(self, customer_id: str, payment_method_id: str) -> ProviderCard: ...

    @abstractmethod
    async def detach_payment_method(self, payment_method_id: str) -> None: ...

    @abstractmethod
    async def set_default_payment_method(self, customer_id: str, payment_method_id: str) -> None: ...


def _ts(value: Any) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def _get(obj: Any, *path) -> Any:
    for key in path:
        if obj is None:
            return None
        try:
            obj = obj[key]
        except (KeyError, IndexError, TypeError):
            return None
    return obj


def _subscription(sub: Any) -> ProviderSubscription:
    # Newer API versions moved the period onto the subscription item.
    start = sub.get("current_period_start") or _get(sub, "items", "data", 0, "current_period_start")
    end = sub.get("current_period_end") or _get(sub, "items", "data", 0, "current_period_end")
    secret = (
        _get(sub, "latest_invoice", "payment_intent", "client_secret")
        or _get(sub, "latest_invoice", "confirmation_secret", "client_secret")
    )
    return ProviderSubscription(
        id=sub["id"],
        status=sub["status"],
        client_secret=secret,
        current_period_start=_ts(start),
        current_period_end=_ts(end),
        cancel_at_period_end=bool(sub.get("cancel_at_period_end")),
    )


class StripeBillingProvider(BillingProvider):
    """Stripe implementation. The SDK is blocking, so calls run in a worker thread."""

    _EXPAND = ["latest_invoice.payment_intent"]

    def __init__(self, settings: ZyraSettings):
        self.api_key = settings.stripe_secret_key

    async def _call(self, what: str, fn, *args, **kwargs):
        try:
            return await asyncio.to_thread(fn, *args, api_key=self.api_key, **kwargs)
        except stripe.StripeError as e:
            logger.error("Stripe %s failed: %s", what, e, extra={"operation": what})
            raise UpstreamServiceError("Billing provider request failed", service="stripe") from e

    async def create_customer(self, email: str, name: str) -> str:
        customer = await self._call("create customer", stripe.Customer.create, email=email, name=name)
        logger.info("Created Stripe customer", extra={"operation": "create customer"})
        return customer["id"]

    async def create_subscription(self, customer_id: str, price_id: str) -> ProviderSubscription:
        sub = await self._call(
            "create subscription", stripe.Subscription.create,
            customer=customer_id,
            items=[{"price": price_id}],
            payment_behavior="default_incomplete",
            expand=self._EXPAND,
        )
        return _subscription(sub)

    async def retrieve_subscription(self, subscription_id: str) -> ProviderSubscription:
        sub = await self._call(
            "retrieve subscription", stripe.Subscription.retrieve,
            subscription_id, expand=self._EXPAND,
        )
        return _subscription(sub)

    async def change_subscription_price(self, subscription_id: str, price_id: str) -> ProviderSubscription:
        current = await self._call("retrieve subscription", stripe.Subscription.retrieve, subscription_id)
        item_id = _get(current, "items", "data", 0, "id")
        items = [{"id": item_id, "price": price_id}] if item_id else [{"price": price_id}]
        sub = await self._call(
            "change subscription", stripe.Subscription.modify,
            subscription_id, items=items, proration_behavior="create_prorations",
        )
        return _subscription(sub)

    async def cancel_subscription(self, subscription_id: str) -> ProviderSubscription:
        sub = await self._call(
            "cancel subscription", stripe.Subscription.modify,
            subscription_id, cancel_at_period_end=True,
        )
        return _subscription(sub)

    async def list_invoices(self, customer_id: str) -> list[ProviderInvoice]:
        page = await self._call("list invoices", stripe.Invoice.list, customer=customer_id, limit=24)
        invoices = []
        for inv in page["data"]:
            invoices.append(ProviderInvoice(
                id=inv["id"],
                amount=inv.get("amount_due") or 0,
                currency=(inv.get("currency") or "usd").upper(),
                status=inv.get("status") or "draft",
                number=inv.get("number"),
                hosted_url=inv.get("hosted_invoice_url"),
                pdf_url=inv.get("invoice_pdf"),
                due_date=_ts(inv.get("due_date")),
                paid_at=_ts(_get(inv, "status_transitions", "paid_at")),
            ))
        return invoices

    async def create_setup_intent(self, customer_id: str) -> str:
        intent = await self._call(
            "create setup intent", stripe.SetupIntent.create,
            customer=customer_id, payment_method_types=["card"],
        )
        return intent["client_secret"]

    async def attach_payment_method(self, customer_id: str, payment_method_id: str) -> ProviderCard:
        pm = await self._call(
            "attach payment method", stripe.PaymentMethod.attach,
            payment_method_id, customer=customer_id,
        )
        return ProviderCard(
            id=pm["id"],
            type=pm.get("type") or "card",
            brand=_get(pm, "card", "brand"),
            last4=_get(pm, "card", "last4"),
            exp_month=_get(pm, "card", "exp_month"),
            exp_year=_get(pm, "card", "exp_year"),
        )

    async def detach_payment_method(self, payment_method_id: str) -> None:
        await self._call("detach payment method", stripe.PaymentMethod.detach, payment_method_id)

    async def set_default_payment_method(self, customer_id: str, payment_method_id: str) -> None:
        await self._call(
            "set default payment method", stripe.Customer.modify,
            customer_id, invoice_settings={"default_payment_method": payment_method_id},
        )
