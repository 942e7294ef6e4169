"""Billing service: plan catalogue, subscriptions, invoices and payment methods."""

from datetime import timedelta

from zyra.billing.plans import DEFAULT_PLANS
from zyra.billing.provider import BillingProvider, ProviderSubscription
from zyra.common.config import ZyraSettings
from zyra.common.exceptions import NotFoundError, ServiceUnavailableError, ValidationError
from zyra.common.logging import get_logger
from zyra.common.models import utcnow
from zyra.store.base import RecordStore
from zyra.store.records import (
    Invoice,
    PaymentMethod,
    Subscription,
    SubscriptionPlan,
    User,
)

logger = get_logger("billing")

BILLING_PERIOD = timedelta(days=30)


class BillingService:
    """Subscription lifecycle on top of an optional :class:`BillingProvider`.

    Without a provider, plan changes are recorded locally only and every
    operation that needs the processor raises ServiceUnavailableError.
    """

    def __init__(
        self,
        settings: ZyraSettings,
        store: RecordStore,
        provider: BillingProvider | None = None,
    ):
        self.settings = settings
        self.store = store
        self.provider = provider

    def _require_provider(self) -> BillingProvider:
        if self.provider is None:
            raise ServiceUnavailableError("Billing is not configured")
        return self.provider

    async def _ensure_customer(self, user: User) -> str:
        if user.stripe_customer_id:
            return user.stripe_customer_id
        customer_id = await self._require_provider().create_customer(user.email, user.full_name)
        await self.store.update_user(user.id, stripe_customer_id=customer_id)
        user.stripe_customer_id = customer_id
        return customer_id

    # ── Plans ──

    async def seed_plans(self) -> list[str]:
        """Insert any missing default plans. Returns the names created."""
        created = []
        for data in DEFAULT_PLANS:
            if await self.store.get_plan_by_name(data["plan_name"]) is not None:
                continue
            await self.store.create_plan(SubscriptionPlan(
                plan_name=data["plan_name"],
                price=data["price"],
                description=data["description"],
                features=list(data["features"]),
                limits=dict(data["limits"]),
            ))
            created.append(data["plan_name"])
            logger.info("Created subscription plan: %s", data["plan_name"])
        return created

    async def list_plans(self) -> list[SubscriptionPlan]:
        return await self.store.list_plans()

    # ── Subscriptions ──

    async def current_subscription(self, user: User) -> Subscription | None:
        return await self.store.get_current_subscription(user.id)

    async def create_checkout(self, user: User) -> ProviderSubscription:
        """Start (or resume) a processor-side subscription for the default price."""
        provider = self._require_provider()
        if user.stripe_subscription_id:
            return await provider.retrieve_subscription(user.stripe_subscription_id)

        if not self.settings.stripe_price_id:
            raise ServiceUnavailableError("No billing price configured")
        customer_id = await self._ensure_customer(user)
        sub = await provider.create_subscription(customer_id, self.settings.stripe_price_id)
        await self.store.update_user(user.id, stripe_subscription_id=sub.id)
        logger.info("Checkout subscription created", extra={"user_id": user.id, "operation": "create_checkout"})
        return sub

    async def change_plan(self, user: User, plan_id: str) -> Subscription:
        plan = await self.store.get_plan(plan_id)
        if plan is None or not plan.is_active:
            raise NotFoundError("Subscription plan not found")

        provider_sub = None
        if self.provider and plan.stripe_price_id and user.stripe_subscription_id:
            provider_sub = await self.provider.change_subscription_price(
                user.stripe_subscription_id, plan.stripe_price_id,
            )

        now = utcnow()
        period = {
            "current_period_start": provider_sub.current_period_start if provider_sub else now,
            "current_period_end": provider_sub.current_period_end if provider_sub else now + BILLING_PERIOD,
        }
        current = await self.store.get_current_subscription(user.id)
        if current is not None and current.status in ("active", "trialing"):
            subscription = await self.store.update_subscription(
                current.id, plan_id=plan.id, cancel_at_period_end=False, **period,
            )
        else:
            subscription = await self.store.create_subscription(Subscription(
                user_id=user.id,
                plan_id=plan.id,
                status="active",
                stripe_subscription_id=user.stripe_subscription_id,
                **period,
            ))

        await self.store.update_user(user.id, plan=plan.plan_name)
        logger.info(
            "Plan changed to %s", plan.plan_name,
            extra={"user_id": user.id, "operation": "change_plan"},
        )
        return subscription

    async def cancel(self, user: User) -> Subscription:
        current = await self.store.get_current_subscription(user.id)
        if current is None or current.status == "canceled":
            raise NotFoundError("No active subscription")
        if current.cancel_at_period_end:
            return current

        if self.provider and current.stripe_subscription_id:
            await self.provider.cancel_subscription(current.stripe_subscription_id)
        return await self.store.update_subscription(current.id, cancel_at_period_end=True)

    # ── Invoices ──

    async def list_invoices(self, user: User) -> list[Invoice]:
        """Local invoices, after mirroring any new ones from the processor."""
        if self.provider and user.stripe_customer_id:
            current = await self.store.get_current_subscription(user.id)
            for remote in await self.provider.list_invoices(user.stripe_customer_id):
                if await self.store.get_invoice_by_stripe_id(remote.id) is not None:
                    continue
                await self.store.create_invoice(Invoice(
                    user_id=user.id,
                    subscription_id=current.id if current else None,
                    stripe_invoice_id=remote.id,
                    amount=remote.amount,
                    currency=remote.currency,
                    status=remote.status,
                    invoice_number=remote.number,
                    invoice_url=remote.hosted_url,
                    pdf_url=remote.pdf_url,
                    due_date=remote.due_date,
                    paid_at=remote.paid_at,
                ))
        return await self.store.list_invoices(user.id)

    # ── Payment methods ──

    async def list_payment_methods(self, user: User) -> list[PaymentMethod]:
        return await self.store.list_payment_methods(user.id)

    async def start_card_setup(self, user: User) -> str:
        customer_id = await self._ensure_customer(user)
        return await self._require_provider().create_setup_intent(customer_id)

    async def add_payment_method(self, user: User, payment_method_id: str) -> PaymentMethod:
        if not payment_method_id.strip():
            raise ValidationError("Payment method id is required")
        customer_id = await self._ensure_customer(user)
        card = await self._require_provider().attach_payment_method(customer_id, payment_method_id)

        existing = await self.store.list_payment_methods(user.id)
        method = await self.store.create_payment_method(PaymentMethod(
            user_id=user.id,
            stripe_payment_method_id=card.id,
            type=card.type,
            card_brand=card.brand,
            card_last4=card.last4,
            card_exp_month=card.exp_month,
            card_exp_year=card.exp_year,
            is_default=not existing,
        ))
        if method.is_default:
            await self.provider.set_default_payment_method(customer_id, card.id)
        return method

    async def set_default_payment_method(self, user: User, method_id: str) -> PaymentMethod:
        method = await self.store.get_payment_method(user.id, method_id)
        if method is None:
            raise NotFoundError("Payment method not found")

        if self.provider and user.stripe_customer_id:
            await self.provider.set_default_payment_method(
                user.stripe_customer_id, method.stripe_payment_method_id,
            )
        for other in await self.store.list_payment_methods(user.id):
            if other.is_default and other.id != method.id:
                await self.store.update_payment_method(user.id, other.id, is_default=False)
        return await self.store.update_payment_method(user.id, method.id, is_default=True)

    async def delete_payment_method(self, user: User, method_id: str) -> None:
        method = await self.store.get_payment_method(user.id, method_id)
        if method is None:
            raise NotFoundError("Payment method not found")
        if self.provider:
            await self.provider.detach_payment_method(method.stripe_payment_method_id)
        await self.store.delete_payment_method(user.id, method_id)
