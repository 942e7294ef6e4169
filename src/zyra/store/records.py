"""Plain records exchanged between the record store and the services.

Both storage backends return these dataclasses, never ORM instances, so a
service cannot tell which backend it is talking to.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional

from zyra.common.models import generate_uuid, utcnow

# Aggregate counters on UsageStats, in storage (snake_case) form.
STAT_FIELDS: tuple[str, ...] = (
    "total_revenue",
    "total_orders",
    "conversion_rate",
    "cart_recovery_rate",
    "products_optimized",
    "emails_sent",
    "sms_sent",
    "ai_generations_used",
    "seo_optimizations_used",
)


@dataclass
class User:
    email: str
    password_hash: str
    full_name: str
    id: str = field(default_factory=generate_uuid)
    role: str = "user"
    plan: str = "trial"
    trial_end_date: Optional[datetime] = field(
        default_factory=lambda: utcnow() + timedelta(days=7)
    )
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    image_url: Optional[str] = None
    preferred_language: str = "en"
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Product:
    user_id: str
    name: str
    price: str
    category: str
    id: str = field(default_factory=generate_uuid)
    description: Optional[str] = None
    original_description: Optional[str] = None
    stock: int = 0
    image: Optional[str] = None
    features: Optional[str] = None
    tags: Optional[str] = None
    is_optimized: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Campaign:
    user_id: str
    type: str
    name: str
    content: str
    id: str = field(default_factory=generate_uuid)
    subject: Optional[str] = None
    status: str = "draft"
    sent_count: int = 0
    open_rate: int = 0
    click_rate: int = 0
    conversion_rate: int = 0
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class UsageStats:
    user_id: str
    id: str = field(default_factory=generate_uuid)
    total_revenue: int = 0
    total_orders: int = 0
    conversion_rate: int = 0
    cart_recovery_rate: int = 0
    products_optimized: int = 0
    emails_sent: int = 0
    sms_sent: int = 0
    ai_generations_used: int = 0
    seo_optimizations_used: int = 0
    last_updated: datetime = field(default_factory=utcnow)


@dataclass
class ActivityLogEntry:
    user_id: str
    action: str
    description: str
    id: str = field(default_factory=generate_uuid)
    tool_used: Optional[str] = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class ToolAccess:
    user_id: str
    tool_name: str
    id: str = field(default_factory=generate_uuid)
    access_count: int = 1
    first_accessed: datetime = field(default_factory=utcnow)
    last_accessed: datetime = field(default_factory=utcnow)


@dataclass
class RealtimeMetric:
    user_id: str
    metric_name: str
    value: str
    id: str = field(default_factory=generate_uuid)
    change_percent: Optional[str] = None
    is_positive: bool = True
    timestamp: datetime = field(default_factory=utcnow)


@dataclass
class Notification:
    user_id: str
    title: str
    message: str
    id: str = field(default_factory=generate_uuid)
    type: str = "info"
    is_read: bool = False
    action_url: Optional[str] = None
    action_label: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
    read_at: Optional[datetime] = None


@dataclass
class SubscriptionPlan:
    plan_name: str
    price: int
    id: str = field(default_factory=generate_uuid)
    interval: str = "month"
    features: list[str] = field(default_factory=list)
    limits: dict[str, Any] = field(default_factory=dict)
    stripe_price_id: Optional[str] = None
    is_active: bool = True
    currency: str = "USD"
    description: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class Subscription:
    user_id: str
    plan_id: str
    id: str = field(default_factory=generate_uuid)
    stripe_subscription_id: Optional[str] = None
    status: str = "active"
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    cancel_at_period_end: bool = False
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)


@dataclass
class Invoice:
    user_id: str
    amount: int
    status: str
    id: str = field(default_factory=generate_uuid)
    subscription_id: Optional[str] = None
    stripe_invoice_id: Optional[str] = None
    currency: str = "USD"
    invoice_number: Optional[str] = None
    invoice_url: Optional[str] = None
    pdf_url: Optional[str] = None
    due_date: Optional[datetime] = None
    paid_at: Optional[datetime] = None
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class PaymentMethod:
    user_id: str
    stripe_payment_method_id: str
    type: str
    id: str = field(default_factory=generate_uuid)
    card_brand: Optional[str] = None
    card_last4: Optional[str] = None
    card_exp_month: Optional[int] = None
    card_exp_year: Optional[int] = None
    is_default: bool = False
    created_at: datetime = field(default_factory=utcnow)
