"""Dependency injection singletons for Zyra."""

from zyra.ai.provider import OpenAIProvider, TextProvider
from zyra.ai.service import AIService
from zyra.auth.service import AuthService
from zyra.billing.provider import BillingProvider, StripeBillingProvider
from zyra.billing.service import BillingService
from zyra.campaigns.service import CampaignService
from zyra.common.config import get_settings
from zyra.notifications.service import NotificationService
from zyra.products.service import ProductService
from zyra.store import build_store
from zyra.store.base import RecordStore
from zyra.usage.service import UsageService

_store: RecordStore | None = None
_usage: UsageService | None = None
_auth: AuthService | None = None
_text_provider: TextProvider | None = None
_ai: AIService | None = None
_products: ProductService | None = None
_campaigns: CampaignService | None = None
_notifications: NotificationService | None = None
_billing_provider: BillingProvider | None = None
_billing: BillingService | None = None


def get_store() -> RecordStore:
    global _store
    if _store is None:
        _store = build_store(get_settings())
    return _store


def get_usage_service() -> UsageService:
    global _usage
    if _usage is None:
        _usage = UsageService(get_settings(), get_store())
    return _usage


def get_auth_service() -> AuthService:
    global _auth
    if _auth is None:
        _auth = AuthService(get_settings(), get_store())
    return _auth


def get_text_provider() -> TextProvider:
    global _text_provider
    if _text_provider is None:
        _text_provider = OpenAIProvider(get_settings())
    return _text_provider


def get_ai_service() -> AIService:
    global _ai
    if _ai is None:
        _ai = AIService(get_text_provider(), usage=get_usage_service())
    return _ai


def get_product_service() -> ProductService:
    global _products
    if _products is None:
        _products = ProductService(get_store())
    return _products


def get_campaign_service() -> CampaignService:
    global _campaigns
    if _campaigns is None:
        _campaigns = CampaignService(get_store(), usage=get_usage_service())
    return _campaigns


def get_notification_service() -> NotificationService:
    global _notifications
    if _notifications is None:
        _notifications = NotificationService(get_store())
    return _notifications


def get_billing_provider() -> BillingProvider | None:
    global _billing_provider
    if _billing_provider is None and get_settings().billing_enabled:
        _billing_provider = StripeBillingProvider(get_settings())
    return _billing_provider


def get_billing_service() -> BillingService:
    global _billing
    if _billing is None:
        _billing = BillingService(get_settings(), get_store(), provider=get_billing_provider())
    return _billing


def set_text_provider(provider: TextProvider) -> None:
    """Swap the AI provider (tests, alternative backends)."""
    global _text_provider, _ai
    _text_provider = provider
    _ai = None


def set_billing_provider(provider: BillingProvider | None) -> None:
    global _billing_provider, _billing
    _billing_provider = provider
    _billing = None


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _store, _usage, _auth, _text_provider, _ai
    global _products, _campaigns, _notifications, _billing_provider, _billing
    _store = None
    _usage = None
    _auth = None
    _text_provider = None
    _ai = None
    _products = None
    _campaigns = None
    _notifications = None
    _billing_provider = None
    _billing = None
