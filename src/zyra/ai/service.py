"""AI copy service: product descriptions and SEO metadata."""

from typing import Any

from zyra.ai.prompts import description_prompt, resolve_voice, seo_prompt
from zyra.ai.provider import TextProvider
from zyra.ai.schemas import SEOResult
from zyra.common.exceptions import UpstreamServiceError, ValidationError
from zyra.common.logging import get_logger
from zyra.usage.service import UsageService

logger = get_logger("ai")


def _as_keywords(raw: Any) -> list[str]:
    if isinstance(raw, str):
        raw = raw.split(",")
    if not isinstance(raw, list):
        return []
    return [str(k).strip() for k in raw if str(k).strip()]


def _as_score(raw: Any) -> int:
    try:
        score = int(round(float(raw)))
    except (TypeError, ValueError):
        return 0
    return max(0, min(100, score))


class AIService:
    """Generates copy through a :class:`TextProvider` and meters successful calls."""

    def __init__(self, provider: TextProvider, usage: UsageService | None = None):
        self.provider = provider
        self.usage = usage

    async def generate_description(
        self,
        user_id: str,
        product_name: str,
        category: str = "",
        features: str = "",
        audience: str = "",
        brand_voice: str | None = None,
    ) -> str:
        if not product_name.strip():
            raise ValidationError("Product name is required")

        voice = resolve_voice(brand_voice)
        result = await self.provider.complete_json(
            description_prompt(product_name, category, features, audience, voice)
        )
        description = result.get("description")
        if not isinstance(description, str) or not description.strip():
            raise UpstreamServiceError("Failed to generate description", service="openai")

        if self.usage:
            await self.usage.increment_stat(user_id, "ai_generations_used")
            await self.usage.record_activity(
                user_id, "ai_generation",
                f"Generated {voice} description for {product_name}",
                tool_used="ai-generator",
                metadata={"brandVoice": voice, "category": category},
            )
        return description.strip()

    async def optimize_seo(
        self,
        user_id: str,
        current_title: str,
        keywords: str,
        current_meta: str = "",
        category: str = "",
    ) -> SEOResult:
        if not current_title.strip() or not keywords.strip():
            raise ValidationError("Title and keywords are required")

        result = await self.provider.complete_json(
            seo_prompt(current_title, keywords, current_meta, category)
        )
        seo = SEOResult(
            optimized_title=str(result.get("optimizedTitle") or ""),
            optimized_meta=str(result.get("optimizedMeta") or ""),
            keywords=_as_keywords(result.get("keywords")),
            seo_score=_as_score(result.get("seoScore")),
        )
        if not seo.optimized_title:
            raise UpstreamServiceError("Failed to optimize SEO", service="openai")

        if self.usage:
            await self.usage.increment_stat(user_id, "seo_optimizations_used")
            await self.usage.record_activity(
                user_id, "seo_optimization",
                f"Optimized SEO for {current_title}",
                tool_used="seo-tools",
                metadata={"seoScore": seo.seo_score},
            )
        logger.info("SEO optimized", extra={"user_id": user_id, "tool": "seo-tools"})
        return seo
