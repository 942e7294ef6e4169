"""Prompt templates for product copy and SEO generation."""

DEFAULT_VOICE = "sales"

_VOICE_BRIEFS = {
    "sales": (
        "Create a compelling sales-focused product description for \"{product_name}\" "
        "in the {category} category.\n"
        "Target audience: {audience}. Key features: {features}.\n"
        "Make it persuasive, benefit-focused, and include a clear call-to-action. "
        "Keep it under 150 words."
    ),
    "seo": (
        "Create an SEO-optimized product description for \"{product_name}\" "
        "in the {category} category.\n"
        "Target audience: {audience}. Key features: {features}.\n"
        "Include relevant keywords naturally, focus on search-friendly language, "
        "and maintain readability. Keep it under 160 words."
    ),
    "casual": (
        "Create a casual, friendly product description for \"{product_name}\" "
        "in the {category} category.\n"
        "Target audience: {audience}. Key features: {features}.\n"
        "Use conversational tone, emojis where appropriate, and make it relatable "
        "and fun. Keep it under 150 words."
    ),
}

BRAND_VOICES = tuple(_VOICE_BRIEFS)

_DESCRIPTION_FORMAT = '\nRespond with JSON in this format: { "description": "your description here" }'

_SEO_TEMPLATE = """Optimize the following product for SEO:
Current Title: "{current_title}"
Keywords: "{keywords}"
Category: "{category}"
Current Meta: "{current_meta}"

Create an optimized SEO title (under 60 characters), meta description (under 160 characters),
and suggest 5-7 relevant keywords. Calculate an SEO score out of 100.

Respond with JSON in this format:
{{
  "optimizedTitle": "your title",
  "optimizedMeta": "your meta description",
  "keywords": ["keyword1", "keyword2", "keyword3"],
  "seoScore": 85
}}"""


def resolve_voice(brand_voice: str | None) -> str:
    """Unknown or missing voices fall back to the sales voice."""
    if brand_voice in _VOICE_BRIEFS:
        return brand_voice
    return DEFAULT_VOICE


def description_prompt(
    product_name: str,
    category: str = "",
    features: str = "",
    audience: str = "",
    brand_voice: str | None = None,
) -> str:
    brief = _VOICE_BRIEFS[resolve_voice(brand_voice)]
    return brief.format(
        product_name=product_name,
        category=category,
        features=features,
        audience=audience,
    ) + _DESCRIPTION_FORMAT


def seo_prompt(current_title: str, keywords: str, current_meta: str = "", category: str = "") -> str:
    return _SEO_TEMPLATE.format(
        current_title=current_title,
        keywords=keywords,
        current_meta=current_meta,
        category=category,
    )
