"""Default subscription plan catalogue. Prices are in cents; -1 means unlimited."""

DEFAULT_PLANS: list[dict] = [
    {
        "plan_name": "Free Trial",
        "price": 0,
        "description": "Every premium feature free for 7 days",
        "features": [
            "Try all premium features free for 7 days",
            "No credit card required (optional)",
            "Cancel anytime before trial ends",
            "Perfect for testing Zyra on your own store before upgrading",
        ],
        "limits": {"products": 100, "emails": 500, "sms": 50, "aiGenerations": 50, "seoOptimizations": 50},
    },
    {
        "plan_name": "Starter",
        "price": 1500,
        "description": "AI copy and email for small catalogues",
        "features": [
            "Optimize up to 100 products with AI-generated descriptions",
            "Send up to 500 AI-crafted emails per month (upsells, receipts)",
            "Access to SEO title + meta tag generator",
            "AI image alt-text generator for accessibility + SEO boost",
            "Basic analytics dashboard (track optimized products + email open rates)",
        ],
        "limits": {"products": 100, "emails": 500, "sms": 0, "aiGenerations": 500, "seoOptimizations": 500},
    },
    {
        "plan_name": "Pro",
        "price": 2500,
        "description": "Unlimited optimization with SMS cart recovery",
        "features": [
            "Unlimited product optimizations (no limits on AI copy)",
            "Send up to 2,000 AI-crafted emails per month",
            "Recover abandoned carts with 500 SMS reminders per month",
            "Advanced analytics dashboard (email CTR, SMS conversion, keyword density)",
            "Priority AI processing for faster responses",
        ],
        "limits": {"products": -1, "emails": 2000, "sms": 500, "aiGenerations": -1, "seoOptimizations": -1},
    },
    {
        "plan_name": "Growth",
        "price": 4900,
        "description": "Everything unlimited, plus A/B testing",
        "features": [
            "Unlimited products, emails, and SMS recovery",
            "Full analytics suite: keyword insights, revenue from emails/SMS, optimization impact",
            "A/B testing for AI-generated content",
            "Premium template library for email & SMS",
            "Early access to new AI tools",
            "Priority support",
        ],
        "limits": {"products": -1, "emails": -1, "sms": -1, "aiGenerations": -1, "seoOptimizations": -1},
    },
]
