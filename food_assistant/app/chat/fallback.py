from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FallbackRule:
    category: str
    keywords: tuple[str, ...]
    reply: str


@dataclass(frozen=True)
class FallbackReply:
    category: str
    text: str


FALLBACK_RULES: tuple[FallbackRule, ...] = (
    FallbackRule(
        category="recipe",
        keywords=("recipe", "make", "cook"),
        reply=(
            "I'm having trouble accessing my recipe database right now. "
            "Try searching online for recipes with your available ingredients!"
        ),
    ),
    FallbackRule(
        category="storage",
        keywords=("expire", "fresh", "store"),
        reply=(
            "For food safety: refrigerate leftovers within 2 hours, freeze meat "
            "you won't use in 3-5 days, and when in doubt, throw it out!"
        ),
    ),
    FallbackRule(
        category="shopping",
        keywords=("buy", "shop", "grocery"),
        reply=(
            "Based on your ingredients, consider buying fresh vegetables, herbs, "
            "and staples like onions and garlic to expand your recipe options!"
        ),
    ),
)

GENERIC_FALLBACK = FallbackReply(
    category="generic",
    text=(
        "I'm currently experiencing technical difficulties. For now, you might "
        "want to check your ingredient list and see what inspires you in the kitchen!"
    ),
)


def select_fallback(
    message: str,
    rules: tuple[FallbackRule, ...] = FALLBACK_RULES,
) -> FallbackReply:
    """Pick the canned reply for a failed provider call.

    Rules are checked in order against the lower-cased message and the first
    rule with any matching keyword wins; substring matches count, so "cooking"
    hits the recipe rule. Anything unmatched gets the generic reply.
    """
    lowered = message.lower()
    for rule in rules:
        if any(keyword in lowered for keyword in rule.keywords):
            return FallbackReply(category=rule.category, text=rule.reply)
    return GENERIC_FALLBACK
