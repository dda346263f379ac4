"""Reply policy: prompts sent to the completion API."""

from __future__ import annotations

from tastyreply.domain.reviews.models import (
    DEFAULT_BUSINESS_NAME,
    DEFAULT_BUSINESS_TYPE,
    BusinessInfo,
    Tone,
)

DEFAULT_PROMPT_CUSTOMER = "a customer"
EMPTY_TEXT_MARKER = "(no text provided)"


def contextual_directive(rating: int) -> str:
    """Instruction matching the star rating.

    Examples:
        >>> contextual_directive(5)
        'Thank them for the positive feedback and invite them back.'
        >>> contextual_directive(2)
        'Apologize sincerely and offer to make things right.'

    """
    if rating >= 4:
        return "Thank them for the positive feedback and invite them back."
    if rating == 3:
        return "Acknowledge their mixed experience and express desire to improve."
    return "Apologize sincerely and offer to make things right."


def build_reply_prompt(
    *,
    rating: int,
    text: str | None,
    customer_name: str | None,
    business: BusinessInfo | None,
    tone: Tone | str,
) -> str:
    """Build the user prompt for one tone.

    Args:
        rating: Star rating (1-5)
        text: Review text from customer (may be empty)
        customer_name: Reviewer display name
        business: Business context; missing name falls back to "our restaurant"
        tone: Rhetorical style of the reply

    Returns:
        Prompt for AI reply generation (never empty, never contains "None")

    """
    tone_value = Tone(tone).value
    name = (customer_name or "").strip() or DEFAULT_PROMPT_CUSTOMER
    body = (text or "").strip() or EMPTY_TEXT_MARKER
    business_name = ((business or {}).get("business_name") or "").strip() or DEFAULT_BUSINESS_NAME

    return (
        f"Write a {tone_value} response to this {rating}-star review from {name}:\n"
        f'"{body}"\n'
        f"\n"
        f"Business name: {business_name}\n"
        f"Instructions: {contextual_directive(rating)}"
    )


def build_system_prompt(tone: Tone | str, business_type: str | None = None) -> str:
    """System instruction constraining length and grounding for one tone."""
    kind = (business_type or "").strip() or DEFAULT_BUSINESS_TYPE
    return (
        f"You are a helpful assistant that writes {Tone(tone).value} responses to "
        f"customer reviews for a {kind}. Keep responses concise (2-3 sentences), "
        f"genuine, and address specific points mentioned in the review."
    )


__all__ = ["contextual_directive", "build_reply_prompt", "build_system_prompt"]
