"""Canned reply templates keyed by tone and rating band.

Used as the deterministic fallback when the completion API fails. Every
(tone, band) cell has at least one template; templates carry a ``{name}``
interpolation point for the customer name.
"""

from __future__ import annotations

import random

from tastyreply.domain.reviews.models import RatingBand, Tone, rating_band

DEFAULT_CUSTOMER_NAME = "valued guest"

TEMPLATES: dict[Tone, dict[RatingBand, tuple[str, ...]]] = {
    Tone.PROFESSIONAL: {
        RatingBand.HIGH: (
            "Thank you for your excellent review, {name}. We're delighted you had a "
            "positive experience and look forward to serving you again soon.",
            "Thank you for the wonderful feedback, {name}. We truly appreciate you "
            "taking the time to share it and hope to welcome you back soon.",
        ),
        RatingBand.MEDIUM: (
            "Thank you for your feedback, {name}. We appreciate your honest review "
            "and will use it to improve our service.",
        ),
        RatingBand.LOW: (
            "Dear {name}, we sincerely apologize for not meeting your expectations. "
            "Please contact us directly so we can address your concerns.",
        ),
    },
    Tone.FRIENDLY: {
        RatingBand.HIGH: (
            "Hi {name}! Thanks so much for the amazing review! We're thrilled you "
            "enjoyed your visit and can't wait to see you again! 😊",
        ),
        RatingBand.MEDIUM: (
            "Hi {name}, thanks for taking the time to share your thoughts! We'd love "
            "the chance to turn your 3-star experience into a 5-star one next time!",
        ),
        RatingBand.LOW: (
            "Hi {name}, we're really sorry to hear about your experience. This isn't "
            "like us at all. Please give us another chance to make it right!",
        ),
    },
    Tone.APOLOGETIC: {
        RatingBand.HIGH: (
            "{name}, we're grateful for your kind words and wonderful rating. "
            "Your satisfaction means everything to us.",
        ),
        RatingBand.MEDIUM: (
            "{name}, we appreciate your feedback and apologize for any aspects that "
            "didn't meet your expectations. We're committed to doing better.",
        ),
        RatingBand.LOW: (
            "{name}, we are deeply sorry for your disappointing experience. This "
            "falls far short of our standards, and we'd like to make amends.",
        ),
    },
    Tone.ENTHUSIASTIC: {
        RatingBand.HIGH: (
            "WOW! Thank you so much, {name}! Your amazing review made our day! "
            "We're absolutely thrilled you loved your experience! 🌟",
        ),
        RatingBand.MEDIUM: (
            "Hey {name}! Thanks for the honest feedback! We're pumped to have the "
            "chance to wow you next time. Challenge accepted! 💪",
        ),
        RatingBand.LOW: (
            "{name}, thank you for bringing this to our attention! We're incredibly "
            "motivated to turn this around and show you the experience you deserve!",
        ),
    },
}


def _resolve_name(customer_name: str | None) -> str:
    name = (customer_name or "").strip()
    return name or DEFAULT_CUSTOMER_NAME


def choose_template(
    tone: Tone | str,
    band: RatingBand | str,
    rng: random.Random | None = None,
) -> str:
    """Choose a raw template for the given tone and rating band.

    Cells with several variants are sampled with ``rng``; pass a seeded
    ``random.Random`` to fix the outcome. Without ``rng`` the first variant
    is returned.

    Raises:
        ValueError: If tone or band is not recognized

    """
    variants = TEMPLATES[Tone(tone)][RatingBand(band)]
    if rng is None or len(variants) == 1:
        return variants[0]
    return rng.choice(variants)


def lookup(
    tone: Tone | str,
    band: RatingBand | str,
    customer_name: str | None = None,
    rng: random.Random | None = None,
) -> str:
    """Return the fallback reply for (tone, band) addressed to the customer.

    Examples:
        >>> lookup("professional", "high", "Sarah").startswith(
        ...     "Thank you for your excellent review, Sarah."
        ... )
        True

    """
    return choose_template(tone, band, rng).format(name=_resolve_name(customer_name))


def fallback_reply(
    tone: Tone | str,
    rating: int,
    customer_name: str | None = None,
    rng: random.Random | None = None,
) -> str:
    """Fallback reply selected by the rating band of ``rating``."""
    return lookup(tone, rating_band(rating), customer_name, rng)


__all__ = ["TEMPLATES", "DEFAULT_CUSTOMER_NAME", "choose_template", "lookup", "fallback_reply"]
