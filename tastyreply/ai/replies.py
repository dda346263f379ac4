"""AI-powered reply generation with per-tone catalog fallback."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from datetime import datetime, timezone

import openai

from tastyreply.core.config import Settings, get_settings
from tastyreply.core.errors import UpstreamFailure
from tastyreply.core.metrics import (
    external_api_duration_seconds,
    external_api_requests_total,
    replies_generated_total,
)
from tastyreply.domain.reviews.models import TONES, BusinessInfo, ReplyCandidate, Tone
from tastyreply.domain.reviews.reply_policy import build_reply_prompt, build_system_prompt
from tastyreply.domain.reviews.templates import fallback_reply

logger = logging.getLogger(__name__)


class CompletionClient:
    """Single-attempt, timeout-bounded wrapper over the OpenAI chat API."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "gpt-3.5-turbo",
        timeout_sec: float = 15.0,
        max_tokens: int = 150,
        temperature: float = 0.7,
    ):
        self.model = model
        self.timeout_sec = timeout_sec
        self.max_tokens = max_tokens
        self.temperature = temperature
        self._client = (
            openai.AsyncOpenAI(api_key=api_key, max_retries=0, timeout=timeout_sec)
            if api_key
            else None
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> CompletionClient:
        return cls(
            api_key=settings.openai_api_key,
            model=settings.openai_model,
            timeout_sec=settings.openai_timeout_seconds,
            max_tokens=settings.openai_max_tokens,
            temperature=settings.openai_temperature,
        )

    async def complete(self, system: str, prompt: str) -> str:
        """Return the completion text.

        Raises:
            UpstreamFailure: On missing key, timeout, API error or empty output

        """
        if self._client is None:
            raise UpstreamFailure("OpenAI API key not configured")

        t0 = time.perf_counter()
        status = "error"
        try:
            response = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": system},
                        {"role": "user", "content": prompt},
                    ],
                    max_tokens=self.max_tokens,
                    temperature=self.temperature,
                ),
                timeout=self.timeout_sec,
            )
            content = response.choices[0].message.content
            if not isinstance(content, str) or not content.strip():
                status = "malformed"
                raise UpstreamFailure("Empty completion")
            status = "ok"
            return content.strip()
        except asyncio.TimeoutError as e:
            status = "timeout"
            raise UpstreamFailure("Completion timed out") from e
        except openai.OpenAIError as e:
            raise UpstreamFailure(f"Completion failed: {type(e).__name__}") from e
        except (AttributeError, IndexError, TypeError) as e:
            status = "malformed"
            raise UpstreamFailure("Malformed completion response") from e
        finally:
            external_api_requests_total.labels(
                service="openai", endpoint="chat.completions", status=status
            ).inc()
            external_api_duration_seconds.labels(
                service="openai", endpoint="chat.completions"
            ).observe(time.perf_counter() - t0)


class ReplyGenerator:
    """Generate one reply candidate per tone.

    Each tone is a single completion attempt. A failed tone is replaced by the
    canned reply for its rating band; other tones are unaffected.
    """

    def __init__(self, completion: CompletionClient, rng: random.Random | None = None):
        self.completion = completion
        self.rng = rng

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> ReplyGenerator:
        settings = settings or get_settings()
        rng = random.Random(settings.fallback_seed) if settings.fallback_seed is not None else None
        return cls(CompletionClient.from_settings(settings), rng=rng)

    async def generate(
        self,
        *,
        rating: int,
        text: str | None,
        customer_name: str | None,
        business: BusinessInfo,
    ) -> list[ReplyCandidate]:
        """Generate candidates in the order professional, friendly, apologetic, enthusiastic.

        Completions run concurrently; the result is assembled by tone, not by
        completion order.
        """
        results = await asyncio.gather(
            *(
                self.generate_one(
                    rating=rating,
                    text=text,
                    customer_name=customer_name,
                    business=business,
                    tone=tone,
                )
                for tone in TONES
            )
        )
        return list(results)

    async def generate_one(
        self,
        *,
        rating: int,
        text: str | None,
        customer_name: str | None,
        business: BusinessInfo,
        tone: Tone | str,
    ) -> ReplyCandidate:
        """Generate a single candidate for ``tone`` with catalog fallback."""
        tone = Tone(tone)
        prompt = build_reply_prompt(
            rating=rating,
            text=text,
            customer_name=customer_name,
            business=business,
            tone=tone,
        )
        system = build_system_prompt(tone, business.get("business_type"))

        try:
            reply = await self.completion.complete(system, prompt)
            source = "ai"
        except Exception as e:
            logger.warning(
                "reply_generation_fallback",
                extra={"tone": tone.value, "rating": rating, "error": str(e)},
            )
            reply = fallback_reply(tone, rating, customer_name, self.rng)
            source = "fallback"

        replies_generated_total.labels(tone=tone.value, source=source).inc()
        return ReplyCandidate(
            text=reply,
            tone=tone.value,
            source=source,
            generated_at=datetime.now(timezone.utc),
        )


__all__ = ["CompletionClient", "ReplyGenerator"]
