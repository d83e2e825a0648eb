"""Support specialist.

Drafts the customer-facing sale announcement and a fixed FAQ. The
announcement is written by the LLM when enabled and falls back to a
template with the same fields on any generation problem, so the merged
plan always carries an announcement.
"""

from __future__ import annotations

import asyncio
import re
from typing import List, Optional, Tuple

from loguru import logger

from clients.llm_client import GenerationError, TextGenerationClient
from config.settings import Settings, settings as default_settings
from models.actions import Announcement, Faq, GeneratedBy
from models.listing import Listing
from models.workflow import SpecialistId, SpecialistRequest, SpecialistResult
from storage.listing_store import ListingStore, StoreError
from utils.helpers import format_price

LLM_CONFIDENCE = 0.95
TEMPLATE_CONFIDENCE = 0.90
PROMPT_LISTING_LIMIT = 5

ANNOUNCEMENT_PROMPT = """\
You are a creative marketing copywriter for a collectibles marketplace.

Write an exciting, engaging sale announcement for a Weekend Sale with {discount}% off.

{listing_context}
Requirements:
- Create an attention-grabbing headline with emoji
- Write compelling body copy (3-4 sentences)
- Mention the discount prominently
- Create urgency (weekend only, limited stock)
- Keep a friendly, enthusiastic tone
- End with a clear call-to-action

Respond with ONLY the announcement in this exact format:
HEADLINE: [your headline here]
BODY: [your body copy here]
"""

_HEADLINE_RE = re.compile(r"HEADLINE:\s*(.+?)\s*(?:\n|BODY:|$)", re.DOTALL)
_BODY_RE = re.compile(r"BODY:\s*(.+)", re.DOTALL)


def template_title(discount: int) -> str:
    return f"🎉 Weekend Sale - {discount}% Off Everything!"


def template_body(discount: int) -> str:
    return (
        "Don't miss our biggest sale of the season!\n\n"
        f"This weekend only, enjoy {discount}% off on all items in our shop.\n"
        "Stock is limited, so shop early for the best selection.\n\n"
        "Sale runs Friday through Sunday. No code needed - prices already reduced!"
    )


def template_announcement(discount: int) -> Announcement:
    return Announcement(
        title=template_title(discount),
        body=template_body(discount),
        generated_by=GeneratedBy.TEMPLATE,
    )


def build_faqs(discount: int) -> List[Faq]:
    return [
        Faq(
            question="When does the sale end?",
            answer=f"The {discount}% off weekend sale ends Sunday at midnight.",
        ),
        Faq(
            question="Do I need a coupon code?",
            answer="No coupon needed! All sale prices are already applied.",
        ),
        Faq(
            question="Can I combine this with other offers?",
            answer="This sale cannot be combined with other discounts or promotions.",
        ),
        Faq(
            question="Is shipping included?",
            answer="Standard shipping rates apply. Orders over $50 get free shipping!",
        ),
    ]


def format_listings_for_prompt(listings: List[Listing]) -> str:
    if not listings:
        return ""
    items = "\n".join(
        f"- {item.title} ({format_price(item.price)})"
        for item in listings[:PROMPT_LISTING_LIMIT]
    )
    return (
        "Featured items in this sale:\n"
        f"{items}\n\n"
        "Use these items to make the announcement more specific and compelling.\n"
    )


def parse_announcement(text: str, discount: int) -> Announcement:
    """Parse a ``HEADLINE:`` / ``BODY:`` reply.

    A missing part is filled from the template; a reply with neither
    marker is malformed.
    """
    headline = _HEADLINE_RE.search(text)
    body = _BODY_RE.search(text)
    if headline is None and body is None:
        raise GenerationError("reply has neither HEADLINE nor BODY")

    return Announcement(
        title=headline.group(1).strip() if headline else template_title(discount),
        body=body.group(1).strip() if body else template_body(discount),
        generated_by=GeneratedBy.LLM,
    )


class SupportSpecialist:
    """Drafts customer-facing sale communications."""

    id = SpecialistId.SUPPORT

    def __init__(
        self,
        store: ListingStore,
        llm: Optional[TextGenerationClient] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self._store = store
        self._llm = llm
        self._settings = config or default_settings

    async def handle(self, request: SpecialistRequest) -> SpecialistResult:
        discount = request.discount_percent
        logger.debug(f"SupportSpecialist: discount={discount}, use_llm={request.use_llm}")

        announcement, method = await self._draft_announcement(request)
        faqs = build_faqs(discount)

        return SpecialistResult(
            summary=f"Drafted announcement ({method}) and {len(faqs)} FAQ responses",
            actions=[announcement, *faqs],
            questions=[],
            confidence=LLM_CONFIDENCE if method == "llm" else TEMPLATE_CONFIDENCE,
            metadata={"generation_method": method},
        )

    async def _draft_announcement(self, request: SpecialistRequest) -> Tuple[Announcement, str]:
        discount = request.discount_percent
        if not request.use_llm:
            return template_announcement(discount), "template"

        try:
            announcement = await self._generate(request)
        except Exception as exc:
            logger.warning(f"LLM generation failed, using template: {exc!r}")
            return template_announcement(discount), "template_fallback"
        return announcement, "llm"

    async def _generate(self, request: SpecialistRequest) -> Announcement:
        if self._llm is None:
            raise GenerationError("no text generation client")

        try:
            listings = self._store.list(request.actor)
        except StoreError as exc:
            logger.debug(f"SupportSpecialist: no listing context: {exc}")
            listings = []

        prompt = ANNOUNCEMENT_PROMPT.format(
            discount=request.discount_percent,
            listing_context=format_listings_for_prompt(listings),
        )
        text = await asyncio.wait_for(
            self._llm.complete(
                prompt,
                max_tokens=self._settings.llm_max_tokens,
                temperature=self._settings.llm_temperature,
            ),
            timeout=self._settings.llm_timeout_seconds,
        )
        return parse_announcement(text, request.discount_percent)
