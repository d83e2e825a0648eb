"""Recommendations specialist.

Rule-based: pairs up listings into bundle suggestions and writes a short
strategy note. No LLM involved.
"""

from __future__ import annotations

from typing import List

from loguru import logger

from models.actions import Bundle
from models.listing import Listing, ListingStatus
from models.workflow import SpecialistId, SpecialistRequest, SpecialistResult
from storage.listing_store import ListingStore, StoreError
from utils.helpers import chunk_list

CONFIDENCE = 0.80
MAX_BUNDLES = 3
BUNDLE_DISCOUNT_BOOST = 5
TOP_ITEMS_LIMIT = 5

PUBLISH_DRAFTS_QUESTION = "Should I also publish draft listings?"
LIMIT_ITEMS_QUESTION = f"Should I limit the sale to your top {TOP_ITEMS_LIMIT} items?"


class RecommendationsSpecialist:
    """Provides bundle and strategy recommendations for a sale."""

    id = SpecialistId.RECOMMENDATIONS

    def __init__(self, store: ListingStore) -> None:
        self._store = store

    async def handle(self, request: SpecialistRequest) -> SpecialistResult:
        try:
            listings = self._store.list(request.actor)
        except StoreError as exc:
            logger.warning(f"RecommendationsSpecialist: read failed: {exc}")
            return SpecialistResult.failed(f"Failed to generate recommendations: {exc}")

        bundles = suggest_bundles(listings)
        logger.info(f"RecommendationsSpecialist: {len(bundles)} bundles suggested")
        return SpecialistResult(
            summary=build_strategy(listings, request.discount_percent),
            actions=bundles,
            questions=build_questions(listings),
            confidence=CONFIDENCE,
        )


def suggest_bundles(listings: List[Listing]) -> List[Bundle]:
    """Group consecutive listings two at a time, keeping the first three groups.

    With an odd number of listings the last group holds a single listing.
    """
    if len(listings) < 2:
        return []

    bundles: List[Bundle] = []
    for idx, pair in enumerate(chunk_list(listings, 2)):
        if idx >= MAX_BUNDLES:
            break
        bundles.append(
            Bundle(
                bundle_id=f"bundle_{idx + 1}",
                ids=[item.id for item in pair],
                suggestion="Bundle: " + " + ".join(item.title for item in pair),
                discount_boost=BUNDLE_DISCOUNT_BOOST,
            )
        )
    return bundles


def build_strategy(listings: List[Listing], discount: int) -> str:
    published = sum(1 for item in listings if item.status == ListingStatus.PUBLISHED)
    drafts = len(listings) - published
    return (
        f"Strategy: Apply {discount}% discount across {len(listings)} items. "
        f"{published} already published, {drafts} drafts to publish. "
        f"Consider bundling related items for additional {BUNDLE_DISCOUNT_BOOST}% off."
    )


def build_questions(listings: List[Listing]) -> List[str]:
    questions: List[str] = []
    if any(item.is_draft for item in listings):
        questions.append(PUBLISH_DRAFTS_QUESTION)
    if len(listings) > TOP_ITEMS_LIMIT:
        questions.append(LIMIT_ITEMS_QUESTION)
    return questions
