"""Listings specialist.

Reads the current listings and proposes the sale mutations: a discounted
price for every listing and a publish step for every draft. It never
changes the store itself.
"""

from __future__ import annotations

from typing import List

from loguru import logger

from models.actions import PriceUpdate, ProposedAction, Publish
from models.listing import Listing
from models.workflow import SpecialistId, SpecialistRequest, SpecialistResult
from storage.listing_store import ListingStore, StoreError
from utils.helpers import discounted_price

CONFIDENCE = 0.95


class ListingsSpecialist:
    """Analyzes listings and calculates sale prices."""

    id = SpecialistId.LISTINGS

    def __init__(self, store: ListingStore) -> None:
        self._store = store

    async def handle(self, request: SpecialistRequest) -> SpecialistResult:
        discount = request.discount_percent
        try:
            listings = self._store.list(request.actor)
        except StoreError as exc:
            logger.warning(f"ListingsSpecialist: read failed: {exc}")
            return SpecialistResult.failed(f"Failed to analyze listings: {exc}")

        actions = build_actions(listings, discount)
        # item count covers every proposed action, publishes included
        summary = (
            f"Found {len(listings)} listings, calculated {discount}% discount "
            f"on {len(actions)} items"
        )

        logger.info(f"ListingsSpecialist: {summary}")
        return SpecialistResult(
            summary=summary,
            actions=actions,
            questions=[],
            confidence=CONFIDENCE,
        )


def build_actions(listings: List[Listing], discount: int) -> List[ProposedAction]:
    """Price update then (for drafts) publish, listing by listing."""
    actions: List[ProposedAction] = []
    for listing in listings:
        if listing.price is not None:
            actions.append(
                PriceUpdate(
                    listing_id=listing.id,
                    current_price=listing.price,
                    new_price=discounted_price(listing.price, discount),
                    discount_percent=discount,
                )
            )
        if listing.is_draft:
            actions.append(Publish(listing_id=listing.id))
    return actions
