"""In-memory listing store with actor-based policy checks."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from loguru import logger
from pydantic import ValidationError

from models.listing import Actor, ActorRole, Listing, ListingCreate, ListingStatus
from utils.helpers import to_money


class StoreError(Exception):
    """Base class for listing store failures."""


class ListingNotFoundError(StoreError):
    def __init__(self, listing_id: str) -> None:
        super().__init__(f"listing {listing_id} not found")
        self.listing_id = listing_id


class PolicyError(StoreError):
    """The actor is not allowed to perform the operation."""


class InvalidListingError(StoreError):
    """Rejected input, e.g. a negative price or an empty title."""


DEMO_LISTINGS: List[Dict[str, Any]] = [
    {"title": "Vintage Baseball Card - 1952 Topps", "price": "150.00", "quantity": 1},
    {"title": "Pokemon Charizard 1st Edition", "price": "500.00", "quantity": 1},
    {"title": "Magic: The Gathering Black Lotus", "price": "1000.00", "quantity": 1},
    {"title": "Rare Coin Collection (5 coins)", "price": "75.00", "quantity": 1},
    {"title": "Comic Book - Action Comics #1 Reprint", "price": "25.00", "quantity": 3},
]


class ListingStore:
    """
    Dictionary-backed store for Listing objects.

    Every operation takes the acting ``Actor`` explicitly:

    - guests only see published listings, users and admins see everything
    - only users and admins may create; the creator becomes the seller
    - admins may change any listing, users only their own

    When ``path`` is given the store is loaded from and written back to a
    single JSON file; otherwise it lives only as long as the process.
    """

    def __init__(self, path: Optional[Union[str, Path]] = None) -> None:
        self._path = Path(path) if path else None
        self._listings: Dict[str, Listing] = {}
        if self._path and self._path.exists():
            self._load()

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _load(self) -> None:
        with open(self._path, "r", encoding="utf-8") as fh:
            raw = json.load(fh)
        for item in raw:
            listing = Listing(**item)
            self._listings[listing.id] = listing
        logger.info(f"Loaded {len(self._listings)} listings from {self._path}.")

    def _save(self) -> None:
        if not self._path:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w", encoding="utf-8") as fh:
            json.dump(
                [item.model_dump(mode="json") for item in self._listings.values()],
                fh,
                indent=2,
                default=str,
            )

    @staticmethod
    def _can_read(listing: Listing, actor: Actor) -> bool:
        return actor.is_authenticated or listing.status == ListingStatus.PUBLISHED

    @staticmethod
    def _check_can_modify(listing: Listing, actor: Actor, action: str) -> None:
        if actor.role == ActorRole.ADMIN:
            return
        if actor.role == ActorRole.USER and listing.seller_id == actor.id:
            return
        raise PolicyError(f"actor {actor.id or 'guest'} may not {action} listing {listing.id}")

    def _fetch(self, listing_id: str, actor: Actor) -> Listing:
        listing = self._listings.get(listing_id)
        if listing is None or not self._can_read(listing, actor):
            raise ListingNotFoundError(listing_id)
        return listing

    def _replace(self, listing: Listing, **changes: Any) -> Listing:
        updated = listing.model_copy(
            update={**changes, "updated_at": datetime.now(timezone.utc)}
        )
        self._listings[updated.id] = updated
        self._save()
        return updated

    # ── Public API ────────────────────────────────────────────────────────────

    def list(self, actor: Actor) -> List[Listing]:
        """All listings visible to the actor, in creation order."""
        return [item for item in self._listings.values() if self._can_read(item, actor)]

    def get(self, listing_id: str, actor: Actor) -> Listing:
        return self._fetch(listing_id, actor)

    def create(self, fields: Mapping[str, Any], actor: Actor) -> Listing:
        if not actor.is_authenticated or not actor.id:
            raise PolicyError("only signed-in users may create listings")
        try:
            data = ListingCreate(**fields)
        except ValidationError as exc:
            raise InvalidListingError(str(exc)) from exc

        listing = Listing(
            title=data.title,
            price=data.price,
            quantity=data.quantity,
            status=ListingStatus.DRAFT,
            seller_id=actor.id,
        )
        self._listings[listing.id] = listing
        self._save()
        logger.debug(f"Created listing {listing.id} ({listing.title}).")
        return listing

    def update_price(self, listing_id: str, price: Union[Decimal, str], actor: Actor) -> Listing:
        listing = self._fetch(listing_id, actor)
        self._check_can_modify(listing, actor, "update")
        try:
            new_price = to_money(price)
        except ValueError as exc:
            raise InvalidListingError(str(exc)) from exc
        if new_price < 0:
            raise InvalidListingError(f"price must not be negative, got {new_price}")
        return self._replace(listing, price=new_price)

    def update_quantity(self, listing_id: str, quantity: int, actor: Actor) -> Listing:
        listing = self._fetch(listing_id, actor)
        self._check_can_modify(listing, actor, "update")
        if quantity < 0:
            raise InvalidListingError(f"quantity must not be negative, got {quantity}")
        return self._replace(listing, quantity=quantity)

    def publish(self, listing_id: str, actor: Actor) -> Listing:
        listing = self._fetch(listing_id, actor)
        self._check_can_modify(listing, actor, "publish")
        return self._replace(listing, status=ListingStatus.PUBLISHED)

    def destroy(self, listing_id: str, actor: Actor) -> None:
        listing = self._fetch(listing_id, actor)
        self._check_can_modify(listing, actor, "delete")
        del self._listings[listing.id]
        self._save()


def seed_demo_listings(store: ListingStore, actor: Actor) -> List[Listing]:
    """Create the five collectibles used by the weekend sale demo."""
    created: List[Listing] = []
    for fields in DEMO_LISTINGS:
        try:
            created.append(store.create(fields, actor))
        except StoreError as exc:
            logger.warning(f"Failed to seed {fields['title']!r}: {exc}")
    logger.info(f"Seeded {len(created)} demo listings.")
    return created
