"""Shared fixtures for the weekend sale tests."""

from typing import List

import pytest

from config.settings import Settings
from models.listing import Actor, ActorRole, Listing
from storage.listing_store import ListingStore, seed_demo_listings

SELLER_ID = "00000000-0000-0000-0000-000000000001"


@pytest.fixture
def test_settings() -> Settings:
    """Settings with no LLM endpoint and short timeouts, ignoring any .env file."""
    return Settings(
        _env_file=None,
        azure_openai_endpoint="",
        azure_openai_api_key=None,
        specialist_timeout_seconds=0.5,
        llm_timeout_seconds=0.2,
        poll_interval_ms=5,
        max_wait_ms=2_000,
        log_file=None,
    )


@pytest.fixture
def seller() -> Actor:
    return Actor(id=SELLER_ID, role=ActorRole.USER)


@pytest.fixture
def other_user() -> Actor:
    return Actor(id="00000000-0000-0000-0000-000000000002", role=ActorRole.USER)


@pytest.fixture
def admin() -> Actor:
    return Actor(id="00000000-0000-0000-0000-0000000000ad", role=ActorRole.ADMIN)


@pytest.fixture
def guest() -> Actor:
    return Actor()


@pytest.fixture
def store() -> ListingStore:
    return ListingStore()


@pytest.fixture
def demo_listings(store: ListingStore, seller: Actor) -> List[Listing]:
    """The five demo collectibles, all drafts owned by ``seller``."""
    return seed_demo_listings(store, seller)
