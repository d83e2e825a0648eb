"""Unit tests for the three specialists."""

import asyncio
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from agents.listings_specialist import ListingsSpecialist
from agents.recommendations_specialist import (
    LIMIT_ITEMS_QUESTION,
    PUBLISH_DRAFTS_QUESTION,
    RecommendationsSpecialist,
)
from agents.support_specialist import SupportSpecialist, parse_announcement
from clients.llm_client import GenerationError
from models.actions import Announcement, Bundle, Channel, Faq, GeneratedBy, PriceUpdate, Publish
from models.workflow import SpecialistRequest
from storage.listing_store import ListingStore, StoreError


@pytest.fixture
def failing_store():
    store = MagicMock(spec=ListingStore)
    store.list.side_effect = StoreError("data layer unavailable")
    return store


def _request(actor, discount=20, use_llm=False):
    return SpecialistRequest(discount_percent=discount, use_llm=use_llm, actor=actor)


# ── Listings ──────────────────────────────────────────────────────────────────


class TestListingsSpecialist:
    @pytest.mark.asyncio
    async def test_weekend_sale_scenario(self, store, seller, demo_listings):
        result = await ListingsSpecialist(store).handle(_request(seller, discount=20))

        price_updates = [a for a in result.actions if isinstance(a, PriceUpdate)]
        publishes = [a for a in result.actions if isinstance(a, Publish)]

        assert [a.new_price for a in price_updates] == [
            Decimal("120.00"),
            Decimal("400.00"),
            Decimal("800.00"),
            Decimal("60.00"),
            Decimal("20.00"),
        ]
        assert [a.current_price for a in price_updates] == [item.price for item in demo_listings]
        assert all(a.discount_percent == 20 for a in price_updates)
        assert [a.listing_id for a in publishes] == [item.id for item in demo_listings]
        assert result.confidence == pytest.approx(0.95)
        assert result.questions == []
        assert result.summary == "Found 5 listings, calculated 20% discount on 10 items"

    @pytest.mark.asyncio
    async def test_actions_interleave_per_listing(self, store, seller, demo_listings):
        store.publish(demo_listings[1].id, seller)

        result = await ListingsSpecialist(store).handle(_request(seller))

        kinds = [a.type for a in result.actions]
        assert kinds == [
            "update_price", "publish",
            "update_price",
            "update_price", "publish",
            "update_price", "publish",
            "update_price", "publish",
        ]

    @pytest.mark.asyncio
    async def test_read_failure_reports_zero_confidence(self, failing_store, seller):
        result = await ListingsSpecialist(failing_store).handle(_request(seller))

        assert result.confidence == 0.0
        assert result.actions == []
        assert result.summary == "Failed to analyze listings: data layer unavailable"

    @pytest.mark.asyncio
    async def test_empty_store(self, store, seller):
        result = await ListingsSpecialist(store).handle(_request(seller))
        assert result.actions == []
        assert result.summary == "Found 0 listings, calculated 20% discount on 0 items"


# ── Recommendations ───────────────────────────────────────────────────────────


class TestRecommendationsSpecialist:
    @pytest.mark.asyncio
    async def test_pairs_listings_into_three_bundles(self, store, seller, demo_listings):
        result = await RecommendationsSpecialist(store).handle(_request(seller, discount=25))

        bundles = result.actions
        assert all(isinstance(b, Bundle) for b in bundles)
        assert [b.bundle_id for b in bundles] == ["bundle_1", "bundle_2", "bundle_3"]
        assert bundles[0].ids == [demo_listings[0].id, demo_listings[1].id]
        assert bundles[0].suggestion == (
            "Bundle: Vintage Baseball Card - 1952 Topps + Pokemon Charizard 1st Edition"
        )
        # five listings: the third group holds the odd one out
        assert bundles[2].ids == [demo_listings[4].id]
        assert all(b.discount_boost == 5 for b in bundles)
        assert result.confidence == pytest.approx(0.80)

    @pytest.mark.asyncio
    async def test_strategy_counts_published_and_drafts(self, store, seller, demo_listings):
        store.publish(demo_listings[0].id, seller)
        store.publish(demo_listings[1].id, seller)

        result = await RecommendationsSpecialist(store).handle(_request(seller, discount=25))

        assert result.summary == (
            "Strategy: Apply 25% discount across 5 items. "
            "2 already published, 3 drafts to publish. "
            "Consider bundling related items for additional 5% off."
        )

    @pytest.mark.asyncio
    async def test_questions_for_drafts_and_large_catalogue(self, store, seller, demo_listings):
        store.create({"title": "Sixth item", "price": "10.00"}, seller)

        result = await RecommendationsSpecialist(store).handle(_request(seller))

        assert result.questions == [PUBLISH_DRAFTS_QUESTION, LIMIT_ITEMS_QUESTION]
        assert len(result.actions) == 3

    @pytest.mark.asyncio
    async def test_no_questions_when_everything_published(self, store, seller, demo_listings):
        for item in demo_listings:
            store.publish(item.id, seller)

        result = await RecommendationsSpecialist(store).handle(_request(seller))

        assert result.questions == []

    @pytest.mark.asyncio
    async def test_single_listing_gets_no_bundle(self, store, seller):
        store.create({"title": "Lonely", "price": "3.00"}, seller)
        result = await RecommendationsSpecialist(store).handle(_request(seller))
        assert result.actions == []

    @pytest.mark.asyncio
    async def test_read_failure(self, failing_store, seller):
        result = await RecommendationsSpecialist(failing_store).handle(_request(seller))
        assert result.confidence == 0.0
        assert result.summary.startswith("Failed to generate recommendations:")


# ── Support ───────────────────────────────────────────────────────────────────


def _announcement(result):
    found = [a for a in result.actions if isinstance(a, Announcement)]
    assert len(found) == 1
    return found[0]


class TestSupportSpecialist:
    @pytest.mark.asyncio
    async def test_template_when_llm_disabled(self, store, seller, test_settings):
        llm = MagicMock()
        llm.complete = AsyncMock()
        specialist = SupportSpecialist(store, llm=llm, config=test_settings)

        result = await specialist.handle(_request(seller, discount=30, use_llm=False))

        announcement = _announcement(result)
        assert announcement.generated_by == GeneratedBy.TEMPLATE
        assert announcement.title == "🎉 Weekend Sale - 30% Off Everything!"
        assert "30% off" in announcement.body
        assert result.confidence == pytest.approx(0.90)
        assert result.metadata == {"generation_method": "template"}
        llm.complete.assert_not_called()

    @pytest.mark.asyncio
    async def test_generation_failure_falls_back_to_template(self, store, seller, test_settings):
        llm = MagicMock()
        llm.complete = AsyncMock(side_effect=GenerationError("service unavailable"))
        specialist = SupportSpecialist(store, llm=llm, config=test_settings)

        result = await specialist.handle(_request(seller, use_llm=True))

        announcement = _announcement(result)
        assert result.confidence == pytest.approx(0.90)
        assert announcement.generated_by == GeneratedBy.TEMPLATE
        assert announcement.channels == [Channel.EMAIL, Channel.SOCIAL, Channel.BANNER]
        assert result.summary == "Drafted announcement (template_fallback) and 4 FAQ responses"

    @pytest.mark.asyncio
    async def test_unexpected_client_error_falls_back(self, store, seller, test_settings):
        llm = MagicMock()
        llm.complete = AsyncMock(side_effect=RuntimeError("credential unavailable"))
        specialist = SupportSpecialist(store, llm=llm, config=test_settings)

        result = await specialist.handle(_request(seller, use_llm=True))

        assert _announcement(result).generated_by == GeneratedBy.TEMPLATE
        assert result.confidence == pytest.approx(0.90)
        assert result.metadata == {"generation_method": "template_fallback"}

    @pytest.mark.asyncio
    async def test_missing_client_falls_back(self, store, seller, test_settings):
        result = await SupportSpecialist(store, config=test_settings).handle(
            _request(seller, use_llm=True)
        )
        assert result.metadata["generation_method"] == "template_fallback"

    @pytest.mark.asyncio
    async def test_slow_generation_times_out(self, store, seller, test_settings):
        async def never_answers(*args, **kwargs):
            await asyncio.sleep(5)
            return "HEADLINE: too late"

        llm = MagicMock()
        llm.complete = never_answers
        specialist = SupportSpecialist(store, llm=llm, config=test_settings)

        result = await specialist.handle(_request(seller, use_llm=True))

        assert _announcement(result).generated_by == GeneratedBy.TEMPLATE
        assert result.metadata["generation_method"] == "template_fallback"

    @pytest.mark.asyncio
    async def test_llm_announcement(self, store, seller, demo_listings, test_settings):
        llm = MagicMock()
        llm.complete = AsyncMock(
            return_value=(
                "HEADLINE: 🔥 Card Frenzy: 20% Off!\n"
                "BODY: Grab a Black Lotus before Sunday. Weekend only!"
            )
        )
        specialist = SupportSpecialist(store, llm=llm, config=test_settings)

        result = await specialist.handle(_request(seller, use_llm=True))

        announcement = _announcement(result)
        assert announcement.generated_by == GeneratedBy.LLM
        assert announcement.title == "🔥 Card Frenzy: 20% Off!"
        assert announcement.body == "Grab a Black Lotus before Sunday. Weekend only!"
        assert result.confidence == pytest.approx(0.95)
        assert result.metadata == {"generation_method": "llm"}

        prompt = llm.complete.await_args.args[0]
        assert "Weekend Sale with 20% off" in prompt
        assert "- Magic: The Gathering Black Lotus ($1,000.00)" in prompt
        assert llm.complete.await_args.kwargs == {
            "max_tokens": test_settings.llm_max_tokens,
            "temperature": test_settings.llm_temperature,
        }

    @pytest.mark.asyncio
    async def test_malformed_reply_falls_back(self, store, seller, test_settings):
        llm = MagicMock()
        llm.complete = AsyncMock(return_value="Sure! Here is a great announcement.")
        specialist = SupportSpecialist(store, llm=llm, config=test_settings)

        result = await specialist.handle(_request(seller, use_llm=True))

        assert _announcement(result).generated_by == GeneratedBy.TEMPLATE

    @pytest.mark.asyncio
    async def test_always_includes_four_faqs(self, store, seller, test_settings):
        result = await SupportSpecialist(store, config=test_settings).handle(
            _request(seller, discount=15)
        )
        faqs = [a for a in result.actions if isinstance(a, Faq)]
        assert len(faqs) == 4
        assert faqs[0].answer == "The 15% off weekend sale ends Sunday at midnight."
        assert isinstance(result.actions[0], Announcement)


def test_parse_announcement_fills_missing_body():
    announcement = parse_announcement("HEADLINE: Big Savings\n", 10)
    assert announcement.title == "Big Savings"
    assert "10% off" in announcement.body
    assert announcement.generated_by == GeneratedBy.LLM


def test_parse_announcement_rejects_reply_without_markers():
    with pytest.raises(GenerationError):
        parse_announcement("no markers at all", 10)
