"""Proposed actions emitted by specialists.

Actions form a closed union discriminated by ``type``. Specialists create
them, the orchestrator only sorts them into the merged plan, and the plan
executor acts on the price and publish kinds.
"""

from __future__ import annotations

from decimal import Decimal
from enum import Enum
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, ConfigDict, Field


class Channel(str, Enum):
    EMAIL = "email"
    SOCIAL = "social"
    BANNER = "banner"


class GeneratedBy(str, Enum):
    LLM = "llm"
    TEMPLATE = "template"


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class PriceUpdate(_Action):
    type: Literal["update_price"] = "update_price"
    listing_id: str
    current_price: Decimal
    new_price: Decimal
    discount_percent: int


class Publish(_Action):
    type: Literal["publish"] = "publish"
    listing_id: str


class Bundle(_Action):
    type: Literal["bundle"] = "bundle"
    bundle_id: str
    ids: List[str]
    suggestion: str
    discount_boost: int = 5


class Announcement(_Action):
    type: Literal["announcement"] = "announcement"
    title: str
    body: str
    channels: List[Channel] = Field(
        default_factory=lambda: [Channel.EMAIL, Channel.SOCIAL, Channel.BANNER]
    )
    generated_by: GeneratedBy = GeneratedBy.TEMPLATE


class Faq(_Action):
    type: Literal["faq"] = "faq"
    question: str
    answer: str


ProposedAction = Annotated[
    Union[PriceUpdate, Publish, Bundle, Announcement, Faq],
    Field(discriminator="type"),
]
