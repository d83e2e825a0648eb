"""Pydantic models for the weekend sale workflow state."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models.actions import Announcement, Bundle, Faq, PriceUpdate, ProposedAction, Publish
from models.listing import Actor


class WorkflowStatus(str, Enum):
    """Phases of a sale workflow. Only ever moves forward."""

    IDLE = "idle"
    COLLECTING = "collecting"
    READY = "ready"
    EXECUTING = "executing"
    DONE = "done"


class SpecialistId(str, Enum):
    """Specialists in declaration order; merge and question order follow it."""

    LISTINGS = "listings"
    RECOMMENDATIONS = "recommendations"
    SUPPORT = "support"


ALL_SPECIALISTS: List[SpecialistId] = list(SpecialistId)


class SpecialistRequest(BaseModel):
    """Work order handed to a specialist when it is spawned."""

    model_config = ConfigDict(frozen=True)

    discount_percent: int = Field(default=20, ge=0, le=100)
    use_llm: bool = True
    actor: Actor


class SpecialistResult(BaseModel):
    """What a specialist reports back to its orchestrator, once."""

    model_config = ConfigDict(frozen=True)

    summary: str
    actions: List[ProposedAction] = Field(default_factory=list)
    questions: List[str] = Field(default_factory=list)
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def failed(cls, summary: str) -> "SpecialistResult":
        return cls(summary=summary, confidence=0.0)


class MergedPlan(BaseModel):
    """Read-only projection over the three specialist results."""

    model_config = ConfigDict(frozen=True)

    price_updates: List[PriceUpdate] = Field(default_factory=list)
    publish_actions: List[Publish] = Field(default_factory=list)
    bundle_suggestions: List[Bundle] = Field(default_factory=list)
    strategy_notes: str = ""
    announcement: Optional[Announcement] = None
    faq: List[Faq] = Field(default_factory=list)
    all_questions: List[str] = Field(default_factory=list)


class ActionKind(str, Enum):
    PRICE_UPDATE = "price_update"
    PUBLISH = "publish"


class ExecutedAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ActionKind
    listing_id: str


class FailedAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: ActionKind
    listing_id: str
    reason: str


class ExecutionOutcome(BaseModel):
    """Result of applying a plan. Produced once by the plan executor."""

    model_config = ConfigDict(frozen=True)

    executed: List[ExecutedAction] = Field(default_factory=list)
    errors: List[FailedAction] = Field(default_factory=list)


class WorkflowState(BaseModel):
    """State owned by a single orchestrator instance.

    The orchestrator never mutates an instance in place; every transition
    returns a copy.
    """

    status: WorkflowStatus = WorkflowStatus.IDLE
    pending: List[SpecialistId] = Field(default_factory=list)
    results: Dict[SpecialistId, SpecialistResult] = Field(default_factory=dict)
    plan: Optional[MergedPlan] = None
    discount_percent: int = 20
    use_llm: bool = True
    current_goal: Optional[str] = None
    execution_results: Optional[ExecutionOutcome] = None
    warnings: List[str] = Field(default_factory=list)
