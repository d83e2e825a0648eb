"""Signals consumed by the orchestrator and directives it hands back."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from models.listing import Actor
from models.workflow import (
    ExecutionOutcome,
    MergedPlan,
    SpecialistId,
    SpecialistRequest,
    SpecialistResult,
)

SALE_PREPARE = "sale.prepare"
SPECIALIST_RESULT = "specialist.result"
SALE_EXECUTE = "sale.execute"
SALE_EXECUTION_COMPLETE = "sale.execution_complete"


class Signal(BaseModel):
    """An immutable message with a type tag and a payload."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str = Field(default_factory=lambda: uuid4().hex)
    type: str
    source: str = "/"
    data: Dict[str, Any] = Field(default_factory=dict)
    time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


def prepare_sale(discount_percent: int, use_llm: bool, actor: Actor, source: str = "/") -> Signal:
    return Signal(
        type=SALE_PREPARE,
        source=source,
        data={"discount_percent": discount_percent, "use_llm": use_llm, "actor": actor},
    )


def specialist_result(specialist: SpecialistId, result: SpecialistResult) -> Signal:
    return Signal(
        type=SPECIALIST_RESULT,
        source=f"/{specialist.value}_specialist",
        data={"specialist": specialist, "result": result},
    )


def execute_sale(actor: Actor, source: str = "/") -> Signal:
    return Signal(type=SALE_EXECUTE, source=source, data={"actor": actor})


def execution_complete(outcome: ExecutionOutcome) -> Signal:
    return Signal(
        type=SALE_EXECUTION_COMPLETE,
        source="/plan_executor",
        data={"outcome": outcome},
    )


# ── Directives ────────────────────────────────────────────────────────────────
# Side effects requested by a transition. The runtime carries them out.


@dataclass(frozen=True)
class SpawnSpecialist:
    specialist_id: SpecialistId
    request: SpecialistRequest


@dataclass(frozen=True)
class RunPlan:
    plan: MergedPlan
    actor: Actor


Directive = Union[SpawnSpecialist, RunPlan]
