from .actions import (
    Announcement,
    Bundle,
    Channel,
    Faq,
    GeneratedBy,
    PriceUpdate,
    ProposedAction,
    Publish,
)
from .listing import Actor, ActorRole, Listing, ListingCreate, ListingStatus
from .signal import Directive, RunPlan, Signal, SpawnSpecialist
from .workflow import (
    ActionKind,
    ExecutedAction,
    ExecutionOutcome,
    FailedAction,
    MergedPlan,
    SpecialistId,
    SpecialistRequest,
    SpecialistResult,
    WorkflowState,
    WorkflowStatus,
)

__all__ = [
    "Announcement",
    "Bundle",
    "Channel",
    "Faq",
    "GeneratedBy",
    "PriceUpdate",
    "ProposedAction",
    "Publish",
    "Actor",
    "ActorRole",
    "Listing",
    "ListingCreate",
    "ListingStatus",
    "Directive",
    "RunPlan",
    "Signal",
    "SpawnSpecialist",
    "ActionKind",
    "ExecutedAction",
    "ExecutionOutcome",
    "FailedAction",
    "MergedPlan",
    "SpecialistId",
    "SpecialistRequest",
    "SpecialistResult",
    "WorkflowState",
    "WorkflowStatus",
]
