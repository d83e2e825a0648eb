from .errors import (
    InvalidSignalError,
    InvalidTransitionError,
    WorkflowError,
    WorkflowNotFoundError,
)
from .orchestrator import OrchestratorAgent, merge_plan
from .listings_specialist import ListingsSpecialist
from .recommendations_specialist import RecommendationsSpecialist
from .support_specialist import SupportSpecialist
from .plan_executor import PlanExecutor
from .server import OrchestratorServer, WorkflowRegistry, build_specialists

__all__ = [
    "InvalidSignalError",
    "InvalidTransitionError",
    "WorkflowError",
    "WorkflowNotFoundError",
    "OrchestratorAgent",
    "merge_plan",
    "ListingsSpecialist",
    "RecommendationsSpecialist",
    "SupportSpecialist",
    "PlanExecutor",
    "OrchestratorServer",
    "WorkflowRegistry",
    "build_specialists",
]
