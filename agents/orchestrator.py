"""Orchestrator agent.

Coordinates the weekend sale: spawns the three specialists, collects
their reports, merges them into one plan and hands the approved plan to
the plan executor.

The agent is a pure reducer. ``handle(state, signal)`` returns the next
state plus the directives the runtime should carry out; it never awaits
and never touches the store.

Transitions::

    sale.prepare             idle       -> collecting   (spawn 3 specialists)
    specialist.result        collecting -> collecting | ready (merge)
    sale.execute             ready      -> executing    (run plan)
    sale.execution_complete  executing  -> done
"""

from __future__ import annotations

from typing import Callable, Dict, List, Mapping, Tuple

from loguru import logger
from pydantic import ValidationError

from agents.errors import InvalidSignalError, InvalidTransitionError
from models.actions import Announcement, Bundle, Faq, PriceUpdate, Publish
from models.listing import Actor
from models.signal import (
    SALE_EXECUTE,
    SALE_EXECUTION_COMPLETE,
    SALE_PREPARE,
    SPECIALIST_RESULT,
    Directive,
    RunPlan,
    Signal,
    SpawnSpecialist,
)
from models.workflow import (
    ALL_SPECIALISTS,
    ExecutionOutcome,
    MergedPlan,
    SpecialistId,
    SpecialistRequest,
    SpecialistResult,
    WorkflowState,
    WorkflowStatus,
)

Transition = Tuple[WorkflowState, List[Directive]]


class OrchestratorAgent:
    """State machine for a single sale workflow."""

    def __init__(self) -> None:
        self._routes: Dict[str, Callable[[WorkflowState, Signal], Transition]] = {
            SALE_PREPARE: self._prepare,
            SPECIALIST_RESULT: self._specialist_result,
            SALE_EXECUTE: self._execute,
            SALE_EXECUTION_COMPLETE: self._execution_complete,
        }

    def initial_state(self) -> WorkflowState:
        return WorkflowState()

    def handle(self, state: WorkflowState, signal: Signal) -> Transition:
        route = self._routes.get(signal.type)
        if route is None:
            raise InvalidSignalError(f"no route for signal {signal.type!r}")
        return route(state, signal)

    # ── Transitions ───────────────────────────────────────────────────────────

    def _prepare(self, state: WorkflowState, signal: Signal) -> Transition:
        _require(state, signal, WorkflowStatus.IDLE)

        try:
            request = SpecialistRequest(
                discount_percent=signal.data.get("discount_percent", state.discount_percent),
                use_llm=signal.data.get("use_llm", True),
                actor=_actor(signal),
            )
        except ValidationError as exc:
            raise InvalidSignalError(f"bad sale.prepare payload: {exc}") from exc

        discount = request.discount_percent
        new_state = state.model_copy(
            update={
                "status": WorkflowStatus.COLLECTING,
                "pending": list(ALL_SPECIALISTS),
                "results": {},
                "plan": None,
                "execution_results": None,
                "discount_percent": discount,
                "use_llm": request.use_llm,
                "current_goal": f"Preparing {discount}% off weekend sale",
            }
        )
        directives: List[Directive] = [
            SpawnSpecialist(specialist_id=sid, request=request) for sid in ALL_SPECIALISTS
        ]
        logger.info(f"Orchestrator: {new_state.current_goal}, spawning {len(directives)} specialists")
        return new_state, directives

    def _specialist_result(self, state: WorkflowState, signal: Signal) -> Transition:
        _require(state, signal, WorkflowStatus.COLLECTING)

        try:
            specialist = SpecialistId(signal.data["specialist"])
            result = signal.data["result"]
        except (KeyError, ValueError) as exc:
            return _with_warning(state, f"Ignored malformed specialist report: {exc!r}"), []
        if not isinstance(result, SpecialistResult):
            return _with_warning(state, f"Ignored {specialist.value} report without a result"), []

        if specialist in state.results or specialist not in state.pending:
            # First report wins; pending is left untouched.
            return _with_warning(
                state, f"Rejected duplicate report from {specialist.value} specialist"
            ), []

        results = {**state.results, specialist: result}
        pending = [sid for sid in state.pending if sid != specialist]
        logger.info(
            f"Orchestrator: {specialist.value} reported "
            f"(confidence {result.confidence:.2f}), {len(pending)} pending"
        )

        if pending:
            return state.model_copy(update={"results": results, "pending": pending}), []

        plan = merge_plan(results)
        logger.success("Orchestrator: all specialists reported, plan ready")
        return (
            state.model_copy(
                update={
                    "results": results,
                    "pending": [],
                    "status": WorkflowStatus.READY,
                    "plan": plan,
                }
            ),
            [],
        )

    def _execute(self, state: WorkflowState, signal: Signal) -> Transition:
        _require(state, signal, WorkflowStatus.READY)
        if state.plan is None:
            raise InvalidSignalError("no plan to execute")

        logger.info("Orchestrator: executing approved plan")
        return (
            state.model_copy(update={"status": WorkflowStatus.EXECUTING}),
            [RunPlan(plan=state.plan, actor=_actor(signal))],
        )

    def _execution_complete(self, state: WorkflowState, signal: Signal) -> Transition:
        _require(state, signal, WorkflowStatus.EXECUTING)
        outcome = signal.data.get("outcome")
        if not isinstance(outcome, ExecutionOutcome):
            raise InvalidSignalError("sale.execution_complete carries no outcome")

        logger.info(
            f"Orchestrator: execution finished, {len(outcome.executed)} applied, "
            f"{len(outcome.errors)} failed"
        )
        return (
            state.model_copy(
                update={"status": WorkflowStatus.DONE, "execution_results": outcome}
            ),
            [],
        )


def merge_plan(results: Mapping[SpecialistId, SpecialistResult]) -> MergedPlan:
    """Fold the three specialist results into one plan.

    Every field is built from one specialist's own action list, so the
    outcome does not depend on arrival order. Questions follow specialist
    declaration order.
    """
    empty = SpecialistResult(summary="")
    listings = results.get(SpecialistId.LISTINGS, empty)
    recommendations = results.get(SpecialistId.RECOMMENDATIONS, empty)
    support = results.get(SpecialistId.SUPPORT, empty)

    return MergedPlan(
        price_updates=[a for a in listings.actions if isinstance(a, PriceUpdate)],
        publish_actions=[a for a in listings.actions if isinstance(a, Publish)],
        bundle_suggestions=[a for a in recommendations.actions if isinstance(a, Bundle)],
        strategy_notes=recommendations.summary,
        announcement=next(
            (a for a in support.actions if isinstance(a, Announcement)), None
        ),
        faq=[a for a in support.actions if isinstance(a, Faq)],
        all_questions=[
            question
            for sid in ALL_SPECIALISTS
            if sid in results
            for question in results[sid].questions
        ],
    )


def _require(state: WorkflowState, signal: Signal, status: WorkflowStatus) -> None:
    if state.status != status:
        raise InvalidTransitionError(signal.type, state.status.value)


def _actor(signal: Signal) -> Actor:
    actor = signal.data.get("actor")
    if not isinstance(actor, Actor):
        raise InvalidSignalError(f"{signal.type} carries no actor")
    return actor


def _with_warning(state: WorkflowState, message: str) -> WorkflowState:
    logger.warning(f"Orchestrator: {message}")
    return state.model_copy(update={"warnings": [*state.warnings, message]})
