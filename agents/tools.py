"""Pure helpers that turn workflow state into display-friendly data.

Used by the CLI demo and the HTTP API. Nothing here touches the store or
the orchestrator runtime.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from models.listing import Listing
from models.workflow import (
    ALL_SPECIALISTS,
    ExecutionOutcome,
    MergedPlan,
    WorkflowState,
)
from utils.helpers import format_price, truncate

FAQ_PREVIEW = 2


def build_snapshot(workflow_id: str, state: WorkflowState) -> Dict[str, Any]:
    """JSON-ready view of a workflow for pollers.

    Only strings, numbers, lists and dicts; failures show up as text in
    specialist summaries and execution errors.
    """
    specialists: Dict[str, Any] = {}
    for sid in ALL_SPECIALISTS:
        result = state.results.get(sid)
        if result is None:
            specialists[sid.value] = {"status": "pending" if sid in state.pending else "idle"}
            continue
        specialists[sid.value] = {
            "status": "reported",
            "summary": result.summary,
            "confidence": result.confidence,
            "questions": list(result.questions),
            "action_count": len(result.actions),
            **({"metadata": dict(result.metadata)} if result.metadata else {}),
        }

    return {
        "workflow_id": workflow_id,
        "status": state.status.value,
        "current_goal": state.current_goal,
        "discount_percent": state.discount_percent,
        "use_llm": state.use_llm,
        "pending": [sid.value for sid in state.pending],
        "completed": [sid.value for sid in ALL_SPECIALISTS if sid in state.results],
        "specialists": specialists,
        "plan": state.plan.model_dump(mode="json") if state.plan else None,
        "execution": _execution_view(state.execution_results),
        "warnings": list(state.warnings),
    }


def _execution_view(outcome: Optional[ExecutionOutcome]) -> Optional[Dict[str, Any]]:
    if outcome is None:
        return None
    return {
        "executed_count": len(outcome.executed),
        "error_count": len(outcome.errors),
        "executed": [item.model_dump(mode="json") for item in outcome.executed],
        "errors": [item.model_dump(mode="json") for item in outcome.errors],
    }


def render_progress(state: WorkflowState) -> str:
    done = " ".join(f"✓ {sid.value}" for sid in ALL_SPECIALISTS if sid in state.results)
    waiting = " ".join(f"… {sid.value}" for sid in state.pending)
    return f"Progress: {done} {waiting}".rstrip()


def render_results(state: WorkflowState) -> List[str]:
    lines: List[str] = []
    for sid in ALL_SPECIALISTS:
        result = state.results.get(sid)
        if result is None:
            continue
        lines.append(f"▸ {sid.value.capitalize()} ({result.confidence:.0%}):")
        lines.append(f"  {result.summary}")
        if result.questions:
            lines.append("  Questions:")
            lines.extend(f"    • {q}" for q in result.questions)
        lines.append("")
    return lines


def render_plan(plan: MergedPlan) -> List[str]:
    """Merged plan as printable lines."""
    lines: List[str] = []

    if plan.price_updates:
        lines.append(f"Price Updates ({len(plan.price_updates)}):")
        for action in plan.price_updates:
            lines.append(
                f"  • {action.listing_id}: {format_price(action.current_price)} → "
                f"{format_price(action.new_price)} (-{action.discount_percent}%)"
            )
        lines.append("")

    if plan.publish_actions:
        lines.append(f"Publish Actions ({len(plan.publish_actions)}):")
        lines.extend(f"  • Publish: {action.listing_id}" for action in plan.publish_actions)
        lines.append("")

    if plan.bundle_suggestions:
        lines.append(f"Bundle Suggestions ({len(plan.bundle_suggestions)}):")
        lines.extend(
            f"  • {bundle.suggestion} (+{bundle.discount_boost}% extra off)"
            for bundle in plan.bundle_suggestions
        )
        lines.append("")

    if plan.announcement:
        channels = ", ".join(c.value for c in plan.announcement.channels)
        lines.append(f"Announcement ({plan.announcement.generated_by.value}):")
        lines.append(f"  {plan.announcement.title}")
        lines.append(f"  {truncate(plan.announcement.body)}")
        lines.append(f"  Channels: {channels}")
        lines.append("")

    if plan.faq:
        lines.append(f"FAQ Responses ({len(plan.faq)}):")
        for faq in plan.faq[:FAQ_PREVIEW]:
            lines.append(f"  Q: {faq.question}")
            lines.append(f"  A: {faq.answer}")
        if len(plan.faq) > FAQ_PREVIEW:
            lines.append(f"  ... and {len(plan.faq) - FAQ_PREVIEW} more")
        lines.append("")

    if plan.all_questions:
        lines.append("Open Questions:")
        lines.extend(f"  • {q}" for q in plan.all_questions)

    return lines


def render_execution(outcome: ExecutionOutcome) -> List[str]:
    lines = [f"Executed {len(outcome.executed)} actions"]
    if outcome.errors:
        lines.append(f"{len(outcome.errors)} errors:")
        lines.extend(
            f"  • {err.kind.value} {err.listing_id}: {err.reason}" for err in outcome.errors
        )
    return lines


def render_listing(listing: Listing) -> str:
    return (
        f"{listing.status.value:<9} | {format_price(listing.price):>10} | "
        f"{listing.title} ({listing.id})"
    )
