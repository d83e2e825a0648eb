"""Plan executor.

Applies an approved plan to the listing store: every price update in plan
order, then every publish action in plan order. A failed item is recorded
and the batch carries on; already applied changes are not rolled back.
"""

from __future__ import annotations

from typing import List

from loguru import logger

from models.listing import Actor
from models.workflow import (
    ActionKind,
    ExecutedAction,
    ExecutionOutcome,
    FailedAction,
    MergedPlan,
)
from storage.listing_store import ListingStore


class PlanExecutor:
    """Only component allowed to mutate listings on behalf of a workflow."""

    def __init__(self, store: ListingStore) -> None:
        self._store = store

    def execute(self, plan: MergedPlan, actor: Actor) -> ExecutionOutcome:
        executed: List[ExecutedAction] = []
        errors: List[FailedAction] = []

        for action in plan.price_updates:
            try:
                self._store.update_price(action.listing_id, action.new_price, actor)
            except Exception as exc:
                logger.warning(f"Price update failed for {action.listing_id}: {exc}")
                errors.append(
                    FailedAction(
                        kind=ActionKind.PRICE_UPDATE,
                        listing_id=action.listing_id,
                        reason=str(exc) or type(exc).__name__,
                    )
                )
            else:
                executed.append(
                    ExecutedAction(kind=ActionKind.PRICE_UPDATE, listing_id=action.listing_id)
                )

        for action in plan.publish_actions:
            try:
                self._store.publish(action.listing_id, actor)
            except Exception as exc:
                logger.warning(f"Publish failed for {action.listing_id}: {exc}")
                errors.append(
                    FailedAction(
                        kind=ActionKind.PUBLISH,
                        listing_id=action.listing_id,
                        reason=str(exc) or type(exc).__name__,
                    )
                )
            else:
                executed.append(
                    ExecutedAction(kind=ActionKind.PUBLISH, listing_id=action.listing_id)
                )

        logger.info(f"PlanExecutor: {len(executed)} applied, {len(errors)} failed")
        return ExecutionOutcome(executed=executed, errors=errors)
