"""Asyncio runtime for the orchestrator.

``OrchestratorServer`` owns one workflow. A single consumer task reads
signals from an inbox queue, feeds them through ``OrchestratorAgent`` and
carries out the returned directives: one task per spawned specialist, one
task for the plan executor. Every state change therefore happens on the
consumer task.

Callers poll ``state`` / ``snapshot()`` (or ``wait_for``) to follow
progress.
"""

from __future__ import annotations

import asyncio
from typing import Any, Dict, Iterable, Mapping, Optional, Set, Tuple
from uuid import uuid4

from loguru import logger

from agents.errors import WorkflowError, WorkflowNotFoundError
from agents.listings_specialist import ListingsSpecialist
from agents.orchestrator import OrchestratorAgent
from agents.plan_executor import PlanExecutor
from agents.recommendations_specialist import RecommendationsSpecialist
from agents.support_specialist import SupportSpecialist
from agents.tools import build_snapshot
from clients.llm_client import TextGenerationClient
from config.settings import Settings, settings as default_settings
from models.listing import Actor
from models.signal import (
    Directive,
    RunPlan,
    Signal,
    SpawnSpecialist,
    execute_sale,
    execution_complete,
    prepare_sale,
    specialist_result,
)
from models.workflow import SpecialistId, SpecialistResult, WorkflowState, WorkflowStatus
from storage.listing_store import ListingStore


def build_specialists(
    store: ListingStore,
    llm: Optional[TextGenerationClient] = None,
    config: Optional[Settings] = None,
) -> Dict[SpecialistId, Any]:
    """The three specialists of the weekend sale, keyed by id."""
    return {
        SpecialistId.LISTINGS: ListingsSpecialist(store),
        SpecialistId.RECOMMENDATIONS: RecommendationsSpecialist(store),
        SpecialistId.SUPPORT: SupportSpecialist(store, llm=llm, config=config),
    }


class OrchestratorServer:
    """Runs one orchestrator instance and its specialists."""

    def __init__(
        self,
        store: ListingStore,
        llm: Optional[TextGenerationClient] = None,
        specialists: Optional[Mapping[SpecialistId, Any]] = None,
        executor: Optional[PlanExecutor] = None,
        config: Optional[Settings] = None,
        workflow_id: Optional[str] = None,
    ) -> None:
        self.id = workflow_id or f"orchestrator-{uuid4().hex[:8]}"
        self._settings = config or default_settings
        self._agent = OrchestratorAgent()
        self._state: WorkflowState = self._agent.initial_state()
        self._specialists = dict(
            specialists or build_specialists(store, llm=llm, config=self._settings)
        )
        self._executor = executor or PlanExecutor(store)
        self._inbox: "asyncio.Queue[Tuple[Signal, Optional[asyncio.Future]]]" = asyncio.Queue()
        self._consumer: Optional[asyncio.Task] = None
        self._tasks: Set[asyncio.Task] = set()

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    async def start(self) -> "OrchestratorServer":
        if self._consumer is None:
            self._consumer = asyncio.create_task(self._run(), name=f"{self.id}-inbox")
            logger.info(f"OrchestratorServer {self.id} started")
        return self

    async def stop(self) -> None:
        """Cancel the consumer and every in-flight specialist or executor task."""
        tasks = list(self._tasks)
        if self._consumer is not None:
            tasks.append(self._consumer)
            self._consumer = None
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info(f"OrchestratorServer {self.id} stopped")

    @property
    def running(self) -> bool:
        return self._consumer is not None and not self._consumer.done()

    async def __aenter__(self) -> "OrchestratorServer":
        return await self.start()

    async def __aexit__(self, *args: Any) -> None:
        await self.stop()

    # ── Messaging ─────────────────────────────────────────────────────────────

    async def cast(self, signal: Signal) -> None:
        """Queue a signal without waiting for it to be handled."""
        await self._inbox.put((signal, None))

    async def call(self, signal: Signal) -> WorkflowState:
        """Queue a signal and wait for the resulting state.

        Raises the ``WorkflowError`` produced by the transition, if any.
        """
        if not self.running:
            raise WorkflowError(f"orchestrator {self.id} is not running")
        reply: asyncio.Future = asyncio.get_running_loop().create_future()
        await self._inbox.put((signal, reply))
        return await reply

    async def prepare(self, discount_percent: int, use_llm: bool, actor: Actor) -> WorkflowState:
        return await self.call(prepare_sale(discount_percent, use_llm, actor, source="/server"))

    async def execute(self, actor: Actor) -> WorkflowState:
        return await self.call(execute_sale(actor, source="/server"))

    # ── Observation ───────────────────────────────────────────────────────────

    @property
    def state(self) -> WorkflowState:
        return self._state

    def snapshot(self) -> Dict[str, Any]:
        return build_snapshot(self.id, self._state)

    async def wait_for(
        self,
        statuses: Iterable[WorkflowStatus],
        timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
    ) -> WorkflowState:
        """Poll until the workflow reaches one of ``statuses``.

        Raises ``asyncio.TimeoutError`` when ``timeout`` seconds pass first.
        """
        wanted = set(statuses)
        interval = poll_interval or self._settings.poll_interval_ms / 1000
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        while self._state.status not in wanted:
            if deadline is not None and loop.time() >= deadline:
                raise asyncio.TimeoutError(
                    f"{self.id} still {self._state.status.value} after {timeout}s"
                )
            await asyncio.sleep(interval)
        return self._state

    # ── Internals ─────────────────────────────────────────────────────────────

    async def _run(self) -> None:
        while True:
            signal, reply = await self._inbox.get()
            try:
                self._state, directives = self._agent.handle(self._state, signal)
            except WorkflowError as exc:
                if reply is not None and not reply.done():
                    reply.set_exception(exc)
                else:
                    logger.warning(f"OrchestratorServer {self.id}: dropped {signal.type}: {exc}")
                continue
            finally:
                self._inbox.task_done()

            for directive in directives:
                self._dispatch(directive)
            if reply is not None and not reply.done():
                reply.set_result(self._state)

    def _dispatch(self, directive: Directive) -> None:
        if isinstance(directive, SpawnSpecialist):
            coro = self._run_specialist(directive)
            name = f"{self.id}-{directive.specialist_id.value}"
        elif isinstance(directive, RunPlan):
            coro = self._run_plan(directive)
            name = f"{self.id}-executor"
        else:
            raise TypeError(f"unknown directive {directive!r}")
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run_specialist(self, directive: SpawnSpecialist) -> None:
        sid = directive.specialist_id
        timeout = self._settings.specialist_timeout_seconds
        specialist = self._specialists[sid]
        try:
            result = await asyncio.wait_for(specialist.handle(directive.request), timeout=timeout)
        except asyncio.TimeoutError:
            logger.error(f"{sid.value} specialist timed out after {timeout:g}s")
            result = SpecialistResult.failed(f"{sid.value} specialist timed out after {timeout:g}s")
        except Exception as exc:
            logger.exception(f"{sid.value} specialist crashed")
            result = SpecialistResult.failed(f"{sid.value} specialist crashed: {exc}")
        await self.cast(specialist_result(sid, result))

    async def _run_plan(self, directive: RunPlan) -> None:
        outcome = self._executor.execute(directive.plan, directive.actor)
        await self.cast(execution_complete(outcome))


class WorkflowRegistry:
    """Running orchestrators keyed by workflow id."""

    def __init__(
        self,
        store: ListingStore,
        llm: Optional[TextGenerationClient] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self._store = store
        self._llm = llm
        self._settings = config or default_settings
        self._servers: Dict[str, OrchestratorServer] = {}

    @property
    def llm(self) -> Optional[TextGenerationClient]:
        return self._llm

    async def create(self) -> OrchestratorServer:
        server = OrchestratorServer(self._store, llm=self._llm, config=self._settings)
        await server.start()
        self._servers[server.id] = server
        return server

    def get(self, workflow_id: str) -> OrchestratorServer:
        try:
            return self._servers[workflow_id]
        except KeyError:
            raise WorkflowNotFoundError(workflow_id) from None

    async def remove(self, workflow_id: str) -> None:
        server = self._servers.pop(workflow_id, None)
        if server is None:
            raise WorkflowNotFoundError(workflow_id)
        await server.stop()

    async def close(self) -> None:
        for workflow_id in list(self._servers):
            await self.remove(workflow_id)
