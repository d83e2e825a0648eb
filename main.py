"""
Weekend Sale Orchestrator – main entry point.

Usage
-----
# CLI demo: seed listings, prepare a 20% sale, review the plan
python main.py

# Different discount, templates only, execute without prompting
python main.py --discount 30 --no-llm --execute

# HTTP server mode
python main.py --serve
"""

from __future__ import annotations

import argparse
import asyncio
import pathlib
import sys
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

load_dotenv(override=True)

from config.settings import settings  # noqa: E402 – must be after load_dotenv

from agents.server import OrchestratorServer  # noqa: E402
from agents.tools import (  # noqa: E402
    render_execution,
    render_listing,
    render_plan,
    render_progress,
    render_results,
)
from clients.llm_client import TextGenerationClient  # noqa: E402
from models.listing import Actor, ActorRole  # noqa: E402
from models.workflow import WorkflowStatus  # noqa: E402
from storage.listing_store import ListingStore, seed_demo_listings  # noqa: E402

RULE = "═" * 63


def _configure_logging() -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=settings.log_level,
        colorize=False,
        format="{time:HH:mm:ss} | {level: <8} | {message}",
    )
    if settings.log_file:
        pathlib.Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(settings.log_file, level=settings.log_level, rotation="10 MB", retention="7 days")


def _demo_actor() -> Actor:
    return Actor(id=settings.demo_actor_id, role=ActorRole(settings.demo_actor_role))


def _banner(title: str) -> None:
    print(f"\n{RULE}\n  {title}\n{RULE}\n")


async def _wait_with_progress(server: OrchestratorServer) -> bool:
    """Poll the orchestrator until the plan is ready, printing progress."""
    interval = settings.poll_interval_ms / 1000
    waited = 0.0
    last = ""
    while server.state.status not in (WorkflowStatus.READY, WorkflowStatus.DONE):
        if waited * 1000 >= settings.max_wait_ms:
            return False
        line = render_progress(server.state)
        if line != last:
            print(f"\r  {line}     ", end="", flush=True)
            last = line
        await asyncio.sleep(interval)
        waited += interval
    print(f"\r  {render_progress(server.state)}     ")
    return True


def _confirm() -> bool:
    try:
        answer = input("\nWould you like to execute this plan? (y/n)\n> ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


async def _run_cli(discount: int, use_llm: bool, auto_execute: bool) -> int:
    """Run one weekend sale workflow end to end in the terminal."""
    actor = _demo_actor()
    store = ListingStore()
    llm = TextGenerationClient() if use_llm else None

    print(f"Workflow: Prepare My Shop for a Weekend Sale ({discount}% off)")
    print(f"AI Mode: {'LLM enabled' if llm and llm.configured else 'templates only'}")
    for listing in seed_demo_listings(store, actor):
        print(f"  ✓ Created: {listing.title} ({listing.id})")

    try:
        return await _drive_workflow(store, llm, actor, discount, use_llm, auto_execute)
    finally:
        if llm is not None:
            await llm.aclose()


async def _drive_workflow(
    store: ListingStore,
    llm: Optional[TextGenerationClient],
    actor: Actor,
    discount: int,
    use_llm: bool,
    auto_execute: bool,
) -> int:
    async with OrchestratorServer(store, llm=llm) as server:
        await server.prepare(discount, use_llm, actor)
        print("\nWaiting for specialists...")

        if not await _wait_with_progress(server):
            state = server.state
            print("\n⚠ Timeout waiting for specialists")
            print(f"Status: {state.status.value}")
            print(f"Pending: {[sid.value for sid in state.pending]}")
            return 1

        state = server.state
        _banner("✅ All Specialists Complete - Plan Ready")
        print("\n".join(render_results(state)))
        _banner("📋 Merged Plan")
        print("\n".join(render_plan(state.plan)))

        if not (auto_execute or _confirm()):
            print("Plan not executed.")
            return 0

        print("\nExecuting plan...")
        await server.execute(actor)
        state = await server.wait_for(
            [WorkflowStatus.DONE], timeout=settings.max_wait_ms / 1000
        )
        print("\n".join(render_execution(state.execution_results)))

    print("\nFinal Listings:")
    for listing in store.list(actor):
        print(f"  {render_listing(listing)}")
    return 0


def _run_server() -> None:
    import uvicorn

    from api.app import create_app

    actor = _demo_actor()
    store = ListingStore()
    seed_demo_listings(store, actor)
    llm = TextGenerationClient() if settings.use_llm else None
    app = create_app(store, actor, llm=llm)
    logger.info(f"Serving on http://{settings.server_host}:{settings.server_port}")
    uvicorn.run(app, host=settings.server_host, port=settings.server_port, log_level="info")


def main() -> None:
    _configure_logging()

    parser = argparse.ArgumentParser(description="Weekend Sale multi-agent demo")
    parser.add_argument(
        "--discount",
        type=int,
        default=settings.default_discount_percent,
        help="Discount percentage to apply (0-100).",
    )
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Execute the plan without asking for confirmation.",
    )
    parser.add_argument(
        "--no-llm",
        action="store_true",
        help="Draft the announcement from templates only.",
    )
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start the HTTP API instead of running the CLI demo.",
    )
    args = parser.parse_args()

    if not 0 <= args.discount <= 100:
        parser.error("--discount must be between 0 and 100")

    if args.serve:
        _run_server()
        return

    use_llm = settings.use_llm and not args.no_llm
    sys.exit(asyncio.run(_run_cli(args.discount, use_llm, args.execute)))


if __name__ == "__main__":
    main()
