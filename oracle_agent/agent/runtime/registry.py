"""In-memory registry of agent runs keyed by run id."""

from __future__ import annotations

import asyncio
import logging
from threading import Lock

from oracle_agent.agent.runtime.messages import Message, MessageLog
from oracle_agent.agent.runtime.models import MAX_ITERATIONS_LIMIT, AgentRun
from oracle_agent.exceptions import NotFoundError

logger = logging.getLogger(__name__)


def validate_max_iterations(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError("max_iterations must be an integer")
    if value < 0 or value > MAX_ITERATIONS_LIMIT:
        raise ValueError(f"max_iterations must be between 0 and {MAX_ITERATIONS_LIMIT}")
    return value


class AgentRunRegistry:
    """Owns all runs and allocates their ids.

    Ids come from a counter that only moves forward, so an id is never handed
    out twice. The registry holds no business rules; :class:`RunController`
    decides how runs change.
    """

    def __init__(self) -> None:
        self._runs: dict[int, AgentRun] = {}
        self._locks: dict[int, asyncio.Lock] = {}
        self._next_id = 0
        self._id_lock = Lock()

    def create(self, owner: str, max_iterations: int) -> AgentRun:
        """Allocate a fresh run for *owner* and return it."""
        if not isinstance(owner, str) or not owner.strip():
            raise ValueError("owner must be a non-empty string")
        validate_max_iterations(max_iterations)
        with self._id_lock:
            run_id = self._next_id
            self._next_id += 1
            run = AgentRun(
                id=run_id,
                owner=owner.strip(),
                max_iterations=max_iterations,
                messages=MessageLog(run_id),
            )
            self._runs[run_id] = run
            self._locks[run_id] = asyncio.Lock()
        logger.debug("allocated agent run id=%d owner=%s", run_id, run.owner)
        return run

    def get(self, run_id: int) -> AgentRun:
        run = self._runs.get(run_id)
        if run is None:
            raise NotFoundError(run_id)
        return run

    def lock_for(self, run_id: int) -> asyncio.Lock:
        """Return the lock that serializes callbacks for one run."""
        lock = self._locks.get(run_id)
        if lock is None:
            raise NotFoundError(run_id)
        return lock

    def get_history(self, run_id: int) -> tuple[Message, ...]:
        return self.get(run_id).messages.snapshot()

    def is_finished(self, run_id: int) -> bool:
        return self.get(run_id).is_finished

    def list_runs(self, owner: str | None = None) -> list[AgentRun]:
        runs = sorted(self._runs.values(), key=lambda item: item.id)
        if owner is None:
            return runs
        return [run for run in runs if run.owner == owner]

    def __len__(self) -> int:
        return len(self._runs)

    def __contains__(self, run_id: object) -> bool:
        return run_id in self._runs
