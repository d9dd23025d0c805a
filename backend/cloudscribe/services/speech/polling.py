# cloudscribe/services/speech/polling.py

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, Optional

from cloudscribe.services.speech.errors import ApiRequestFailed

logger = logging.getLogger(__name__)


class JobStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    UNKNOWN = "unknown"


def classify_status(
    raw: Optional[str],
    *,
    completed: Iterable[str] = ("completed",),
    failed: Iterable[str] = ("failed", "error"),
    queued: Iterable[str] = ("queued", "pending"),
    processing: Iterable[str] = ("processing",),
) -> JobStatus:
    """Collapse a backend-specific status label into JobStatus."""
    s = (raw or "").strip().lower()
    if s in completed:
        return JobStatus.COMPLETED
    if s in failed:
        return JobStatus.FAILED
    if s in queued:
        return JobStatus.QUEUED
    if s in processing:
        return JobStatus.PROCESSING
    return JobStatus.UNKNOWN


@dataclass(frozen=True)
class BackoffPolicy:
    """
    Delay schedule between status polls plus a hard wall-clock budget.

    fixed():        every wait is initial_interval
    exponential():  waits grow by multiplier after each poll, capped at max_interval
    """

    initial_interval: float
    max_wait: float
    multiplier: float = 1.0
    max_interval: Optional[float] = None

    @classmethod
    def fixed(cls, interval: float, max_wait: float) -> "BackoffPolicy":
        return cls(initial_interval=interval, max_wait=max_wait)

    @classmethod
    def exponential(
        cls,
        max_wait: float,
        *,
        initial_interval: float = 1.0,
        multiplier: float = 1.5,
        max_interval: float = 10.0,
    ) -> "BackoffPolicy":
        return cls(
            initial_interval=initial_interval,
            max_wait=max_wait,
            multiplier=multiplier,
            max_interval=max_interval,
        )

    def next_interval(self, current: float) -> float:
        nxt = current * self.multiplier
        if self.max_interval is not None:
            nxt = min(nxt, self.max_interval)
        return nxt


@dataclass(frozen=True)
class PollResult:
    """What one decoded status response says about the job."""

    status: JobStatus
    error: Optional[str] = None
    payload: Any = None


@dataclass(frozen=True)
class PollState:
    job_id: str
    created_at: float
    interval: float
    status: JobStatus = JobStatus.QUEUED
    polls: int = 0
    error: Optional[str] = None
    payload: Any = None

    def elapsed(self, now: float) -> float:
        return now - self.created_at


async def poll_job(
    job_id: str,
    fetch: Callable[[], Awaitable[bytes]],
    parse: Callable[[bytes], PollResult],
    policy: BackoffPolicy,
    *,
    provider_name: str = "",
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> PollState:
    """
    Poll a backend job until it completes, fails, or runs out of time.

    fetch() performs one status request and must raise on a non-2xx response;
    that error ends the loop immediately. parse() may raise ValueError/TypeError
    on an undecodable body: the poll is logged and the loop keeps going.

    Returns the terminal PollState (status COMPLETED, payload from parse()).
    Raises ApiRequestFailed(500) when the job fails and ApiRequestFailed(504)
    when policy.max_wait elapses. A timed out job is abandoned, not cancelled.
    """
    label = provider_name or "job"
    state = PollState(job_id=job_id, created_at=clock(), interval=policy.initial_interval)
    logger.debug("%s: polling status for job '%s'", label, job_id)

    while True:
        body = await fetch()
        state = replace(state, polls=state.polls + 1)

        try:
            result = parse(body)
        except (ValueError, TypeError) as e:
            logger.warning("%s: failed to decode status response for job '%s': %s", label, job_id, e)
        else:
            state = replace(state, status=result.status, error=result.error, payload=result.payload)

            if state.status is JobStatus.COMPLETED:
                logger.info(
                    "%s: job '%s' completed after %d polls (%.1fs)",
                    label,
                    job_id,
                    state.polls,
                    state.elapsed(clock()),
                )
                return state

            if state.status is JobStatus.FAILED:
                message = state.error or "Transcription failed"
                logger.error("%s: job '%s' failed: %s", label, job_id, message)
                raise ApiRequestFailed(500, message)

            if state.status is JobStatus.UNKNOWN:
                logger.debug("%s: unknown status for job '%s', continuing to poll", label, job_id)

        elapsed = state.elapsed(clock())
        if elapsed > policy.max_wait:
            logger.error(
                "%s: job '%s' timed out after %.1fs (%d polls)", label, job_id, elapsed, state.polls
            )
            raise ApiRequestFailed(504, f"Transcription timed out after {int(elapsed)} seconds")

        await sleep(state.interval)
        state = replace(state, interval=policy.next_interval(state.interval))
