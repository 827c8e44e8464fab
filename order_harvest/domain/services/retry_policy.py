"""
Retry policy as a small state machine.

Attempting(n) -> SUCCEED | RETRY(wait) -> Attempting(n+1) | EXHAUSTED | FAIL

No timers and no I/O: the unit fetcher performs the waits and calls.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Optional

TRANSIENT_STATUS_CODES: FrozenSet[int] = frozenset({429, 502, 503, 504})


class AttemptOutcome(str, Enum):
    SUCCESS = "success"
    TRANSIENT = "transient"
    FATAL = "fatal"


class RetryAction(str, Enum):
    SUCCEED = "succeed"
    RETRY = "retry"
    EXHAUSTED = "exhausted"
    FAIL = "fail"


@dataclass(frozen=True)
class RetryState:
    attempt: int
    delay_seconds: float


@dataclass(frozen=True)
class RetryDecision:
    action: RetryAction
    wait_seconds: float = 0.0
    next_state: Optional[RetryState] = None


def classify_status(status_code: int) -> AttemptOutcome:
    if 200 <= status_code < 300:
        return AttemptOutcome.SUCCESS
    if status_code in TRANSIENT_STATUS_CODES:
        return AttemptOutcome.TRANSIENT
    return AttemptOutcome.FATAL


class RetryPolicy:
    def __init__(
        self,
        retries: int = 3,
        initial_delay_seconds: float = 1.0,
        backoff_factor: float = 2.0,
    ):
        if retries < 1:
            raise ValueError("retries must be >= 1")
        if initial_delay_seconds < 0:
            raise ValueError("initial_delay_seconds must be >= 0")
        self.retries = retries
        self.initial_delay_seconds = initial_delay_seconds
        self.backoff_factor = backoff_factor

    @classmethod
    def from_milliseconds(cls, retries: int, initial_delay_ms: int) -> "RetryPolicy":
        return cls(retries=retries, initial_delay_seconds=initial_delay_ms / 1000.0)

    def start(self) -> RetryState:
        return RetryState(attempt=1, delay_seconds=self.initial_delay_seconds)

    def advance(self, state: RetryState, outcome: AttemptOutcome) -> RetryDecision:
        if outcome is AttemptOutcome.SUCCESS:
            return RetryDecision(action=RetryAction.SUCCEED)
        if outcome is AttemptOutcome.FATAL:
            return RetryDecision(action=RetryAction.FAIL)
        if state.attempt >= self.retries:
            return RetryDecision(action=RetryAction.EXHAUSTED)
        return RetryDecision(
            action=RetryAction.RETRY,
            wait_seconds=state.delay_seconds,
            next_state=RetryState(
                attempt=state.attempt + 1,
                delay_seconds=state.delay_seconds * self.backoff_factor,
            ),
        )
