"""Bounded validate/fix retry state machine.

States move one way: ``in_progress`` to ``passed`` or ``failed_max_retries``.
Every transition returns a new state; states are never mutated.
"""

from __future__ import annotations

import time
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from edgeworker.util.logging import get_logger
from edgeworker.validation.schema import (
    DEFAULT_VALIDATION_LOOP_CONFIG,
    ValidationLoopConfig,
    ValidationResult,
)


logger = get_logger(__name__)


class LoopOutcome(str, Enum):
    IN_PROGRESS = "in_progress"
    PASSED = "passed"
    FAILED_MAX_RETRIES = "failed_max_retries"


class Attempt(BaseModel):
    model_config = ConfigDict(frozen=True)

    iteration: int = Field(ge=1)
    result: ValidationResult
    timestamp: int


class ValidationLoopState(BaseModel):
    model_config = ConfigDict(frozen=True)

    iteration: int = Field(default=0, ge=0)
    attempts: tuple[Attempt, ...] = ()
    outcome: LoopOutcome = LoopOutcome.IN_PROGRESS

    @computed_field  # type: ignore[prop-decorator]
    @property
    def completed(self) -> bool:
        return self.outcome is not LoopOutcome.IN_PROGRESS

    @model_validator(mode="before")
    @classmethod
    def _check_completed_flag(cls, data: Any) -> Any:
        if not isinstance(data, dict) or "completed" not in data:
            return data
        data = dict(data)
        completed = data.pop("completed")
        outcome = data.get("outcome", LoopOutcome.IN_PROGRESS)
        if bool(completed) != (LoopOutcome(outcome) is not LoopOutcome.IN_PROGRESS):
            raise ValueError(f"completed={completed!r} contradicts outcome {outcome!r}")
        return data

    @model_validator(mode="after")
    def _check_history(self) -> "ValidationLoopState":
        if self.iteration != len(self.attempts):
            raise ValueError(
                f"iteration {self.iteration} does not match {len(self.attempts)} recorded attempts"
            )
        if [attempt.iteration for attempt in self.attempts] != list(range(1, self.iteration + 1)):
            raise ValueError("attempt iterations must run 1..n in order")
        # Only the last attempt may pass; a pass ends the loop.
        if any(attempt.result.passed for attempt in self.attempts[:-1]):
            raise ValueError("a passing attempt must be the last one recorded")
        last_passed = bool(self.attempts) and self.attempts[-1].result.passed
        if self.outcome is LoopOutcome.PASSED and not last_passed:
            raise ValueError("outcome passed requires a passing last attempt")
        if self.outcome is LoopOutcome.FAILED_MAX_RETRIES and (not self.attempts or last_passed):
            raise ValueError("outcome failed_max_retries requires a failing last attempt")
        if self.outcome is LoopOutcome.IN_PROGRESS and last_passed:
            raise ValueError("a passing attempt cannot leave the loop in progress")
        return self


def create_initial_state() -> ValidationLoopState:
    return ValidationLoopState()


def record_attempt(
    state: ValidationLoopState,
    result: ValidationResult,
    config: ValidationLoopConfig | None = None,
) -> ValidationLoopState:
    """Append an attempt and resolve the loop outcome.

    A passing result always ends the loop as ``passed``, even on the last
    allowed iteration. Recording onto a completed state returns it unchanged.
    """
    config = config or DEFAULT_VALIDATION_LOOP_CONFIG
    if state.completed:
        logger.warning(
            "Ignoring validation attempt on completed loop (outcome=%s).", state.outcome.value
        )
        return state
    iteration = state.iteration + 1
    attempt = Attempt(
        iteration=iteration,
        result=result,
        timestamp=int(time.time() * 1000),
    )
    if result.passed:
        outcome = LoopOutcome.PASSED
    elif iteration >= config.max_iterations:
        outcome = LoopOutcome.FAILED_MAX_RETRIES
    else:
        outcome = LoopOutcome.IN_PROGRESS
    return ValidationLoopState(
        iteration=iteration,
        attempts=state.attempts + (attempt,),
        outcome=outcome,
    )


def should_continue_loop(state: ValidationLoopState) -> bool:
    return state.outcome is LoopOutcome.IN_PROGRESS


def should_proceed_after_validation(
    state: ValidationLoopState, config: ValidationLoopConfig | None = None
) -> bool:
    """Whether the workflow may move past validation."""
    config = config or DEFAULT_VALIDATION_LOOP_CONFIG
    if state.outcome is LoopOutcome.PASSED:
        return True
    if state.outcome is LoopOutcome.FAILED_MAX_RETRIES:
        return config.continue_on_max_retries
    return False


def _attempts_label(count: int) -> str:
    return f"{count} attempt" if count == 1 else f"{count} attempts"


def get_validation_summary(state: ValidationLoopState) -> str:
    """One-line status using the cumulative attempt count."""
    attempts = _attempts_label(state.iteration)
    last_reason = state.attempts[-1].result.reason if state.attempts else None
    if state.outcome is LoopOutcome.PASSED:
        return f"Validation passed after {attempts}: {last_reason}"
    if state.outcome is LoopOutcome.FAILED_MAX_RETRIES:
        return f"Validation failed after {attempts} (max retries reached). Last error: {last_reason}"
    if last_reason is None:
        return "Validation in progress (no attempts yet)"
    return f"Validation in progress ({attempts} so far). Last error: {last_reason}"


def state_to_json(state: ValidationLoopState) -> str:
    return state.model_dump_json(by_alias=True)


def state_from_json(payload: str | bytes) -> ValidationLoopState:
    return ValidationLoopState.model_validate_json(payload)
