"""Context and prompt for the agent that fixes failed validation."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from edgeworker.validation.loop import ValidationLoopState
from edgeworker.validation.schema import DEFAULT_VALIDATION_LOOP_CONFIG, ValidationLoopConfig


class PreviousAttempt(BaseModel):
    model_config = ConfigDict(frozen=True)

    iteration: int
    reason: str


class FixerContext(BaseModel):
    model_config = ConfigDict(frozen=True)

    failure_reason: str
    iteration: int
    max_iterations: int
    previous_attempts: tuple[PreviousAttempt, ...] = ()


def get_fixer_context(
    state: ValidationLoopState, config: ValidationLoopConfig | None = None
) -> FixerContext | None:
    """Describe the latest failure, or None when there is nothing to fix."""
    config = config or DEFAULT_VALIDATION_LOOP_CONFIG
    if state.completed or not state.attempts:
        return None
    *earlier, latest = state.attempts
    return FixerContext(
        failure_reason=latest.result.reason,
        iteration=state.iteration,
        max_iterations=config.max_iterations,
        previous_attempts=tuple(
            PreviousAttempt(iteration=attempt.iteration, reason=attempt.result.reason)
            for attempt in earlier
        ),
    )


def render_validation_fixer_prompt(context: FixerContext) -> str:
    lines = [
        "# Validation failed",
        "",
        f"Attempt {context.iteration} of {context.max_iterations} did not pass validation.",
        "",
        "## Failure",
        "",
        context.failure_reason,
        "",
    ]
    if context.previous_attempts:
        lines.extend(["## Previous attempts", ""])
        for attempt in context.previous_attempts:
            lines.append(f"- Attempt {attempt.iteration}: {attempt.reason}")
        lines.extend(
            [
                "",
                "The earlier fixes did not resolve every problem. Avoid repeating an approach that already failed.",
                "",
            ]
        )
    lines.extend(
        [
            "## Instructions",
            "",
            "1. Read the failure above and find the root cause.",
            "2. Make the smallest change that fixes it.",
            "3. Do not run the full validation yourself; it runs again after you finish.",
        ]
    )
    if context.iteration + 1 >= context.max_iterations:
        lines.extend(["", "The next validation run is the last one allowed."])
    return "\n".join(lines)
