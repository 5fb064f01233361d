"""Validation loop: parse verdicts, track retries, build fixer prompts."""

from edgeworker.validation.fixer import (
    FixerContext,
    PreviousAttempt,
    get_fixer_context,
    render_validation_fixer_prompt,
)
from edgeworker.validation.loop import (
    Attempt,
    LoopOutcome,
    ValidationLoopState,
    create_initial_state,
    get_validation_summary,
    record_attempt,
    should_continue_loop,
    should_proceed_after_validation,
    state_from_json,
    state_to_json,
)
from edgeworker.validation.parser import parse_validation_result
from edgeworker.validation.schema import (
    DEFAULT_VALIDATION_LOOP_CONFIG,
    ValidationLoopConfig,
    ValidationResult,
    ValidationResultSchema,
    get_validation_result_schema,
)

__all__ = [
    "Attempt",
    "DEFAULT_VALIDATION_LOOP_CONFIG",
    "FixerContext",
    "LoopOutcome",
    "PreviousAttempt",
    "ValidationLoopConfig",
    "ValidationLoopState",
    "ValidationResult",
    "ValidationResultSchema",
    "create_initial_state",
    "get_fixer_context",
    "get_validation_result_schema",
    "get_validation_summary",
    "parse_validation_result",
    "record_attempt",
    "render_validation_fixer_prompt",
    "should_continue_loop",
    "should_proceed_after_validation",
    "state_from_json",
    "state_to_json",
]
