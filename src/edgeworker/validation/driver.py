"""Drive a validation agent and a fixer agent through the retry loop."""

from __future__ import annotations

from dataclasses import dataclass

from edgeworker.runners.base import AgentRunner
from edgeworker.trace import TraceRecorder
from edgeworker.util.logging import get_logger, redact
from edgeworker.validation.fixer import get_fixer_context, render_validation_fixer_prompt
from edgeworker.validation.loop import (
    ValidationLoopState,
    create_initial_state,
    get_validation_summary,
    record_attempt,
    should_continue_loop,
    should_proceed_after_validation,
)
from edgeworker.validation.parser import parse_validation_result
from edgeworker.validation.schema import (
    DEFAULT_VALIDATION_LOOP_CONFIG,
    ValidationLoopConfig,
    get_validation_result_schema,
)


logger = get_logger(__name__)


@dataclass
class ValidationRun:
    state: ValidationLoopState
    proceed: bool
    summary: str
    trace_path: str | None = None


class ValidationLoopRunner:
    """Alternates validation and fix runs until the loop resolves.

    Runner errors propagate; the state reached so far is not persisted here.
    """

    def __init__(
        self,
        validator: AgentRunner,
        fixer: AgentRunner,
        config: ValidationLoopConfig | None = None,
        trace: TraceRecorder | None = None,
    ) -> None:
        self.validator = validator
        self.fixer = fixer
        self.config = config or DEFAULT_VALIDATION_LOOP_CONFIG
        self.trace = trace

    def run(
        self, validation_prompt: str, state: ValidationLoopState | None = None
    ) -> ValidationRun:
        state = state or create_initial_state()
        schema = get_validation_result_schema()
        while should_continue_loop(state):
            response = self.validator.run(validation_prompt, output_schema=schema)
            if self.trace:
                self.trace.record_validation_response(
                    response.text, response.structured_output is not None
                )
            result = parse_validation_result(response.text, response.structured_output)
            state = record_attempt(state, result, self.config)
            logger.info(
                "Validation attempt %s/%s: pass=%s reason=%s",
                state.iteration,
                self.config.max_iterations,
                result.passed,
                redact(result.reason),
            )
            if self.trace:
                self.trace.record_attempt(state.iteration, result)
            context = get_fixer_context(state, self.config)
            if context is None:
                break
            prompt = render_validation_fixer_prompt(context)
            if self.trace:
                self.trace.record_fixer_prompt(state.iteration, prompt)
            self.fixer.run(prompt)

        summary = get_validation_summary(state)
        proceed = should_proceed_after_validation(state, self.config)
        if proceed:
            logger.info(summary)
        else:
            logger.warning("%s Blocking further progress.", summary)
        trace_path = self.trace.finalize(state) if self.trace else None
        return ValidationRun(state=state, proceed=proceed, summary=summary, trace_path=trace_path)
