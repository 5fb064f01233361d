from __future__ import annotations

import json
from pathlib import Path

import pytest

from edgeworker.runners.base import AgentResponse, AgentRunnerError
from edgeworker.runners.mock import ScriptedAgentRunner
from edgeworker.trace import TraceRecorder
from edgeworker.validation import (
    LoopOutcome,
    ValidationLoopConfig,
    ValidationResult,
    create_initial_state,
    get_validation_result_schema,
    record_attempt,
)
from edgeworker.validation.driver import ValidationLoopRunner


def test_runner_fixes_until_validation_passes() -> None:
    validator = ScriptedAgentRunner(
        [
            AgentResponse(structured_output={"pass": False, "reason": "First error"}),
            '```json\n{"pass": false, "reason": "Second error"}\n```',
            "Verification failed: Third error",
            AgentResponse(structured_output={"pass": True, "reason": "All tests passed"}),
        ]
    )
    fixer = ScriptedAgentRunner(["fixed"] * 3)
    run = ValidationLoopRunner(validator, fixer).run("Run all verifications.")

    assert run.state.iteration == 4
    assert run.state.outcome is LoopOutcome.PASSED
    assert run.proceed is True
    assert "4 attempts" in run.summary
    assert len(fixer.prompts) == 3
    assert "Attempt 1 of 4" in fixer.prompts[0]
    assert "First error" in fixer.prompts[2]
    assert "Second error" in fixer.prompts[2]
    assert validator.prompts == ["Run all verifications."] * 4
    assert validator.schemas[0] == get_validation_result_schema()


def test_runner_stops_after_max_retries_without_final_fix() -> None:
    config = ValidationLoopConfig(max_iterations=2, continue_on_max_retries=False)
    validator = ScriptedAgentRunner(["tests failed", "tests still failing"])
    fixer = ScriptedAgentRunner(["fixed"])
    run = ValidationLoopRunner(validator, fixer, config=config).run("validate")

    assert run.state.outcome is LoopOutcome.FAILED_MAX_RETRIES
    assert run.proceed is False
    assert len(fixer.prompts) == 1


def test_runner_passes_first_time_without_fixer() -> None:
    validator = ScriptedAgentRunner(['{"pass": true, "reason": "clean"}'])
    fixer = ScriptedAgentRunner()
    run = ValidationLoopRunner(validator, fixer).run("validate")
    assert run.state.iteration == 1
    assert run.proceed is True
    assert fixer.prompts == []


def test_runner_resumes_from_saved_state() -> None:
    state = record_attempt(create_initial_state(), ValidationResult(passed=False, reason="earlier"))
    validator = ScriptedAgentRunner(['{"pass": true, "reason": "clean"}'])
    run = ValidationLoopRunner(validator, ScriptedAgentRunner()).run("validate", state=state)
    assert run.state.iteration == 2
    assert run.state.attempts[0].result.reason == "earlier"


def test_runner_propagates_agent_errors() -> None:
    validator = ScriptedAgentRunner(["tests failed"])
    fixer = ScriptedAgentRunner(["fixed"])
    with pytest.raises(AgentRunnerError):
        ValidationLoopRunner(validator, fixer).run("validate")


def test_runner_writes_redacted_trace(tmp_path: Path) -> None:
    validator = ScriptedAgentRunner(
        ["failed: token lin_api_secret123 rejected", '{"pass": true, "reason": "ok"}']
    )
    fixer = ScriptedAgentRunner(["fixed"])
    trace = TraceRecorder(trace_id="session-1", workspace_dir=str(tmp_path))
    run = ValidationLoopRunner(validator, fixer, trace=trace).run("validate")

    assert run.trace_path is not None
    payload = json.loads(Path(run.trace_path).read_text(encoding="utf-8"))
    assert payload["outcome"] == "passed"
    assert payload["iterations"] == 2
    types = [event["type"] for event in payload["events"]]
    assert types == [
        "validation_response",
        "validation_attempt",
        "fixer_prompt",
        "validation_response",
        "validation_attempt",
    ]
    assert "lin_api_secret123" not in json.dumps(payload)
