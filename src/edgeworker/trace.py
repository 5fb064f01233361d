"""Trace recorder for validation loop runs."""

from __future__ import annotations

import json
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from edgeworker.util.logging import redact

if TYPE_CHECKING:
    from edgeworker.validation.loop import ValidationLoopState
    from edgeworker.validation.schema import ValidationResult


@dataclass
class TraceRecorder:
    trace_id: str
    workspace_dir: str
    started_at: float = field(default_factory=time.time)
    events: list[dict[str, Any]] = field(default_factory=list)

    def record(self, event_type: str, payload: dict[str, Any]) -> None:
        self.events.append(
            {
                "type": event_type,
                "timestamp": time.time(),
                "payload": payload,
            }
        )

    def record_validation_response(self, text: str | None, structured: bool) -> None:
        self.record(
            "validation_response",
            {"text": redact(text or ""), "structured": structured},
        )

    def record_attempt(self, iteration: int, result: ValidationResult) -> None:
        self.record(
            "validation_attempt",
            {"iteration": iteration, "pass": result.passed, "reason": redact(result.reason)},
        )

    def record_fixer_prompt(self, iteration: int, prompt: str) -> None:
        self.record("fixer_prompt", {"iteration": iteration, "prompt": redact(prompt)})

    def finalize(self, state: ValidationLoopState) -> str:
        trace_dir = Path(self.workspace_dir) / "traces"
        trace_dir.mkdir(parents=True, exist_ok=True)
        trace_path = trace_dir / f"{self.trace_id}.json"
        payload = {
            "trace_id": self.trace_id,
            "started_at": self.started_at,
            "ended_at": time.time(),
            "outcome": state.outcome.value,
            "iterations": state.iteration,
            "events": self.events,
        }
        trace_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        return str(trace_path)
