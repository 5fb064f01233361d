"""Scripted agent runner for offline runs and tests."""

from __future__ import annotations

from typing import Any

from edgeworker.runners.base import AgentResponse, AgentRunner, AgentRunnerError


class ScriptedAgentRunner(AgentRunner):
    """Replays scripted responses in order and records every prompt."""

    def __init__(self, scripted: list[AgentResponse | str] | None = None) -> None:
        self._scripted = list(scripted or [])
        self.prompts: list[str] = []
        self.schemas: list[dict[str, Any] | None] = []

    def run(self, prompt: str, output_schema: dict[str, Any] | None = None) -> AgentResponse:
        self.prompts.append(prompt)
        self.schemas.append(output_schema)
        if not self._scripted:
            raise AgentRunnerError("scripted runner has no responses left")
        response = self._scripted.pop(0)
        if isinstance(response, str):
            return AgentResponse(text=response)
        return response
