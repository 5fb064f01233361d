"""Agent runner interfaces."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel


class AgentRunnerError(RuntimeError):
    """Raised when an agent runner cannot produce a response."""


class AgentResponse(BaseModel):
    text: str | None = None
    structured_output: Any = None


class AgentRunner(ABC):
    """Abstract coding-agent runner (Claude, Codex, Gemini, OpenCode)."""

    @abstractmethod
    def run(self, prompt: str, output_schema: dict[str, Any] | None = None) -> AgentResponse:
        """Run the agent on a prompt and return its final response."""
        raise NotImplementedError
