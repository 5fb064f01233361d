"""Validation verdict schema and loop policy defaults."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr


class ValidationResult(BaseModel):
    """Verdict for one validation attempt.

    The wire form uses the ``pass`` key; the attribute is ``passed``.
    Types are checked strictly and unknown keys are dropped.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    passed: StrictBool = Field(alias="pass")
    reason: StrictStr

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# Runtime validator for structured agent output.
ValidationResultSchema = ValidationResult


class ValidationLoopConfig(BaseModel):
    """Retry policy for a validation loop."""

    model_config = ConfigDict(frozen=True)

    max_iterations: int = Field(default=4, ge=1)
    continue_on_max_retries: bool = True


DEFAULT_VALIDATION_LOOP_CONFIG = ValidationLoopConfig()


def get_validation_result_schema() -> dict[str, Any]:
    """JSON schema requested from agents that support structured output."""
    return {
        "type": "object",
        "properties": {
            "pass": {
                "type": "boolean",
                "description": "Whether all verifications passed",
            },
            "reason": {
                "type": "string",
                "description": (
                    "Summary of the verification results, or the failures "
                    "that need to be fixed"
                ),
            },
        },
        "required": ["pass", "reason"],
        "additionalProperties": False,
    }
