"""Turn validation agent output into a ValidationResult."""

from __future__ import annotations

import json
import re
from typing import Any, Iterator

from pydantic import ValidationError

from edgeworker.util.json_repair import JsonRepairError, extract_fenced_block, repair_json
from edgeworker.util.logging import get_logger
from edgeworker.validation.schema import ValidationResult


logger = get_logger(__name__)

NO_RESPONSE_REASON = "No response received from validation"
UNPARSEABLE_REASON = "Could not parse validation result"
MAX_REASON_CHARS = 500

_PASS_MARKER_RE = re.compile(r"""["']?\bpass["']?\s*:\s*(true|false)\b""", re.IGNORECASE)
_REASON_MARKER_RE = re.compile(
    r"""["']?\breason["']?\s*:\s*(?:"([^"]*)"|'([^']*)')""", re.IGNORECASE
)

_FAILURE_PATTERNS = [
    re.compile(r"\bfail(?:s|ed|ing|ure|ures)?\b", re.IGNORECASE),
    re.compile(r"\bnot\s+pass(?:ing|ed)?\b", re.IGNORECASE),
    re.compile(r"\b(?:did|does|do)\s+not\s+pass\b", re.IGNORECASE),
    re.compile(r"\bunsuccessful(?:ly)?\b", re.IGNORECASE),
]
_SUCCESS_PATTERNS = [
    re.compile(r"\bpassed\s+successfully\b", re.IGNORECASE),
    re.compile(r"\bcompleted\s+successfully\b", re.IGNORECASE),
    re.compile(
        r"\ball\s+(?:\w+\s+)?(?:tests?|checks?|verifications?|validations?)\s+"
        r"(?:have\s+)?(?:pass|passed|passing|succeeded)\b",
        re.IGNORECASE,
    ),
    re.compile(r"\b(?:validation|verification)s?\s+(?:has\s+|have\s+)?passed\b", re.IGNORECASE),
]


def _truncate(text: str) -> str:
    if len(text) <= MAX_REASON_CHARS:
        return text
    return text[: MAX_REASON_CHARS - 3] + "..."


def _coerce(payload: Any) -> ValidationResult | None:
    if not isinstance(payload, dict) or "pass" not in payload:
        return None
    try:
        return ValidationResult.model_validate(payload)
    except ValidationError:
        return None


def _json_candidates(text: str) -> Iterator[Any]:
    try:
        yield json.loads(text)
    except (ValueError, RecursionError):
        pass
    fenced = extract_fenced_block(text)
    if fenced:
        try:
            yield json.loads(fenced)
        except (ValueError, RecursionError):
            pass
    try:
        yield repair_json(text)
    except JsonRepairError:
        pass


def _from_pass_marker(text: str) -> ValidationResult | None:
    match = _PASS_MARKER_RE.search(text)
    if match is None:
        return None
    passed = match.group(1).lower() == "true"
    reason_match = _REASON_MARKER_RE.search(text)
    if reason_match is not None:
        reason = reason_match.group(1) if reason_match.group(1) is not None else reason_match.group(2)
    else:
        reason = _truncate(text)
    return ValidationResult(passed=passed, reason=reason or _truncate(text))


def _from_language(text: str) -> ValidationResult | None:
    if any(pattern.search(text) for pattern in _FAILURE_PATTERNS):
        return ValidationResult(passed=False, reason=_truncate(text))
    if any(pattern.search(text) for pattern in _SUCCESS_PATTERNS):
        return ValidationResult(passed=True, reason=_truncate(text))
    return None


def parse_validation_result(
    response_text: str | None = None, structured_output: Any = None
) -> ValidationResult:
    """Classify a validation response, falling back through looser formats.

    Order: structured output, JSON in the text (whole text, fenced block,
    embedded object), a literal ``"pass": true|false`` marker, then success
    and failure phrases. Anything unclassifiable is a failure. Never raises.
    """
    if structured_output is not None:
        result = _coerce(structured_output)
        if result is not None:
            logger.debug("Validation result taken from structured output.")
            return result
        logger.debug("Structured output did not match the validation schema.")

    if response_text is None or not response_text.strip():
        return ValidationResult(passed=False, reason=NO_RESPONSE_REASON)

    text = response_text.strip()
    for candidate in _json_candidates(text):
        result = _coerce(candidate)
        if result is not None:
            logger.debug("Validation result parsed from JSON in response text.")
            return result

    result = _from_pass_marker(text)
    if result is not None:
        logger.debug("Validation result inferred from pass marker.")
        return result

    result = _from_language(text)
    if result is not None:
        logger.debug("Validation result inferred from response wording (pass=%s).", result.passed)
        return result

    logger.debug("Validation response could not be classified.")
    return ValidationResult(passed=False, reason=UNPARSEABLE_REASON)
