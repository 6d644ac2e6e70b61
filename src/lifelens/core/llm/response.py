"""Parsing and guardrail enforcement for LLM output."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


class ResponseParseError(ValueError):
    """Raised when an LLM reply does not contain the expected JSON."""


# ---------------------------------------------------------------------------
# JSON extraction
# ---------------------------------------------------------------------------

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def strip_code_fences(text: str) -> str:
    """Remove a leading ```json / ``` fence and a trailing ``` fence."""
    return _FENCE.sub("", text.strip()).strip()


def extract_json_array(text: str) -> list[Any]:
    """Parse the first ``[...]`` span in a reply that may carry prose around it.

    Raises:
        ResponseParseError: no array found or it is not valid JSON.
    """
    match = re.search(r"\[[\s\S]*\]", strip_code_fences(text or ""))
    if not match:
        raise ResponseParseError("LLM reply did not contain a JSON array")
    try:
        value = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"LLM reply contained invalid JSON: {exc}") from exc
    if not isinstance(value, list):
        raise ResponseParseError("LLM reply JSON is not an array")
    return value


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the first ``{...}`` span in a reply.

    Raises:
        ResponseParseError: no object found or it is not valid JSON.
    """
    match = re.search(r"\{[\s\S]*\}", strip_code_fences(text or ""))
    if not match:
        raise ResponseParseError("LLM reply did not contain a JSON object")
    try:
        value = json.loads(match.group(0))
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"LLM reply contained invalid JSON: {exc}") from exc
    if not isinstance(value, dict):
        raise ResponseParseError("LLM reply JSON is not an object")
    return value


# ---------------------------------------------------------------------------
# Guardrails
# ---------------------------------------------------------------------------

# Heuristic: detect common unsafe phrasings rather than parse intent.
PROHIBITED_INDICATORS: dict[str, tuple[str, ...]] = {
    "making medical diagnoses": (
        "you have been diagnosed",
        "you are suffering from",
        "you have a condition",
    ),
    "prescribing treatments": (
        "take this medication",
        "stop taking your medication",
        "i prescribe",
    ),
    "making disease predictions": (
        "you will develop",
        "you are at high risk of dying",
        "guaranteed to cure",
    ),
}


@dataclass
class GuardrailCheck:
    """Result of checking generated text against the wellness guardrails."""

    passed: bool
    flags: list[str] = field(default_factory=list)
    phrases: list[str] = field(default_factory=list)


def check_guardrails(content: str) -> GuardrailCheck:
    """Flag prohibited health guidance in generated text."""
    content_lower = (content or "").lower()
    flags: list[str] = []
    phrases: list[str] = []
    for action, patterns in PROHIBITED_INDICATORS.items():
        for pattern in patterns:
            if pattern in content_lower:
                flags.append(f"prohibited_pattern_detected: {action} ('{pattern}')")
                phrases.append(pattern)

    if flags:
        logger.warning("Guardrail flags: %s", flags)
    return GuardrailCheck(passed=not flags, flags=flags, phrases=phrases)


def sanitize_content(content: str, guardrail_check: GuardrailCheck) -> str:
    """Redact sentences that contain a prohibited phrase.

    Content that passed the check is returned unchanged.
    """
    if guardrail_check.passed:
        return content

    sanitized = content
    for phrase in guardrail_check.phrases:
        pattern = re.compile(
            r"[^.!?\n]*" + re.escape(phrase) + r"[^.!?\n]*[.!?]?",
            re.IGNORECASE,
        )
        sanitized = pattern.sub("[Removed: contains prohibited health guidance]", sanitized)
    return sanitized
