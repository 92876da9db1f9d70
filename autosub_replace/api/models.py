"""Gemini generateContent response dataclasses.

WHY: The service wraps the generated text in a nested envelope
(candidates → content → parts → text). Typed dataclasses make the path
to the text explicit and give one place to handle missing pieces.

HOW: Each dataclass maps 1:1 to a JSON object in the response. from_dict
tolerates absent optional keys; first_text() returns the text of the
first part of the first candidate, or None.

RULES:
- Only the first candidate and its first part are used
- Missing candidates/parts mean "no content", never an exception here
- Input must already match protocol.ENVELOPE_SCHEMA (value types are
  not re-checked)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Part:
    text: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Part:
        return cls(text=data.get("text") or "")


@dataclass
class Candidate:
    """One generated answer from the service."""

    parts: List[Part] = field(default_factory=list)
    finish_reason: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Candidate:
        content = data.get("content") or {}
        return cls(
            parts=[Part.from_dict(p) for p in content.get("parts") or []],
            finish_reason=data.get("finishReason"),
        )


@dataclass
class GenerateContentResponse:
    """Top-level response of POST models/{model}:generateContent."""

    candidates: List[Candidate] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> GenerateContentResponse:
        return cls(
            candidates=[Candidate.from_dict(c) for c in data.get("candidates") or []],
        )

    def first_text(self) -> Optional[str]:
        """Text of the first part of the first candidate, if any."""
        if not self.candidates or not self.candidates[0].parts:
            return None
        return self.candidates[0].parts[0].text

    def first_finish_reason(self) -> Optional[str]:
        """finishReason of the first candidate, e.g. "STOP" or "MAX_TOKENS"."""
        if not self.candidates:
            return None
        return self.candidates[0].finish_reason
