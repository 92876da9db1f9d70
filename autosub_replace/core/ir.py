"""Intermediate representation dataclasses for word timings and subtitles.

WHY: srv3 gives one timed fragment per word; the reshaping service gives
sentence-level candidates; output formats need start/end spans. Typed
dataclasses make each stage's contract explicit.

HOW: Four dataclasses:
  WordTiming        — one word with its global id and absolute start time
  Batch             — a contiguous slice of the word sequence sent in one call
  CandidateSubtitle — one sentence block as proposed by the service
  Subtitle          — one finished subtitle span with text

RULES:
- All times are integer milliseconds
- WordTiming ids are global, strictly increasing from 0
- WordTiming is frozen; it is built once per run and only read afterwards
- Batch covers [start_index, end_index) of the global sequence
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class WordTiming:
    """A single word fragment from the srv3 document.

    RULES:
    - id: global index in the transcript, unique and increasing
    - word: trimmed, never empty
    - start_ms: paragraph offset + fragment offset
    """

    id: int
    word: str
    start_ms: int

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "word": self.word, "start_ms": self.start_ms}


@dataclass
class Batch:
    """A bounded slice of the word sequence sent in one service call.

    WHY: The service cannot take a whole transcript at once. Batches keep
    each request small, and carry enough identity (number, global start)
    for continuation prompts and debug file names.

    RULES:
    - number is 1-based, in processing order
    - words == all_words[start_index:end_index]
    - is_continuation is True for every batch not starting at 0
    """

    number: int
    start_index: int
    end_index: int
    words: List[WordTiming] = field(default_factory=list)

    @property
    def size(self) -> int:
        return self.end_index - self.start_index

    @property
    def is_continuation(self) -> bool:
        return self.start_index > 0


@dataclass
class CandidateSubtitle:
    """One sentence block proposed by the reshaping service.

    WHY: The service only knows word start times, so it reports where a
    subtitle starts (st_id, st_ms) and when its last word starts (lw_ms).
    End times are computed later by the reconciler.

    HOW: from_dict maps the service's short JSON keys to typed fields.
    The dict is expected to have passed schema validation already.

    RULES:
    - start_word_id is a global WordTiming id, not batch-local
    - last_word_ms of 0 means "unknown"
    - incomplete is informational; continuation is driven by start_word_id
    """

    start_word_id: int
    start_ms: int
    last_word_ms: int
    text: str
    incomplete: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CandidateSubtitle:
        return cls(
            start_word_id=int(data["st_id"]),
            start_ms=int(data["st_ms"]),
            last_word_ms=int(data.get("lw_ms", 0)),
            text=data["text"],
            incomplete=bool(data.get("incomplete", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "st_id": self.start_word_id,
            "st_ms": self.start_ms,
            "lw_ms": self.last_word_ms,
            "text": self.text,
            "incomplete": self.incomplete,
        }


@dataclass
class Subtitle:
    """One finished subtitle block."""

    start_ms: int
    end_ms: int
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"start_ms": self.start_ms, "end_ms": self.end_ms, "text": self.text}
