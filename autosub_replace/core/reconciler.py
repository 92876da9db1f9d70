"""Per-batch timing reconciliation: candidates → subtitle spans.

WHY: The reshaping service reports only where a subtitle starts and when
its last word starts. Viewers need an end time that leaves the last word
on screen long enough, never runs into the next subtitle, and never
flashes by too quickly.

HOW: One left-to-right pass. The end time is the last word's start plus
a fixed reading allowance, clamped to just before the next candidate,
then raised to the minimum duration if the span came out too short.

RULES:
- end = lw_ms + 1500 when lw_ms > 0, else unknown (0)
- With a following candidate: end = min(end, next.st_ms - 100);
  an unknown end takes next.st_ms - 100 directly
- If end <= start or end - start < 1000: end = start + 1000
- The minimum-duration fallback may overlap the next candidate; only the
  track assembler resolves that
"""

from __future__ import annotations

from typing import List, Sequence

from autosub_replace.core.ir import CandidateSubtitle, Subtitle

LAST_WORD_DISPLAY_MS = 1500
SUBTITLE_GAP_MS = 100
MIN_DURATION_MS = 1000


def reconcile_batch(candidates: Sequence[CandidateSubtitle]) -> List[Subtitle]:
    """Compute (start, end) spans for one batch of candidates."""
    subtitles: List[Subtitle] = []

    for i, candidate in enumerate(candidates):
        end_ms = 0
        if candidate.last_word_ms > 0:
            end_ms = candidate.last_word_ms + LAST_WORD_DISPLAY_MS

        if i < len(candidates) - 1:
            next_start = candidates[i + 1].start_ms - SUBTITLE_GAP_MS
            if end_ms == 0 or next_start < end_ms:
                end_ms = next_start

        if end_ms <= candidate.start_ms or end_ms - candidate.start_ms < MIN_DURATION_MS:
            end_ms = candidate.start_ms + MIN_DURATION_MS

        subtitles.append(Subtitle(
            start_ms=candidate.start_ms,
            end_ms=end_ms,
            text=candidate.text,
        ))

    return subtitles
