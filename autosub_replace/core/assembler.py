"""Track assembly: per-batch subtitles → one ordered track.

WHY: Batches are reconciled independently, so the last subtitle of one
batch knows nothing about the first subtitle of the next. The
minimum-duration fallback can also push a subtitle into its neighbour
inside a batch. A final pass over the whole track removes those overlaps.

HOW: Concatenate the batch lists in processing order, then walk adjacent
pairs once and pull each overlapping end time back to just before the
next start.

RULES:
- Output order is batch order, then in-batch order
- Overlap: earlier.end_ms > later.start_ms → earlier.end_ms = later.start_ms - 100
- Minimum duration is NOT re-checked after the clamp; a clamped subtitle
  can end up shorter than 1000 ms (known, kept as-is)
- Input Subtitle objects are not mutated
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Iterable, List, Sequence

from autosub_replace.core.ir import Subtitle
from autosub_replace.core.reconciler import SUBTITLE_GAP_MS

logger = logging.getLogger(__name__)


def assemble_track(batches: Iterable[Sequence[Subtitle]]) -> List[Subtitle]:
    """Concatenate batch results and run the global overlap pass."""
    track: List[Subtitle] = [replace(sub) for batch in batches for sub in batch]

    clamped = 0
    for i in range(1, len(track)):
        if track[i - 1].end_ms > track[i].start_ms:
            track[i - 1].end_ms = track[i].start_ms - SUBTITLE_GAP_MS
            clamped += 1

    if clamped:
        logger.debug("Clamped %d overlapping subtitle(s) in final track", clamped)
    return track
