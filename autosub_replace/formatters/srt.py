"""SRT formatter for the finished subtitle track.

WHY: SRT is what video players and YouTube's own upload form accept.

HOW: One block per subtitle: 1-based index, ``start --> end`` line with
``HH:MM:SS,mmm`` timestamps, the text, and a blank separator line.

RULES:
- Indices start at 1 and follow track order
- Hours are zero-padded to two digits (and grow beyond 99 if needed)
- Negative times (possible after the final overlap clamp) render as 0
"""

from __future__ import annotations

from typing import List, Sequence

from autosub_replace.core.ir import Subtitle
from autosub_replace.formatters.base import BaseFormatter, FormatterOutput


def ms_to_srt_timestamp(ms: int) -> str:
    """Format milliseconds as ``HH:MM:SS,mmm`` (3661045 → 01:01:01,045)."""
    ms = max(ms, 0)
    hours, remainder = divmod(ms, 3_600_000)
    minutes, remainder = divmod(remainder, 60_000)
    seconds, millis = divmod(remainder, 1000)
    return "{:02d}:{:02d}:{:02d},{:03d}".format(hours, minutes, seconds, millis)


class SRTFormatter(BaseFormatter):
    """Formatter that writes the track as a SubRip (.srt) file."""

    suffix = ".srt"

    @property
    def name(self) -> str:
        return "SRT"

    def format(self, track: Sequence[Subtitle]) -> FormatterOutput:
        blocks: List[str] = []
        for index, subtitle in enumerate(track, start=1):
            blocks.append("{}\n{} --> {}\n{}\n\n".format(
                index,
                ms_to_srt_timestamp(subtitle.start_ms),
                ms_to_srt_timestamp(subtitle.end_ms),
                subtitle.text,
            ))
        return FormatterOutput(
            suffix=self.suffix,
            content="".join(blocks),
            media_type="application/x-subrip",
        )
