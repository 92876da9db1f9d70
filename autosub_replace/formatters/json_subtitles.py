"""JSON formatter — the track as a plain array of subtitle objects.

Useful for feeding the result into other tools or for diffing runs.
Each element is ``{"start_ms", "end_ms", "text"}``; non-ASCII text is
written verbatim.
"""

from __future__ import annotations

import json
from typing import Sequence

from autosub_replace.core.ir import Subtitle
from autosub_replace.formatters.base import BaseFormatter, FormatterOutput


class JSONFormatter(BaseFormatter):

    suffix = ".json"

    @property
    def name(self) -> str:
        return "JSON"

    def format(self, track: Sequence[Subtitle]) -> FormatterOutput:
        content = json.dumps([s.to_dict() for s in track], ensure_ascii=False, indent=2)
        return FormatterOutput(
            suffix=self.suffix,
            content=content,
            media_type="application/json",
        )
