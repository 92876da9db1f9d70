"""Output formatter registry.

WHY: The CLI needs a single lookup to find a formatter by name. Adding a
format means creating the class, importing it here, and adding one line.

HOW: FORMATTERS maps string keys to formatter *classes* (not instances).
Callers instantiate as needed: ``formatter = FORMATTERS["srt"]()``.

RULES:
- Keys are the values accepted by the CLI's --format flag
- Values are BaseFormatter subclasses (not instances)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from autosub_replace.formatters.json_subtitles import JSONFormatter
from autosub_replace.formatters.srt import SRTFormatter

if TYPE_CHECKING:
    from autosub_replace.formatters.base import BaseFormatter

FORMATTERS: dict[str, type[BaseFormatter]] = {
    "srt": SRTFormatter,
    "json": JSONFormatter,
}
