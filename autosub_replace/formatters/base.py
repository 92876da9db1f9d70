"""Abstract base formatter and output container.

WHY: The finished track can be written as SRT or as JSON, and more
formats may follow. A common interface lets the CLI pick a formatter by
key and write whatever it returns without knowing the format.

HOW: BaseFormatter is an ABC with a ``name`` property and a ``format()``
method. FormatterOutput bundles the file suffix, the content and its
MIME type.

RULES:
- Subclasses MUST implement ``name`` and ``format()``
- ``suffix`` includes the dot, e.g. ``".srt"``
- The caller decides the output path; formatters never touch the disk
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from autosub_replace.core.ir import Subtitle


@dataclass
class FormatterOutput:
    """Serialized track content.

    Attributes:
        suffix: File extension including the dot, e.g. ``".srt"``.
        content: The file content as text.
        media_type: MIME type, e.g. ``"application/x-subrip"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseFormatter(ABC):
    """Abstract base for all track formatters.

    A subclass sets ``suffix`` and becomes selectable with ``--format``
    once it has a key in ``formatters.FORMATTERS``.
    """

    suffix: str = ""
    """File extension including the dot, e.g. ``".srt"``."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'SRT'."""

    @abstractmethod
    def format(self, track: Sequence[Subtitle]) -> FormatterOutput:
        """Serialize the finished track.

        Args:
            track: Ordered, overlap-corrected subtitles.

        Returns:
            FormatterOutput with suffix, content and MIME type.
        """
