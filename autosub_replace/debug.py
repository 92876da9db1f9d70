"""Best-effort debug dumps of per-batch prompts, responses and subtitles.

WHY: When a batch comes back wrong, the first question is "what exactly
did we send and what came back?". Writing each batch's prompt, raw
response and reconciled subtitles to a directory answers that without
rerunning the (paid) service calls.

HOW: DebugWriter is constructed with a directory and an enabled flag.
Each write method is a no-op when disabled. The directory is created on
first write.

RULES:
- File names: batch_<n>_prompt.txt, batch_<n>_response.json,
  batch_<n>_subtitles.json
- Write failures are logged as warnings and never raised
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Sequence, Union

from autosub_replace.core.ir import Subtitle

logger = logging.getLogger(__name__)


class DebugWriter:
    """Writes batch artifacts when debug mode is on."""

    def __init__(self, directory: Union[str, Path], enabled: bool = True) -> None:
        self.directory = Path(directory)
        self.enabled = enabled

    def write_prompt(self, batch_number: int, prompt: str) -> Optional[Path]:
        return self._write("batch_{}_prompt.txt".format(batch_number), prompt)

    def write_response(self, batch_number: int, body: str) -> Optional[Path]:
        return self._write("batch_{}_response.json".format(batch_number), body)

    def write_subtitles(self, batch_number: int, subtitles: Sequence[Subtitle]) -> Optional[Path]:
        content = json.dumps([s.to_dict() for s in subtitles], ensure_ascii=False, indent=2)
        return self._write("batch_{}_subtitles.json".format(batch_number), content)

    def _write(self, filename: str, content: str) -> Optional[Path]:
        """Write one artifact; return its path, or None if skipped or failed."""
        if not self.enabled:
            return None
        path = self.directory / filename
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as exc:
            logger.warning("Failed to save debug file %s: %s", path, exc)
            return None
        logger.debug("Saved debug file %s", path)
        return path
