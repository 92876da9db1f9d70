"""srv3 timed-text parsing and word timing extraction.

WHY: YouTube's srv3 auto-captions store each recognized word as an
``<s>`` fragment inside a ``<p>`` paragraph, with times split between a
paragraph offset and a fragment offset. The rest of the pipeline needs a
flat, globally indexed list of words with absolute start times.

HOW: load_timed_text() reads the file, parse_timed_text() strips an
optional editor ``// filepath:`` header and parses the XML with
ElementTree. extract_word_timings() walks body/p/s in document order,
adds the two offsets, and numbers the retained fragments from 0.

RULES:
- Root element must be <timedtext>; otherwise ExtractionError
- Paragraphs without <s> fragments are skipped
- Fragments with blank text are skipped and do not consume an id
- Non-numeric offsets count as 0 (a single bad attribute never aborts)
- An empty result raises ExtractionError
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List, Optional, Union

from autosub_replace.core.ir import WordTiming

logger = logging.getLogger(__name__)

_FILEPATH_MARKER = b"// filepath:"


class ExtractionError(Exception):
    """Raised when the srv3 document is malformed or holds no words."""


def load_timed_text(path: Union[str, Path]) -> ET.Element:
    """Read an srv3 file and return its parsed root element.

    The raw bytes go to the XML parser, which honours the encoding named
    in the XML declaration. Filesystem errors propagate as OSError; XML
    and encoding problems raise ExtractionError.
    """
    return parse_timed_text(Path(path).read_bytes())


def parse_timed_text(content: Union[str, bytes]) -> ET.Element:
    """Parse srv3 XML into its <timedtext> root element.

    WHY: Files saved from some editors carry a ``// filepath: ...`` line
    above the XML declaration, which is not valid XML.

    HOW: Drop everything up to and including the first line containing
    the marker, then parse.

    RULES:
    - Only the first marker line is considered
    - Raises ExtractionError on XML syntax errors, undecodable bytes
      or a foreign root
    """
    if isinstance(content, str):
        content = content.encode("utf-8")

    lines = content.split(b"\n")
    for i, line in enumerate(lines):
        if _FILEPATH_MARKER in line:
            content = b"\n".join(lines[i + 1:])
            break

    try:
        root = ET.fromstring(content.strip())
    except (ET.ParseError, LookupError) as exc:
        raise ExtractionError("error parsing XML: {}".format(exc)) from exc

    if root.tag != "timedtext":
        raise ExtractionError(
            "expected <timedtext> root element, found <{}>".format(root.tag)
        )
    return root


def _offset(value: Optional[str]) -> int:
    """Parse a millisecond offset attribute, treating bad values as 0."""
    if value is None:
        return 0
    try:
        return int(value)
    except ValueError:
        logger.debug("Non-numeric time offset %r treated as 0", value)
        return 0


def extract_word_timings(root: ET.Element) -> List[WordTiming]:
    """Flatten an srv3 document into globally indexed word timings.

    Args:
        root: The <timedtext> element from parse_timed_text().

    Returns:
        WordTiming list with ids 0..N-1 in document order.

    Raises:
        ExtractionError: if no non-blank fragment exists.
    """
    words: List[WordTiming] = []
    body = root.find("body")
    paragraphs = body.findall("p") if body is not None else []

    for paragraph in paragraphs:
        fragments = paragraph.findall("s")
        if not fragments:
            continue

        paragraph_ms = _offset(paragraph.get("t"))

        for fragment in fragments:
            text = "".join(fragment.itertext()).strip()
            if not text:
                continue
            words.append(WordTiming(
                id=len(words),
                word=text,
                start_ms=paragraph_ms + _offset(fragment.get("t")),
            ))

    if not words:
        raise ExtractionError("no word timings extracted")

    logger.debug("Extracted %d word timings from %d paragraphs", len(words), len(paragraphs))
    return words
