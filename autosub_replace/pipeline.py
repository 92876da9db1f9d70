"""Batch loop: word timings → reshaped, reconciled subtitle track.

WHY: The core modules are pure and the client only knows HTTP. Something
has to drive them in the right order, thread the continuation index from
one batch to the next, dump debug artifacts, and say which batch failed
when something goes wrong.

HOW: create_subtitles() runs plan_batch → build_batch_prompt →
client.generate_content → parse_batch_response → settle_batch →
reconcile_batch for each batch in turn, then assemble_track() over all
batch results. The start index comes back from settle_batch() and is
passed into the next plan_batch() call.

RULES:
- Strictly sequential; the next batch depends on the previous answer
- ServiceError / ResponseFormatError abort the run, wrapped in
  BatchProcessingError with the batch number and stage
- Debug dumps happen before decoding so broken answers are preserved
- No partial result is returned on failure
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import List, Optional, Sequence

from autosub_replace.api.client import GeminiClient, ServiceError
from autosub_replace.api.protocol import (
    ResponseFormatError,
    build_batch_prompt,
    parse_batch_response,
)
from autosub_replace.config import DEFAULT_LANGUAGE
from autosub_replace.core.assembler import assemble_track
from autosub_replace.core.extractor import ExtractionError
from autosub_replace.core.ir import Subtitle, WordTiming
from autosub_replace.core.planner import MAX_BATCH_SIZE, plan_batch, settle_batch
from autosub_replace.core.reconciler import reconcile_batch
from autosub_replace.debug import DebugWriter

logger = logging.getLogger(__name__)


class BatchProcessingError(Exception):
    """Raised when one batch fails; the cause is chained.

    RULES:
    - batch_number is 1-based
    - stage is "request" (service call) or "response" (decoding)
    """

    def __init__(self, batch_number: int, stage: str, cause: Exception) -> None:
        self.batch_number = batch_number
        self.stage = stage
        super().__init__("batch {} failed during {}: {}".format(batch_number, stage, cause))


async def create_subtitles(
    words: Sequence[WordTiming],
    client: GeminiClient,
    *,
    language: str = DEFAULT_LANGUAGE,
    max_batch_size: int = MAX_BATCH_SIZE,
    debug: Optional[DebugWriter] = None,
    on_status: Optional[Callable[[str], None]] = None,
) -> List[Subtitle]:
    """Reshape all words into a finished subtitle track.

    Args:
        words: Full WordTiming sequence from the extractor.
        client: An entered GeminiClient (or anything with the same
            async generate_content(prompt) -> str method).
        language: Target language description for the prompt.
        max_batch_size: Words per request.
        debug: Optional writer for per-batch artifacts.
        on_status: Optional callback for progress messages.

    Returns:
        The assembled track, ordered and overlap-corrected.

    Raises:
        ExtractionError: if words is empty (no call is made).
        BatchProcessingError: if any batch fails.
    """
    if not words:
        raise ExtractionError("no word timings extracted")

    batch_results: List[List[Subtitle]] = []
    start_index: Optional[int] = 0
    number = 1

    while start_index is not None:
        batch = plan_batch(words, start_index, number, max_batch_size)
        if on_status:
            on_status("Processing batch {}: words {} to {} (total: {})".format(
                number, batch.start_index, batch.end_index - 1, batch.size
            ))

        prompt = build_batch_prompt(batch, language)
        if debug:
            debug.write_prompt(number, prompt)

        try:
            body = await client.generate_content(prompt)
        except ServiceError as exc:
            if debug:
                debug.write_response(number, exc.body)
            raise BatchProcessingError(number, "request", exc) from exc

        if debug:
            debug.write_response(number, body)

        try:
            candidates = parse_batch_response(body, batch)
        except ResponseFormatError as exc:
            raise BatchProcessingError(number, "response", exc) from exc

        outcome = settle_batch(batch, candidates, len(words), max_batch_size)
        subtitles = reconcile_batch(outcome.candidates)
        batch_results.append(subtitles)

        if debug:
            debug.write_subtitles(number, subtitles)
        logger.debug(
            "Batch %d: %d words -> %d subtitles (next start: %s)",
            number, batch.size, len(subtitles), outcome.next_index,
        )

        start_index = outcome.next_index
        number += 1

    return assemble_track(batch_results)
