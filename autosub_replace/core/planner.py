"""Batch planning and continuation across batch boundaries.

WHY: A transcript can hold thousands of words, far more than one
reshaping request should carry. Cutting at a fixed word count would
split sentences, so the service itself declares where the next batch
should begin: the start of its last (possibly unfinished) sentence.

HOW: plan_batch() slices up to max_batch_size words starting at the
current index. After the service answers, settle_batch() decides which
candidates the batch contributes and returns the next start index. The
caller threads that index into the next plan_batch() call.

RULES:
- Batches are [i, min(i + max_batch_size, N))
- Next start = st_id of the last candidate, NOT i + max_batch_size
- The last candidate of a continued batch is withheld; the next batch
  re-sends its words, so every word is consumed exactly once
- No candidates → advance by the full batch size
- A declared stop that does not move forward → advance by the full size
- A batch shorter than max_batch_size is the final batch
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from autosub_replace.core.ir import Batch, CandidateSubtitle, WordTiming

MAX_BATCH_SIZE = 300


@dataclass
class BatchOutcome:
    """What a processed batch contributes and where the next one starts.

    RULES:
    - candidates: the entries to reconcile for this batch, in order
    - next_index: global start of the next batch, or None when done
    """

    candidates: List[CandidateSubtitle] = field(default_factory=list)
    next_index: Optional[int] = None

    @property
    def is_final(self) -> bool:
        return self.next_index is None


def plan_batch(
    words: Sequence[WordTiming],
    start_index: int,
    number: int,
    max_batch_size: int = MAX_BATCH_SIZE,
) -> Batch:
    """Slice the batch that starts at start_index."""
    end_index = min(start_index + max_batch_size, len(words))
    return Batch(
        number=number,
        start_index=start_index,
        end_index=end_index,
        words=list(words[start_index:end_index]),
    )


def settle_batch(
    batch: Batch,
    candidates: Sequence[CandidateSubtitle],
    total_words: int,
    max_batch_size: int = MAX_BATCH_SIZE,
) -> BatchOutcome:
    """Decide the batch's contribution and the next start index.

    Args:
        batch: The batch that was sent.
        candidates: Decoded service candidates for that batch, in order.
        total_words: Length of the full WordTiming sequence.
        max_batch_size: The size used by plan_batch().

    Returns:
        BatchOutcome with the emitted candidates and next start index.
    """
    if batch.size < max_batch_size:
        return BatchOutcome(candidates=list(candidates), next_index=None)

    if not candidates:
        emitted: List[CandidateSubtitle] = []
        next_index = batch.start_index + max_batch_size
    else:
        declared = candidates[-1].start_word_id
        if declared <= batch.start_index:
            emitted = list(candidates)
            next_index = batch.start_index + max_batch_size
        else:
            emitted = list(candidates[:-1])
            next_index = declared

    if next_index >= total_words:
        return BatchOutcome(candidates=emitted, next_index=None)
    return BatchOutcome(candidates=emitted, next_index=next_index)
