"""Unit tests for batch slicing and continuation.

WHY: The continuation rule decides which words each request sees and
which candidates survive. An off-by-one here silently drops or
duplicates sentences at every batch seam.

HOW: Tests call plan_batch/settle_batch directly with synthetic words
and hand-built candidates, then walk a full plan to check coverage.
"""

from autosub_replace.core.ir import CandidateSubtitle
from autosub_replace.core.planner import MAX_BATCH_SIZE, plan_batch, settle_batch

from tests.conftest import make_words


def _cand(st_id, st_ms=None, text="x"):
    return CandidateSubtitle(
        start_word_id=st_id,
        start_ms=st_id * 300 if st_ms is None else st_ms,
        last_word_ms=0,
        text=text,
    )


class TestPlanBatch:

    def test_first_batch_is_full_size(self):
        batch = plan_batch(make_words(310), 0, 1)
        assert (batch.start_index, batch.end_index) == (0, MAX_BATCH_SIZE)
        assert batch.size == 300
        assert not batch.is_continuation

    def test_batch_is_clamped_to_sequence_end(self):
        batch = plan_batch(make_words(310), 295, 2)
        assert (batch.start_index, batch.end_index) == (295, 310)
        assert batch.size == 15
        assert batch.is_continuation
        assert [w.id for w in batch.words] == list(range(295, 310))

    def test_number_is_carried(self):
        assert plan_batch(make_words(5), 0, 7).number == 7


class TestSettleBatch:

    def test_continues_from_last_declared_start(self):
        words = make_words(310)
        batch = plan_batch(words, 0, 1)
        outcome = settle_batch(batch, [_cand(0), _cand(100), _cand(295)], len(words))
        assert outcome.next_index == 295
        assert [c.start_word_id for c in outcome.candidates] == [0, 100]
        assert not outcome.is_final

    def test_short_batch_is_final_and_keeps_everything(self):
        words = make_words(310)
        batch = plan_batch(words, 295, 2)
        outcome = settle_batch(batch, [_cand(295), _cand(305)], len(words))
        assert outcome.is_final
        assert [c.start_word_id for c in outcome.candidates] == [295, 305]

    def test_no_candidates_advances_by_full_batch(self):
        words = make_words(700)
        batch = plan_batch(words, 0, 1)
        outcome = settle_batch(batch, [], len(words))
        assert outcome.next_index == 300
        assert outcome.candidates == []

    def test_no_candidates_on_last_full_batch_finishes(self):
        words = make_words(300)
        outcome = settle_batch(plan_batch(words, 0, 1), [], len(words))
        assert outcome.is_final

    def test_stop_that_does_not_advance_falls_back_to_full_batch(self):
        words = make_words(700)
        batch = plan_batch(words, 300, 2)
        outcome = settle_batch(batch, [_cand(300)], len(words))
        assert outcome.next_index == 600
        assert [c.start_word_id for c in outcome.candidates] == [300]

    def test_exact_multiple_still_continues_from_declared_start(self):
        words = make_words(300)
        outcome = settle_batch(plan_batch(words, 0, 1), [_cand(0), _cand(290)], len(words))
        assert outcome.next_index == 290
        assert [c.start_word_id for c in outcome.candidates] == [0]


class TestCoverage:

    def _walk(self, total, sentence_len):
        """Run plan/settle to completion with fixed-size sentences."""
        words = make_words(total)
        consumed = []
        start, number = 0, 1
        while start is not None:
            batch = plan_batch(words, start, number)
            candidates = [_cand(i) for i in range(batch.start_index, batch.end_index, sentence_len)]
            outcome = settle_batch(batch, candidates, len(words))
            starts = [c.start_word_id for c in outcome.candidates]
            ends = starts[1:] + [outcome.next_index if outcome.next_index is not None else batch.end_index]
            for s, e in zip(starts, ends):
                consumed.extend(range(s, e))
            start, number = outcome.next_index, number + 1
        return consumed

    def test_every_word_is_consumed_once_in_order(self):
        assert self._walk(1000, 7) == list(range(1000))

    def test_coverage_with_sequence_of_exact_batch_size(self):
        assert self._walk(600, 11) == list(range(600))

    def test_coverage_with_tiny_input(self):
        assert self._walk(3, 2) == list(range(3))
