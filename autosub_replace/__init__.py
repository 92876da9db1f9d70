"""YouTube auto-subtitle replacer — srv3 word timings to readable SRT.

WHY: YouTube's auto-generated captions arrive as srv3 XML with one
fragment per word and no punctuation. They are unreadable as subtitles.
This package regroups the words into sentences with an LLM (Gemini) and
rebuilds subtitle timing from the original per-word timestamps.

HOW: Four-stage pipeline — extract (srv3 → word timings), reshape
(batched Gemini calls), reconcile (per-batch timing), assemble (global
overlap pass). Output goes through pluggable formatters (SRT, JSON).

RULES:
- Batches run strictly in order; each starts where the previous stopped
- Word timings are the single source of timing truth
- A failed run never writes a partial output file
"""

__version__ = "0.1.0"
