"""Reshaping request construction and response decoding.

WHY: The reshaping service is a general text model. It has to be told
exactly what to do with the words (regroup, fix punctuation, never add or
drop words) and what shape to answer in. Its answer is free text that
usually, but not always, is a clean JSON array, so decoding must be
tolerant of Markdown fences and strict about everything else.

HOW: build_batch_prompt() renders the instruction text plus the batch's
words as JSON. build_request_body() wraps it in the generateContent
payload. On the way back, parse_batch_response() unwraps the envelope,
clean_json_content() strips fences, and decode_candidates() returns a
tagged result: DecodedBatch or DecodeFailure. The candidate array is
validated with jsonschema before any value is trusted.

RULES:
- Each output element: st_id, st_ms, lw_ms, text (incomplete optional)
- st_id values are global ids and must lie inside the batch
- st_id values must be non-decreasing
- Any shape problem rejects the whole batch (ResponseFormatError)
- Continuation batches state their global start index in the prompt
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from jsonschema import Draft7Validator
from jsonschema.exceptions import best_match

from autosub_replace.api.models import GenerateContentResponse
from autosub_replace.core.ir import Batch, CandidateSubtitle

TRANSCRIPT_MARKER = "TRANSCRIPT DATA:"

CANDIDATE_ARRAY_SCHEMA: Dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["st_id", "st_ms", "text"],
        "properties": {
            "st_id": {"type": "integer", "minimum": 0},
            "st_ms": {"type": "integer", "minimum": 0},
            "lw_ms": {"type": "integer", "minimum": 0},
            "text": {"type": "string"},
            "incomplete": {"type": "boolean"},
        },
    },
}

_VALIDATOR = Draft7Validator(CANDIDATE_ARRAY_SCHEMA)

# Only the parts of the envelope we read; unknown keys are allowed.
ENVELOPE_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "candidates": {
            "type": ["array", "null"],
            "items": {
                "type": "object",
                "properties": {
                    "finishReason": {"type": ["string", "null"]},
                    "content": {
                        "type": ["object", "null"],
                        "properties": {
                            "parts": {
                                "type": ["array", "null"],
                                "items": {
                                    "type": "object",
                                    "properties": {"text": {"type": ["string", "null"]}},
                                },
                            },
                        },
                    },
                },
            },
        },
    },
}

_ENVELOPE_VALIDATOR = Draft7Validator(ENVELOPE_SCHEMA)

_PROMPT_TEMPLATE = """Convert these word-level transcript timings into subtitle blocks.
Language: {language}
Format: JSON array where each element has:
st_id (id of the first word in the subtitle), st_ms (start time of that word in milliseconds),
lw_ms (start time of the last word in milliseconds), and text (subtitle text).

REQUIREMENTS:
1. General formatting:
   - Combine fragments into complete, grammatical sentences
   - DO fix spelling, spacing, punctuation and capitalization
   - DO NOT add or remove any words
   - DO NOT translate the content
   - Natural sentence length is 10-20 words
   - Avoid sentences longer than 30 words

2. Subtitle structure:
   - Each subtitle should be one complete, natural thought or sentence
   - Each subtitle should end at a natural pause or break point
   - Keep related phrases together in the same subtitle
   - st_ms must equal the start_ms of the subtitle's first word exactly
   - lw_ms must equal the start_ms of the subtitle's last word exactly

3. Special handling:
   - Look for natural sentence boundaries; DO NOT split mid-sentence
   - Paired numeric readings (e.g. minimum and maximum temperature) stay in one block
   - Enumerated lists (provinces, names, items) stay in one block; do not split them
{continuation}
RETURN FORMAT:
Return ONLY a JSON array with exactly this shape:
[{{"st_id": 0, "st_ms": 123, "lw_ms": 456, "text": "Subtitle text here"}}, ...]

{marker}
"""

_CONTINUATION_TEXT = """
IMPORTANT: This is a continuation of a previous batch.
The first words may belong to a sentence that started earlier.
Use the "id" field of each word as its absolute index in the transcript;
st_id values in your answer must reference these absolute ids.
If the first words continue a sentence from the previous batch, start with them.
DO NOT repeat sentence beginnings from previous batches; continue them instead.
"""


class ResponseFormatError(Exception):
    """Raised when a service response cannot be decoded into candidates.

    RULES:
    - raw_text holds the offending text (envelope or candidate text)
    """

    def __init__(self, message: str, raw_text: str = "") -> None:
        self.raw_text = raw_text
        super().__init__(message)


@dataclass
class DecodedBatch:
    candidates: List[CandidateSubtitle] = field(default_factory=list)


@dataclass
class DecodeFailure:
    reason: str
    raw_text: str


DecodeResult = Union[DecodedBatch, DecodeFailure]


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------


def build_batch_prompt(batch: Batch, language: str) -> str:
    """Render the reshaping instructions followed by the batch's words.

    RULES:
    - Continuation batches get the continuation block and a global
      start index note right after the TRANSCRIPT DATA marker
    - Words are serialized as an indented JSON array of {id, word, start_ms}
    """
    marker = TRANSCRIPT_MARKER
    if batch.is_continuation:
        marker += "\nIMPORTANT: These words start at global index {} in the full transcript.\n".format(
            batch.start_index
        )

    prompt = _PROMPT_TEMPLATE.format(
        language=language,
        continuation=_CONTINUATION_TEXT if batch.is_continuation else "",
        marker=marker,
    )
    words_json = json.dumps(
        [w.to_dict() for w in batch.words],
        ensure_ascii=False,
        indent=2,
    )
    return prompt + words_json


def build_request_body(prompt: str, temperature: float, max_output_tokens: int) -> Dict[str, Any]:
    return {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": temperature,
            "maxOutputTokens": max_output_tokens,
        },
    }


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------


def clean_json_content(text: str) -> str:
    """Strip surrounding Markdown code fences from model output.

    HOW: After trimming, a leading ```json or ``` is removed together
    with everything from the last ``` onwards.
    """
    text = text.strip()
    for fence in ("```json", "```"):
        if text.startswith(fence):
            text = text[len(fence):]
            closing = text.rfind("```")
            if closing != -1:
                text = text[:closing]
            break
    return text.strip()


def decode_candidates(text: str, batch: Optional[Batch] = None) -> DecodeResult:
    """Decode model output text into candidate subtitles.

    Args:
        text: The model's text answer, fenced or not.
        batch: When given, st_id values must fall inside it.

    Returns:
        DecodedBatch on success, DecodeFailure (with the raw text) otherwise.
    """
    cleaned = clean_json_content(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        return DecodeFailure("response is not valid JSON: {}".format(exc), text)

    error = best_match(_VALIDATOR.iter_errors(data))
    if error is not None:
        location = "/".join(str(p) for p in error.absolute_path) or "<root>"
        return DecodeFailure(
            "unexpected response shape at {}: {}".format(location, error.message),
            text,
        )

    candidates = [CandidateSubtitle.from_dict(item) for item in data]

    previous_id = -1
    for i, candidate in enumerate(candidates):
        if batch is not None and not (
            batch.start_index <= candidate.start_word_id < batch.end_index
        ):
            return DecodeFailure(
                "st_id {} at position {} is outside batch range [{}, {})".format(
                    candidate.start_word_id, i, batch.start_index, batch.end_index
                ),
                text,
            )
        if candidate.start_word_id < previous_id:
            return DecodeFailure(
                "st_id {} at position {} is lower than preceding st_id {}".format(
                    candidate.start_word_id, i, previous_id
                ),
                text,
            )
        previous_id = candidate.start_word_id

    return DecodedBatch(candidates=candidates)
def _finish_note(response: GenerateContentResponse) -> str:
    """Suffix naming an abnormal finishReason, e.g. a MAX_TOKENS cut-off."""
    reason = response.first_finish_reason()
    if reason is None or reason == "STOP":
        return ""
    return " (finishReason: {})".format(reason)


def parse_batch_response(body: str, batch: Optional[Batch] = None) -> List[CandidateSubtitle]:
    """Decode a raw generateContent response body into candidates.

    Raises:
        ResponseFormatError: envelope is not JSON, has the wrong shape,
            carries no content, or its text does not decode into a valid
            candidate array.
    """
    try:
        envelope = json.loads(body)
    except json.JSONDecodeError as exc:
        raise ResponseFormatError(
            "error parsing API response: {}".format(exc), body
        ) from exc

    if not isinstance(envelope, dict):
        raise ResponseFormatError("API response is not a JSON object", body)

    error = best_match(_ENVELOPE_VALIDATOR.iter_errors(envelope))
    if error is not None:
        location = "/".join(str(p) for p in error.absolute_path) or "<root>"
        raise ResponseFormatError(
            "unexpected API response shape at {}: {}".format(location, error.message),
            body,
        )

    response = GenerateContentResponse.from_dict(envelope)
    text = response.first_text()
    if not text:
        raise ResponseFormatError(
            "no content in the API response{}".format(_finish_note(response)), body
        )

    result = decode_candidates(text, batch)
    if isinstance(result, DecodeFailure):
        raise ResponseFormatError(
            "failed to parse subtitle JSON: {}{}".format(result.reason, _finish_note(response)),
            result.raw_text,
        )
    return result.candidates
