"""Gemini reshaping service package — request protocol and HTTP client.

WHY: Word timings have to be regrouped into sentences by a remote text
model. This package owns everything about talking to it: the prompt,
the request payload, the HTTP call, and decoding the answer.

HOW: protocol.py builds prompts and decodes answers, models.py maps the
response envelope, client.py performs the async HTTP call with httpx.

RULES:
- All HTTP calls go through GeminiClient (no direct httpx usage elsewhere)
- Decoding never trusts a partially valid answer
"""

from autosub_replace.api.client import GeminiClient, ServiceError
from autosub_replace.api.protocol import ResponseFormatError, parse_batch_response

__all__ = ["GeminiClient", "ResponseFormatError", "ServiceError", "parse_batch_response"]
