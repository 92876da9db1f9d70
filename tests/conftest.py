"""Shared test fixtures for the autosub_replace test suite.

WHY: Most test modules need the same small srv3 document, synthetic
word sequences, and a stand-in for the reshaping service that answers
with canned or computed responses.

HOW: Module-level helpers build Gemini response bodies and word lists.
FakeReshaper mimics GeminiClient.generate_content() and records every
prompt it receives. Fixtures wrap these for pytest.

RULES:
- No test talks to the real Gemini API
- The sample srv3 mirrors the structure of real YouTube auto-captions
"""

import json
from typing import Any, Callable, Dict, List, Sequence, Union

import pytest

from autosub_replace.config import Config
from autosub_replace.core.ir import WordTiming

# ---------------------------------------------------------------------------
# Sample srv3 document
# ---------------------------------------------------------------------------

SAMPLE_SRV3 = """<?xml version="1.0" encoding="utf-8" ?><timedtext format="3">
<head>
<ws id="0"/>
<wp id="0"/>
</head>
<body>
<w t="0" id="1" wp="0" ws="0"/>
<p t="1000" d="2000" w="1"><s ac="0">สวัสดี</s><s t="400" ac="0"> ครับ</s></p>
<p t="3000" d="10" w="1" a="1">
</p>
<p t="3010" d="2000" w="1"><s ac="0">วันนี้</s><s t="500" ac="0"> </s><s t="900" ac="0"> อากาศ</s></p>
</body>
</timedtext>
"""

# (id, word, start_ms) expected from SAMPLE_SRV3
SAMPLE_WORDS = [
    (0, "สวัสดี", 1000),
    (1, "ครับ", 1400),
    (2, "วันนี้", 3010),
    (3, "อากาศ", 3910),
]

EMPTY_SRV3 = """<?xml version="1.0" encoding="utf-8" ?><timedtext format="3">
<body>
<p t="0" d="10" a="1">
</p>
</body>
</timedtext>
"""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def gemini_body(candidates: Union[List[Dict[str, Any]], str], fenced: bool = False) -> str:
    """Wrap candidate dicts (or raw text) in a generateContent response body."""
    text = candidates if isinstance(candidates, str) else json.dumps(candidates, ensure_ascii=False)
    if fenced:
        text = "```json\n" + text + "\n```"
    return json.dumps({"candidates": [{"content": {"parts": [{"text": text}]}}]})


def make_words(count: int, step_ms: int = 300) -> List[WordTiming]:
    """Synthetic word sequence: w0, w1, ... starting every step_ms."""
    return [WordTiming(id=i, word="w{}".format(i), start_ms=i * step_ms) for i in range(count)]


def words_from_prompt(prompt: str) -> List[Dict[str, Any]]:
    """Recover the word dicts that a prompt carries after its marker."""
    tail = prompt[prompt.rindex("TRANSCRIPT DATA:"):]
    return json.loads(tail[tail.index("["):])


def sentence_responder(words_per_sentence: int) -> Callable[[str], str]:
    """Answer each prompt by grouping its words into fixed-size sentences."""

    def respond(prompt: str) -> str:
        words = words_from_prompt(prompt)
        candidates = []
        for i in range(0, len(words), words_per_sentence):
            chunk = words[i:i + words_per_sentence]
            candidates.append({
                "st_id": chunk[0]["id"],
                "st_ms": chunk[0]["start_ms"],
                "lw_ms": chunk[-1]["start_ms"],
                "text": " ".join(w["word"] for w in chunk),
            })
        return gemini_body(candidates)

    return respond


class FakeReshaper:
    """Stand-in for GeminiClient that replays canned answers.

    Each entry in ``responses`` is a response body string, an exception
    to raise, or a callable taking the prompt and returning a body.
    A single callable answers every call.
    """

    def __init__(self, responses: Union[Sequence[Any], Callable[[str], str]]) -> None:
        self._responder = responses if callable(responses) else None
        self._queue = [] if callable(responses) else list(responses)
        self.prompts: List[str] = []

    async def generate_content(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self._responder is not None:
            return self._responder(prompt)
        answer = self._queue.pop(0)
        if isinstance(answer, Exception):
            raise answer
        if callable(answer):
            return answer(prompt)
        return answer


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def config():
    return Config(api_key="test-key")


@pytest.fixture
def sample_srv3_path(tmp_path):
    path = tmp_path / "sample.srv3"
    path.write_text(SAMPLE_SRV3, encoding="utf-8")
    return path


@pytest.fixture
def sample_candidates():
    """A valid two-sentence answer for SAMPLE_SRV3."""
    return [
        {"st_id": 0, "st_ms": 1000, "lw_ms": 1400, "text": "สวัสดีครับ"},
        {"st_id": 2, "st_ms": 3010, "lw_ms": 3910, "text": "วันนี้อากาศ"},
    ]
