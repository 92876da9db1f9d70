"""Unit tests for the SRT and JSON formatters."""

import json

import pytest

from autosub_replace.core.ir import Subtitle
from autosub_replace.formatters import FORMATTERS
from autosub_replace.formatters.json_subtitles import JSONFormatter
from autosub_replace.formatters.srt import SRTFormatter, ms_to_srt_timestamp

TRACK = [
    Subtitle(start_ms=1000, end_ms=2900, text="สวัสดีครับ"),
    Subtitle(start_ms=3661045, end_ms=3662045, text="Second line."),
]


class TestTimestamp:

    @pytest.mark.parametrize("ms, expected", [
        (0, "00:00:00,000"),
        (3661045, "01:01:01,045"),
        (59_999, "00:00:59,999"),
        (36_000_000, "10:00:00,000"),
    ])
    def test_formatting(self, ms, expected):
        assert ms_to_srt_timestamp(ms) == expected

    def test_negative_is_rendered_as_zero(self):
        assert ms_to_srt_timestamp(-100) == "00:00:00,000"


class TestSRTFormatter:

    def test_blocks(self):
        output = SRTFormatter().format(TRACK)
        assert output.content == (
            "1\n00:00:01,000 --> 00:00:02,900\nสวัสดีครับ\n\n"
            "2\n01:01:01,045 --> 01:01:02,045\nSecond line.\n\n"
        )
        assert output.suffix == ".srt"
        assert output.media_type == "application/x-subrip"

    def test_empty_track(self):
        assert SRTFormatter().format([]).content == ""


class TestJSONFormatter:

    def test_content_round_trips_through_json(self):
        output = JSONFormatter().format(TRACK)
        assert json.loads(output.content) == [
            {"start_ms": 1000, "end_ms": 2900, "text": "สวัสดีครับ"},
            {"start_ms": 3661045, "end_ms": 3662045, "text": "Second line."},
        ]
        assert "สวัสดีครับ" in output.content
        assert output.suffix == ".json"


class TestRegistry:

    def test_registered_keys(self):
        assert set(FORMATTERS) == {"srt", "json"}

    def test_suffix_is_available_on_class(self):
        assert FORMATTERS["srt"].suffix == ".srt"
        assert FORMATTERS["json"].suffix == ".json"
