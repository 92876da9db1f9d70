"""Command-line interface for the auto-subtitle replacer.

WHY: The typical workflow is "I have a .srv3 file from yt-dlp, give me a
readable .srt next to it". The CLI wires together config loading,
extraction, the batched Gemini pipeline, formatting and saving behind a
single command.

HOW: argparse accepts the input file and overrides for config values.
Config is loaded once (.env + environment) and passed down. The async
pipeline runs via asyncio.run(). Status messages go to stderr. The output
file is only written after every batch succeeded.

RULES:
- Positional argument: input .srv3 file path
- Default output: input path with the formatter's suffix (.srt / .json)
- --debug / --debug-dir override DEBUG_MODE / DEBUG_DIR
- --model / --language override GEMINI_MODEL / SUBTITLE_LANGUAGE
- Any error: one "Error: ..." line on stderr, exit status 1
- Ctrl-C: exit status 130, nothing written
"""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import logging
import sys
from pathlib import Path
from typing import List, Optional, Tuple

import httpx

from autosub_replace.api.client import GeminiClient
from autosub_replace.config import (
    DEFAULT_ENV_FILE,
    SUPPORTED_INPUT_SUFFIX,
    Config,
    ConfigError,
)
from autosub_replace.core.extractor import (
    ExtractionError,
    extract_word_timings,
    load_timed_text,
)
from autosub_replace.debug import DebugWriter
from autosub_replace.formatters import FORMATTERS
from autosub_replace.pipeline import BatchProcessingError, create_subtitles


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout stays pipeable."""
    print(msg, file=sys.stderr, flush=True)


def _apply_overrides(config: Config, args: argparse.Namespace) -> Config:
    """Return config with any CLI flag values applied."""
    changes = {}
    if args.model:
        changes["model"] = args.model
    if args.language:
        changes["language"] = args.language
    if args.debug:
        changes["debug_mode"] = True
    if args.debug_dir:
        changes["debug_dir"] = args.debug_dir
    return dataclasses.replace(config, **changes) if changes else config


def resolve_output_path(input_path: Path, output: Optional[str], suffix: str) -> Path:
    """Pick the output path: explicit -o, else the input with a new suffix."""
    if output:
        return Path(output)
    return input_path.with_suffix(suffix)


async def convert(
    config: Config,
    input_path: Path,
    output_path: Path,
    format_key: str = "srt",
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Tuple[int, int]:
    """Run the full conversion for one file.

    WHY: Kept separate from argument parsing so tests can drive a whole
    conversion against a mocked service.

    HOW: Extract word timings, run the batch pipeline inside a
    GeminiClient context, format the track, then write it.

    RULES:
    - Extraction errors surface before any service call
    - The output file is written only after the whole track is built

    Returns:
        (number of input words, number of subtitle blocks written)
    """
    words = extract_word_timings(load_timed_text(input_path))
    _status("  Extracted {} words".format(len(words)))

    debug = DebugWriter(config.debug_dir, enabled=config.debug_mode)

    async with GeminiClient(config, transport=transport) as client:
        track = await create_subtitles(
            words,
            client,
            language=config.language,
            debug=debug,
            on_status=_status,
        )

    output = FORMATTERS[format_key]().format(track)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(output.content, encoding="utf-8")

    return len(words), len(track)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="autosub-replace",
        description="Rebuild YouTube auto-generated srv3 subtitles into readable, "
                    "sentence-level SRT using the Gemini API.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the .srv3 subtitle file.",
    )

    parser.add_argument(
        "-o", "--output",
        default=None,
        help="Output file path (default: input path with .srt/.json extension).",
    )

    parser.add_argument(
        "--format",
        dest="format_key",
        choices=sorted(FORMATTERS.keys()),
        default="srt",
        help="Output format (default: %(default)s).",
    )

    parser.add_argument(
        "--env",
        default=DEFAULT_ENV_FILE,
        help="Environment file path (default: %(default)s).",
    )

    parser.add_argument(
        "--model",
        default=None,
        help="Gemini model identifier (overrides GEMINI_MODEL).",
    )

    parser.add_argument(
        "--language",
        default=None,
        help="Language description used in the prompt (overrides SUBTITLE_LANGUAGE).",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Save per-batch prompts, responses and subtitles.",
    )

    parser.add_argument(
        "--debug-dir",
        default=None,
        help="Directory for debug files (overrides DEBUG_DIR, default: debug).",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``autosub-replace`` and ``python -m autosub_replace``.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    input_path = Path(args.input_file)
    if input_path.suffix.lower() != SUPPORTED_INPUT_SUFFIX:
        print("Error: input file must have {} extension".format(SUPPORTED_INPUT_SUFFIX), file=sys.stderr)
        sys.exit(1)
    if not input_path.is_file():
        print("Error: File not found: {}".format(input_path), file=sys.stderr)
        sys.exit(1)

    output_path = resolve_output_path(
        input_path, args.output, FORMATTERS[args.format_key].suffix
    )

    try:
        config = _apply_overrides(Config.load(args.env), args)
    except ConfigError as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    _status("Converting {} to {}".format(input_path, output_path))

    try:
        word_count, block_count = asyncio.run(
            convert(config, input_path, output_path, args.format_key)
        )
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        sys.exit(130)
    except (ExtractionError, BatchProcessingError, OSError) as e:
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)

    _status("Successfully processed {} words into {} subtitle blocks".format(
        word_count, block_count
    ))
    _status("Saved: {}".format(output_path))


if __name__ == "__main__":
    main()
