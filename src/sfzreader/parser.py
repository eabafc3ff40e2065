# Copyright (c) 2025 bakajikara
#
# This file is licensed under the MIT License (MIT).
# See the LICENSE file in the project root for the full license text.

"""
Line-level parsing of SFZ text.

Provides the building blocks used by the loader:
- iter_lines: trimmed, non-blank, non-comment lines
- classify_directive: <group> / <region> / ignored
- split_sample, tokenize_opcodes: opcode extraction
- parse_int, parse_float, parse_midi_value: numeric values with explicit defaulting
"""

import re
from enum import Enum
from typing import Iterator, NamedTuple

from .constants import (
    COMMENT_MARKER,
    GROUP_TAG,
    MAX_MIDI_VALUE,
    MIN_MIDI_VALUE,
    REGION_TAG,
    SAMPLE_OPCODE,
)

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FLOAT_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")

# "sample=" at the start of a token
_SAMPLE_RE = re.compile(r"(?:^|(?<=\s))" + SAMPLE_OPCODE + "=")
# the next whitespace-separated "name=" opcode after a sample path
_NEXT_OPCODE_RE = re.compile(r"\s+[A-Za-z_][A-Za-z0-9_]*=")


class Directive(Enum):
    GROUP = "group"
    REGION = "region"
    IGNORED = "ignored"


class ParsedNumber(NamedTuple):
    """
    Result of a numeric opcode parse.

    `defaulted` is True when the text was not a valid number and `value`
    holds the fallback instead.
    """
    value: int | float
    defaulted: bool = False


def iter_lines(text: str) -> Iterator[str]:
    """
    Yields the meaningful lines of an SFZ file, top to bottom.

    Lines are stripped of surrounding whitespace; blank lines and lines
    starting with the comment marker are dropped.
    """
    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith(COMMENT_MARKER):
            continue
        yield trimmed


def classify_directive(line: str) -> tuple[Directive, str]:
    """
    Determines which directive a line opens.

    Args:
        line: A trimmed line from iter_lines.

    Returns:
        A tuple of the Directive and the text following the tag
        (the whole line for ignored lines).
    """
    if line.startswith(GROUP_TAG):
        return Directive.GROUP, line[len(GROUP_TAG):]
    if line.startswith(REGION_TAG):
        return Directive.REGION, line[len(REGION_TAG):]
    return Directive.IGNORED, line


def split_sample(text: str) -> tuple[str, str | None]:
    """
    Separates the sample path from the other opcodes of a directive.

    Sample paths may contain spaces, so the value is taken from the literal
    "sample=" up to the end of the line, stopping only before a following
    whitespace-separated opcode.

    Args:
        text: Directive text after the tag.

    Returns:
        A tuple of (remaining opcode text, sample path or None if absent).
    """
    match = _SAMPLE_RE.search(text)
    if match is None:
        return text, None

    tail = text[match.end():]
    next_opcode = _NEXT_OPCODE_RE.search(tail)
    if next_opcode is None:
        sample, rest = tail, ""
    else:
        sample, rest = tail[:next_opcode.start()], tail[next_opcode.start():]

    return text[:match.start()] + rest, sample.strip()


def tokenize_opcodes(text: str) -> Iterator[tuple[str, str]]:
    """
    Splits opcode text into (key, value) pairs.

    Each whitespace-separated token is split once on "="; tokens without
    "=" are skipped.
    """
    for token in text.split():
        key, sep, value = token.partition("=")
        if not sep or not key:
            continue
        yield key, value


def parse_int(text: str, default: int = 0) -> ParsedNumber:
    if _INT_RE.fullmatch(text):
        return ParsedNumber(int(text))
    return ParsedNumber(default, defaulted=True)


def parse_float(text: str, default: float = 0.0) -> ParsedNumber:
    if _FLOAT_RE.fullmatch(text):
        return ParsedNumber(float(text))
    return ParsedNumber(default, defaulted=True)


def parse_midi_value(text: str, default: int = 0) -> ParsedNumber:
    """
    Parses a note number or velocity; values outside 0-127 are defaulted.
    """
    parsed = parse_int(text, default)
    if parsed.defaulted or not MIN_MIDI_VALUE <= parsed.value <= MAX_MIDI_VALUE:
        return ParsedNumber(default, defaulted=True)
    return parsed
