"""Parses SRT subtitle text into ordered, time-stamped entries."""

import logging
import os
import re
from typing import List, Optional

from .exceptions import EmptyTrack, FormattingError, MalformedEntry, MalformedTimecode
from .models import ParsedTrack, SubtitleEntry
from .timecode import parse_timecode

logger = logging.getLogger(__name__)

ARROW = "-->"

# One or more blank (or whitespace-only) lines separate blocks
_BLOCK_SEPARATOR_RE = re.compile(r"\n[ \t]*\n(?:[ \t]*\n)*")
_SEQUENCE_RE = re.compile(r"^\d+$", re.ASCII)


def _normalize_newlines(raw: str) -> str:
    if raw.startswith("\ufeff"):
        raw = raw[1:]
    return raw.replace("\r\n", "\n").replace("\r", "\n")


def split_blocks(raw: str) -> List[str]:
    """Splits subtitle text into non-empty blocks."""
    content = _normalize_newlines(raw).strip()
    if not content:
        return []
    return [block for block in _BLOCK_SEPARATOR_RE.split(content) if block.strip()]


def _parse_arrow_line(line: str):
    """Returns (start, end) in seconds from a 'start --> end' line."""
    left, right = line.split(ARROW, 1)
    right_fields = right.split()
    if not left.strip() or not right_fields:
        raise MalformedTimecode(line.strip(), "timecode line needs a value on both sides of the arrow")
    # Anything after the end timecode (e.g. position hints) is ignored
    return parse_timecode(left), parse_timecode(right_fields[0])


def parse_block(block: str, block_index: int = 0) -> SubtitleEntry:
    """
    Parses a single SRT block into a SubtitleEntry.

    The sequence-number line is optional. The text may span several lines;
    they are joined with single spaces.

    Raises:
        MalformedEntry: If the block has no usable timecode line, no text,
                        or an end time before its start time.
    """
    lines = [line.strip() for line in block.split("\n")]
    lines = [line for line in lines if line]

    arrow_idx: Optional[int] = None
    for i, line in enumerate(lines):
        if ARROW in line:
            arrow_idx = i
            break
    if arrow_idx is None:
        raise MalformedEntry(block_index, block, "no 'start --> end' timecode line")

    sequence_number = None
    if arrow_idx > 0:
        candidate = lines[arrow_idx - 1]
        if _SEQUENCE_RE.match(candidate):
            sequence_number = int(candidate)
        if arrow_idx > 1 or sequence_number is None:
            logger.debug(f"Block {block_index}: ignoring {arrow_idx} line(s) before the timecode line")

    try:
        start_time, end_time = _parse_arrow_line(lines[arrow_idx])
    except MalformedTimecode as e:
        raise MalformedEntry(block_index, block, str(e)) from e

    if end_time < start_time:
        raise MalformedEntry(block_index, block, f"end time {end_time:.3f}s is before start time {start_time:.3f}s")

    text = " ".join(" ".join(lines[arrow_idx + 1:]).split())
    if not text:
        raise MalformedEntry(block_index, block, "no text lines")

    return SubtitleEntry(
        start_time=start_time,
        end_time=end_time,
        text=text,
        sequence_number=sequence_number,
    )


def parse_track(raw: str) -> ParsedTrack:
    """
    Parses SRT text into a ParsedTrack.

    Malformed blocks are skipped, logged and reported on the returned
    track rather than aborting the parse.

    Args:
        raw: The subtitle text.

    Returns:
        ParsedTrack with the entries in source order.

    Raises:
        EmptyTrack: If no block produced a valid entry.
    """
    track = ParsedTrack()
    for index, block in enumerate(split_blocks(raw or ""), start=1):
        try:
            track.entries.append(parse_block(block, index))
        except MalformedEntry as e:
            logger.warning(f"Skipping malformed subtitle block: {e}")
            track.malformed.append(e)

    if not track.entries:
        raise EmptyTrack(malformed=track.malformed)

    logger.debug(f"Parsed {len(track.entries)} entries ({len(track.malformed)} malformed blocks skipped)")
    return track


class SRTParser:
    """Reads SRT files from disk and parses them into tracks."""

    def __init__(self, encoding: str = "utf-8"):
        self.encoding = encoding

    def parse(self, raw: str) -> ParsedTrack:
        return parse_track(raw)

    def read_file(self, srt_path: str) -> str:
        """
        Reads the raw text of an SRT file (a UTF-8 BOM is dropped later by the parser).

        Raises:
            FileNotFoundError: If the file does not exist.
            FormattingError: If the file cannot be read or decoded.
        """
        logger.info(f"Reading subtitle file: {srt_path}")
        if not os.path.isfile(srt_path):
            raise FileNotFoundError(f"Subtitle file not found: {srt_path}")
        try:
            with open(srt_path, "r", encoding=self.encoding) as f:
                content = f.read()
        except (IOError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read subtitle file {srt_path}: {e}", exc_info=True)
            raise FormattingError(f"Could not read subtitle file {srt_path}: {e}") from e
        return content

    def parse_file(self, srt_path: str) -> ParsedTrack:
        """
        Parses an SRT file.

        Raises:
            FileNotFoundError: If the file does not exist.
            FormattingError: If the file cannot be read or decoded.
            EmptyTrack: If the file contains no valid entries.
        """
        return parse_track(self.read_file(srt_path))
