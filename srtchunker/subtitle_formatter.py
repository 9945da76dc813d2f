"""Handles rendering entries and chunks back into subtitle text (SRT)."""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Union

from .exceptions import FormattingError
from .models import Chunk, Segment, SubtitleEntry
from .timecode import format_range

logger = logging.getLogger(__name__)

TimedItem = Union[SubtitleEntry, Chunk, Segment]


def wrap_text(text: str, max_chars_per_line: int) -> List[str]:
    """Word-wraps text into lines of at most max_chars_per_line (long words stay whole)."""
    lines = []
    current = ""
    for word in text.split():
        if not current:
            current = word
        elif len(current) + len(word) + 1 <= max_chars_per_line:
            current += f" {word}"
        else:
            lines.append(current)
            current = word
    if current:
        lines.append(current)
    return lines


def render_track(items: Sequence[TimedItem], max_chars_per_line: Optional[int] = None) -> str:
    """
    Renders timed items as SRT text.

    Items are numbered from 1 in the order given, regardless of any
    sequence numbers they carried in the source track.

    Args:
        items: Entries, chunks or segments, each with start_time, end_time and text.
        max_chars_per_line: Optional line width; text is written on one line when None.

    Returns:
        The SRT text, each block followed by a blank line.
    """
    blocks = []
    for number, item in enumerate(items, start=1):
        if max_chars_per_line:
            text = "\n".join(wrap_text(item.text, max_chars_per_line))
        else:
            text = item.text
        blocks.append(f"{number}\n{format_range(item.start_time, item.end_time)}\n{text}\n\n")
    return "".join(blocks)


class SubtitleFormatter(ABC):
    """Abstract base class for subtitle formatters."""

    @abstractmethod
    def render(self, items: Sequence[TimedItem], max_chars_per_line: Optional[int] = None) -> str:
        """
        Renders timed items into the formatter's subtitle text format.

        Args:
            items: Entries, chunks or segments in output order.
            max_chars_per_line: Optional line width for wrapping.

        Returns:
            The formatted subtitle text.
        """
        pass

    def format_subtitles(
        self,
        items: Sequence[TimedItem],
        output_path: str,
        max_chars_per_line: Optional[int] = None
    ) -> str:
        """
        Renders the items and writes them to a subtitle file.

        Args:
            items: Entries, chunks or segments in output order.
            output_path: Path to save the subtitle file.
            max_chars_per_line: Optional line width for wrapping.

        Returns:
            The rendered text that was written.

        Raises:
            FormattingError: If the file cannot be written.
        """
        content = self.render(items, max_chars_per_line=max_chars_per_line)
        try:
            with open(output_path, 'w', encoding='utf-8') as f:
                f.write(content)
        except IOError as e:
            logger.error(f"Failed to write subtitle file to {output_path}: {e}", exc_info=True)
            raise FormattingError(f"Could not write subtitle file: {e}") from e
        logger.info(f"Successfully wrote {len(items)} subtitle blocks to {output_path}")
        return content


class SRTFormatter(SubtitleFormatter):
    """Formats subtitles into the SRT (SubRip Text) format."""

    def render(self, items: Sequence[TimedItem], max_chars_per_line: Optional[int] = None) -> str:
        return render_track(items, max_chars_per_line=max_chars_per_line)
