"""Data models for srtchunker."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from .exceptions import EnrichmentFailure, MalformedEntry
from .timecode import format_timecode

PLACEHOLDER = "N/A"

@dataclass(frozen=True)
class SubtitleEntry:
    """One caption unit as found in a subtitle track."""
    start_time: float
    end_time: float
    text: str
    sequence_number: Optional[int] = None # Advisory only, renumbered on output

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

@dataclass
class ParsedTrack:
    """Ordered entries produced by one parse call, plus the blocks that were skipped."""
    entries: List[SubtitleEntry] = field(default_factory=list)
    malformed: List[MalformedEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[SubtitleEntry]:
        return iter(self.entries)

    def __getitem__(self, index: int) -> SubtitleEntry:
        return self.entries[index]

@dataclass
class Chunk:
    """
    A run of consecutive entries bounded by a maximum span.

    keywords and summary stay None until the enrichment step has processed
    the chunk; a failed call leaves an empty value instead.
    """
    start_time: float
    end_time: float
    text: str
    entries: Tuple[SubtitleEntry, ...] = ()
    keywords: Optional[List[str]] = None
    summary: Optional[str] = None
    enrichment_failures: List[EnrichmentFailure] = field(default_factory=list)

    @property
    def duration(self) -> float:
        return self.end_time - self.start_time

    @property
    def is_annotated(self) -> bool:
        return self.keywords is not None and self.summary is not None

    @property
    def keywords_display(self) -> str:
        return ", ".join(self.keywords) if self.keywords else PLACEHOLDER

    @property
    def summary_display(self) -> str:
        return self.summary if self.summary else PLACEHOLDER

    def to_dict(self) -> Dict[str, object]:
        return {
            "start": format_timecode(self.start_time),
            "end": format_timecode(self.end_time),
            "start_seconds": self.start_time,
            "end_seconds": self.end_time,
            "text": self.text,
            "entry_count": len(self.entries),
            "keywords": list(self.keywords) if self.keywords is not None else None,
            "summary": self.summary,
            "enrichment_errors": [str(failure) for failure in self.enrichment_failures],
        }

@dataclass
class Segment:
    """A single timed piece of text as returned by the speech recognizer."""
    start_time: float
    end_time: float
    text: str

@dataclass
class TranscriptionResult:
    """Holds the structured output from the ASR process."""
    language: Optional[str]
    segments: List[Segment] = field(default_factory=list)
    original_audio_path: Optional[str] = None

@dataclass
class VideoClip:
    """Candidate stock clip returned by the video search."""
    id: str
    url: str
    page_url: Optional[str] = None
    thumbnail: Optional[str] = None
    duration: Optional[float] = None
    width: Optional[int] = None
    height: Optional[int] = None
    attribution: Optional[str] = None
    attribution_url: Optional[str] = None

    @property
    def resolution(self) -> Optional[str]:
        if self.width and self.height:
            return f"{self.width}x{self.height}"
        return None

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "url": self.url,
            "page_url": self.page_url,
            "thumbnail": self.thumbnail,
            "duration": self.duration,
            "resolution": self.resolution,
            "attribution": self.attribution,
            "attribution_url": self.attribution_url,
        }

@dataclass
class ChunkingResult:
    """Everything produced by one pipeline run over a subtitle track."""
    track: ParsedTrack
    chunks: List[Chunk]
    normalized_srt: str
    chunks_srt: str
    clips: Dict[int, List[VideoClip]] = field(default_factory=dict)
    source_path: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        chunk_dicts = []
        for index, chunk in enumerate(self.chunks):
            data = chunk.to_dict()
            data["index"] = index + 1
            data["clips"] = [clip.to_dict() for clip in self.clips.get(index, [])]
            chunk_dicts.append(data)
        return {
            "source": self.source_path,
            "entry_count": len(self.track),
            "malformed_blocks": [str(report) for report in self.track.malformed],
            "chunks": chunk_dicts,
        }
