"""
Contracts for the external collaborators used around the chunking core.

Concrete implementations live in transcriber.py, text_analysis.py and
video_search.py; the pipeline only depends on these base classes so any of
them can be swapped out (or faked in tests).
"""

from abc import ABC, abstractmethod
from typing import List

from .models import TranscriptionResult, VideoClip


class Transcriber(ABC):
    """Abstract base class for speech-to-text services."""

    @abstractmethod
    def transcribe(self, audio_path: str, language: str = "en-US") -> TranscriptionResult:
        """
        Transcribes the given audio file.

        Args:
            audio_path: Path to the audio file.
            language: Language identifier such as "en-US" or "en".

        Returns:
            A TranscriptionResult object containing segments and language.

        Raises:
            TranscriptionError: If transcription fails.
            FileNotFoundError: If the audio file doesn't exist.
        """
        pass

    @abstractmethod
    def transcribe_to_srt(self, audio_path: str, language: str = "en-US") -> str:
        """Transcribes the audio file and returns the result as SRT text."""
        pass


class KeywordExtractor(ABC):
    """Abstract base class for keyword extraction services."""

    @abstractmethod
    def extract_keywords(self, text: str) -> List[str]:
        """
        Returns short keyword phrases describing the text, most relevant first.

        Raises:
            EnrichmentError: If the underlying model fails.
        """
        pass


class Summarizer(ABC):
    """Abstract base class for summarization services."""

    @abstractmethod
    def summarize(self, text: str) -> str:
        """
        Returns a one or two sentence summary of the text.

        Raises:
            EnrichmentError: If the underlying model fails.
        """
        pass


class ClipSearch(ABC):
    """Abstract base class for stock video search services."""

    @abstractmethod
    def search(self, query: str, per_page: int = 10) -> List[VideoClip]:
        """
        Searches for clips matching a keyword phrase.

        Raises:
            VideoSearchError: If the search request fails.
        """
        pass
