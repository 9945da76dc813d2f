"""Handles Speech-to-Text transcription using Whisper."""

import logging
import os
from typing import Optional

import torch
import whisper

from .exceptions import TranscriptionError
from .interfaces import Transcriber
from .models import Segment, TranscriptionResult
from .subtitle_formatter import SRTFormatter, SubtitleFormatter

logger = logging.getLogger(__name__)

NO_SPEECH_PLACEHOLDER = Segment(start_time=0.0, end_time=1.0, text="[No speech detected]")


def whisper_language(language: Optional[str]) -> Optional[str]:
    """Reduces identifiers such as 'en-US' or 'pt_BR' to Whisper's two-letter code."""
    if not language:
        return None
    return language.replace("_", "-").split("-")[0].lower()


class WhisperTranscriber(Transcriber):
    """Implements transcription using OpenAI's Whisper model."""

    def __init__(
        self,
        model_name: str = "base",
        device: str = "cuda",
        fp16: bool = True,
        formatter: Optional[SubtitleFormatter] = None
    ):
        """
        Initializes the WhisperTranscriber.

        Args:
            model_name: The name of the Whisper model to use (e.g., "base", "medium.en").
            device: The device to run the model on ("cuda" or "cpu").
            fp16: Whether to use float16 precision (CUDA only).
            formatter: Formatter used by transcribe_to_srt; SRT by default.

        Raises:
            ValueError: If the specified device is invalid.
            TranscriptionError: If the model fails to load.
        """
        self.model_name = model_name
        self.device = device
        self.fp16 = fp16
        self.formatter = formatter or SRTFormatter()

        if self.device == "cuda" and not torch.cuda.is_available():
            logger.warning("CUDA device requested but not available. Falling back to CPU.")
            self.device = "cpu"
        elif self.device not in ["cuda", "cpu"]:
            raise ValueError(f"Invalid device specified: {self.device}. Choose 'cuda' or 'cpu'.")

        logger.info(f"Initializing WhisperTranscriber with model '{self.model_name}' on device '{self.device}' (FP16: {self.fp16})")
        try:
            self.model = whisper.load_model(self.model_name, device=self.device)
            logger.info(f"Whisper model '{self.model_name}' loaded successfully.")
        except Exception as e:
            logger.error(f"Failed to load Whisper model '{self.model_name}': {e}", exc_info=True)
            raise TranscriptionError(f"Failed to load Whisper model '{self.model_name}': {e}") from e

    def transcribe(self, audio_path: str, language: str = "en-US") -> TranscriptionResult:
        """
        Transcribes the audio file using the loaded Whisper model.

        Args:
            audio_path: Path to the audio file (16 kHz mono WAV recommended).
            language: Language identifier; None lets Whisper auto-detect.

        Returns:
            A TranscriptionResult object.

        Raises:
            FileNotFoundError: If the audio file doesn't exist.
            TranscriptionError: If transcription fails during processing.
        """
        logger.info(f"Starting transcription for: {audio_path} (language: {language or 'auto'})")
        if not os.path.exists(audio_path):
            raise FileNotFoundError(f"Audio file not found: {audio_path}")

        try:
            result = self.model.transcribe(
                audio_path,
                language=whisper_language(language),
                fp16=self.fp16 if self.device == "cuda" else False,
                verbose=False
            )
        except Exception as e:
            logger.error(f"Error during Whisper transcription process for {audio_path}: {e}", exc_info=True)
            raise TranscriptionError(f"Whisper transcription failed for {audio_path}: {e}") from e

        segments = []
        for seg_data in result.get('segments', []):
            if 'start' in seg_data and 'end' in seg_data and 'text' in seg_data:
                segments.append(Segment(
                    start_time=float(seg_data['start']),
                    end_time=float(seg_data['end']),
                    text=seg_data['text'].strip()
                ))
            else:
                logger.warning(f"Skipping incomplete segment data: {seg_data}")

        logger.info(f"Transcription completed. Detected language: {result.get('language', 'N/A')}, {len(segments)} segments.")
        return TranscriptionResult(
            language=result.get('language'),
            segments=segments,
            original_audio_path=audio_path
        )

    def transcribe_to_srt(self, audio_path: str, language: str = "en-US") -> str:
        """
        Transcribes the audio file and renders the segments as SRT text.

        Segments without text or with a non-positive duration are dropped.
        When nothing usable remains, a single placeholder entry is returned
        so downstream parsing still has a track to work with.
        """
        result = self.transcribe(audio_path, language=language)
        usable = [seg for seg in result.segments if seg.text and seg.end_time > seg.start_time]
        dropped = len(result.segments) - len(usable)
        if dropped:
            logger.warning(f"Dropped {dropped} segments with empty text or invalid timing.")
        if not usable:
            logger.warning(f"No speech detected in {audio_path}; returning placeholder track.")
            usable = [NO_SPEECH_PLACEHOLDER]
        return self.formatter.render(usable)
