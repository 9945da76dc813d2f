"""Prepares audio for transcription using ffmpeg."""

import logging
import os
from typing import Optional

import ffmpeg

from .exceptions import AudioExtractionError, FileSystemError
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000


class AudioExtractor:
    """Converts audio or video sources into 16 kHz mono WAV files."""

    def __init__(self, ffmpeg_path: Optional[str] = None):
        """
        Args:
            ffmpeg_path: Optional path to the ffmpeg executable.
                         If None, assumes ffmpeg is in the system PATH.
        """
        self.ffmpeg_cmd = ffmpeg_path or 'ffmpeg'
        logger.info(f"Using ffmpeg command: {self.ffmpeg_cmd}")

    def write_audio_bytes(self, data: bytes, output_dir: str, filename: str) -> str:
        """
        Stores raw audio bytes (e.g. a synthesized voice-over) on disk.

        Returns:
            The path of the written file.

        Raises:
            ValueError: If data is empty.
            FileSystemError: If the file cannot be written.
        """
        if not data:
            raise ValueError("Audio data is empty.")
        ensure_dir_exists(output_dir)
        path = os.path.join(output_dir, os.path.basename(filename))
        try:
            with open(path, "wb") as f:
                f.write(data)
        except OSError as e:
            raise FileSystemError(f"Could not write audio file {path}: {e}") from e
        logger.info(f"Wrote {len(data)} bytes of audio to {path}")
        return path

    def extract_audio(self, media_path: str, output_dir: str, output_filename: Optional[str] = None) -> str:
        """
        Converts the audio stream of a media file to a WAV file for the transcriber.

        Args:
            media_path: Path to the input audio or video file.
            output_dir: Directory to save the converted file.
            output_filename: Optional base name for the output file. Uses the
                             media filename when None.

        Returns:
            The full path to the WAV file.

        Raises:
            FileNotFoundError: If the input file does not exist.
            AudioExtractionError: If ffmpeg fails.
            FileSystemError: If the output directory cannot be created/accessed.
        """
        logger.info(f"Preparing audio for transcription from: {media_path}")
        if not os.path.exists(media_path):
            raise FileNotFoundError(f"Input media file not found: {media_path}")

        ensure_dir_exists(output_dir)

        source = output_filename or os.path.basename(media_path)
        base_name = os.path.splitext(source)[0]
        output_audio_path = os.path.join(output_dir, f"{base_name}.wav")
        if os.path.abspath(output_audio_path) == os.path.abspath(media_path):
            output_audio_path = os.path.join(output_dir, f"{base_name}.{SAMPLE_RATE}.wav")

        if os.path.exists(output_audio_path):
            logger.warning(f"Output audio file already exists, overwriting: {output_audio_path}")

        try:
            (
                ffmpeg
                .input(media_path)
                .output(output_audio_path, acodec='pcm_s16le', ar=SAMPLE_RATE, ac=1)
                .overwrite_output()
                .run(cmd=self.ffmpeg_cmd, capture_stdout=True, capture_stderr=True)
            )
        except ffmpeg.Error as e:
            stderr_output = e.stderr.decode('utf-8', errors='replace') if e.stderr else "No stderr output"
            logger.error(f"ffmpeg error while converting {media_path}: {stderr_output}")
            self._remove_partial(output_audio_path)
            raise AudioExtractionError(f"ffmpeg failed: {stderr_output}") from e
        except OSError as e:
            logger.error(f"Could not run ffmpeg ({self.ffmpeg_cmd}): {e}", exc_info=True)
            self._remove_partial(output_audio_path)
            raise AudioExtractionError(f"Could not run ffmpeg: {e}") from e

        logger.info(f"Audio ready at: {output_audio_path}")
        return output_audio_path

    @staticmethod
    def _remove_partial(path: str) -> None:
        if os.path.exists(path):
            try:
                os.remove(path)
            except OSError:
                logger.warning(f"Could not clean up partially created audio file: {path}")
