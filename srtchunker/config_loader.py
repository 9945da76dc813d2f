"""Handles loading configuration from YAML files."""

import logging
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML or
                              if there are other reading errors.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except IOError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if config is None:
            # An empty file means "use the defaults"
            logger.warning(f"Configuration file {config_path} is empty. Using defaults.")
            return {}
        if not isinstance(config, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config


@dataclass
class ChunkerSettings:
    """
    Validated settings for one chunking run.

    Built once from the loaded config dictionary and handed to the pipeline
    and the collaborators it constructs.
    """
    max_span_seconds: float = 30.0
    language: str = "en-US"
    device: str = "cuda"
    whisper_model: str = "base"
    whisper_fp16: bool = True
    keyword_model: str = "google/flan-t5-base"
    summary_model: str = "sshleifer/distilbart-cnn-12-6"
    max_keywords: int = 5
    enrich: bool = True
    max_concurrency: int = 4
    search_clips: bool = False
    clips_per_chunk: int = 3
    pexels_api_key: Optional[str] = None
    pexels_orientation: Optional[str] = None
    request_timeout: float = 20.0
    ffmpeg_path: Optional[str] = None
    temp_dir: str = "temp"
    log_dir: str = "logs"
    log_file: str = "srtchunker.log"
    wrap_chars: Optional[int] = None

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raises ConfigurationError when a value is out of range."""
        if self.max_span_seconds <= 0:
            raise ConfigurationError(f"max_span_seconds must be > 0, got {self.max_span_seconds}")
        if self.device not in ("cuda", "cpu"):
            raise ConfigurationError(f"Invalid device '{self.device}'. Choose 'cuda' or 'cpu'.")
        if self.max_keywords < 1:
            raise ConfigurationError("max_keywords must be at least 1")
        if self.max_concurrency < 1:
            raise ConfigurationError("max_concurrency must be at least 1")
        if self.clips_per_chunk < 1:
            raise ConfigurationError("clips_per_chunk must be at least 1")
        if self.request_timeout <= 0:
            raise ConfigurationError("request_timeout must be > 0")
        if self.wrap_chars is not None and self.wrap_chars < 1:
            raise ConfigurationError("wrap_chars must be a positive integer or null")
        if not self.temp_dir:
            raise ConfigurationError("Configuration missing 'temp_dir'.")

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "ChunkerSettings":
        """
        Builds settings from a loaded config dictionary.

        Missing keys keep their defaults, unknown keys are ignored. A missing
        pexels_api_key is taken from the PEXELS_API_KEY environment variable.

        Raises:
            ConfigurationError: If a value has the wrong type or is out of range.
        """
        values: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name not in config or config[f.name] is None:
                continue
            values[f.name] = _coerce(f.name, config[f.name], f.default)

        unknown = set(config) - {f.name for f in fields(cls)}
        if unknown:
            logger.debug(f"Ignoring unknown configuration keys: {', '.join(sorted(unknown))}")

        if not values.get("pexels_api_key"):
            env_key = os.environ.get("PEXELS_API_KEY", "").strip()
            if env_key:
                values["pexels_api_key"] = env_key

        return cls(**values)


def _coerce(name: str, value: Any, default: Any) -> Any:
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ConfigurationError(f"'{name}' must be true or false, got {value!r}")
        return value
    if isinstance(default, (int, float)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(f"'{name}' must be a number, got {value!r}")
        if isinstance(default, int) and isinstance(value, float) and not value.is_integer():
            raise ConfigurationError(f"'{name}' must be a whole number, got {value!r}")
        return type(default)(value)
    if name == "wrap_chars":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError(f"'{name}' must be an integer, got {value!r}")
        return value
    if not isinstance(value, str):
        raise ConfigurationError(f"'{name}' must be a string, got {value!r}")
    return value
