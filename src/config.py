"""Configuration loader for the Thai word-break tool."""

from pathlib import Path
from typing import Any, Literal, TypeVar

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from src.epub.classifier import normalize_extensions, normalize_tag_names
from src.epub.markup import SerializationPolicy
from src.wordbreak.break_inserter import BreakMode

ModelT = TypeVar("ModelT", bound=BaseModel)


class WordBreakConfig(BaseModel):
    """Configuration for break insertion into markup members."""

    mode: Literal["zwsp", "wbr"] = Field(..., description="zwsp inserts U+200B, wbr inserts <wbr/> elements")
    skip_tags: list[str] = Field(..., description="Elements whose text is never rewritten")
    markup_extensions: list[str] = Field(..., min_length=1, description="Member extensions treated as markup")
    serialization_policy: Literal["auto", "structural", "textual"] = Field(
        ..., description="Preferred reassembly path for rewritten documents"
    )

    model_config = ConfigDict(frozen=True, extra="forbid")


class DictionaryConfig(BaseModel):
    """Configuration for the word list source."""

    url: str | None = Field(..., description="Remote word list URL (newline-delimited UTF-8)")
    local_path: str | None = Field(..., description="Local word list; takes precedence over url")
    cache_dir: str = Field(..., min_length=1, description="Directory for the cached remote word list")
    cache_days: int = Field(..., ge=1, description="Days before the cached word list is fetched again")
    timeout_seconds: int = Field(..., gt=0, description="HTTP timeout for fetching the word list")

    model_config = ConfigDict(frozen=True, extra="forbid")


def _format_validation_error(e: ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(loc) for loc in err['loc'])}: {err['msg']}" for err in e.errors())


class Config:
    """Configuration class that loads and provides access to config.yaml."""

    def __init__(self, config_path: str | Path) -> None:
        """Initialize the Config by loading the YAML file.

        Args:
            config_path: Path to the config.yaml file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            yaml.YAMLError: If the YAML file is invalid.
            KeyError: If required sections are missing from the config.
            ValueError: If a section fails validation.
        """
        self.config_path = Path(config_path)
        self._load(self.config_path)

        self._wordbreak = self._validate_section("wordbreak", WordBreakConfig)
        self._dictionary = self._validate_section("dictionary", DictionaryConfig)

    def _load(self, config_path: Path) -> None:
        """Load the configuration from a YAML file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            yaml.YAMLError: If the YAML file is invalid.
            KeyError: If the file is empty.
            ValueError: If the top level is not a mapping.
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)

        if data is None:
            raise KeyError("Missing required key 'wordbreak' in config file")
        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the top level")

        self._data: dict[str, Any] = data

    def _validate_section(self, key: str, model: type[ModelT]) -> ModelT:
        """Validate one top-level section with its Pydantic model.

        Raises:
            KeyError: If the section is missing.
            ValueError: If the section is invalid.
        """
        if key not in self._data:
            raise KeyError(f"Missing required key '{key}' in config file")

        try:
            return model.model_validate(self._data[key])
        except ValidationError as e:
            raise ValueError(f"{key.capitalize()} configuration validation failed: {_format_validation_error(e)}") from e

    def get_wordbreak_config(self) -> WordBreakConfig:
        """Get word-break configuration."""
        return self._wordbreak

    def get_dictionary_config(self) -> DictionaryConfig:
        """Get word list source configuration."""
        return self._dictionary

    def getConfigPath(self) -> Path:
        """Get the path to config.yaml."""
        return self.config_path

    def getBreakMode(self) -> BreakMode:
        """Get the configured break mode."""
        return BreakMode(self._wordbreak.mode)

    def getSkipTags(self) -> frozenset[str]:
        """Get normalized skip element names."""
        return normalize_tag_names(self._wordbreak.skip_tags)

    def getMarkupExtensions(self) -> frozenset[str]:
        """Get normalized markup member extensions."""
        return normalize_extensions(self._wordbreak.markup_extensions)

    def getSerializationPolicy(self) -> SerializationPolicy:
        """Get the markup reassembly policy."""
        return SerializationPolicy(self._wordbreak.serialization_policy)

    def getDictionaryCacheDir(self) -> Path:
        """Get the word list cache directory.

        Returns:
            Path object pointing to the cache directory (relative or absolute).
        """
        return Path(self._dictionary.cache_dir)

    def getDictionaryLocalPath(self) -> Path | None:
        """Get the local word list path, if configured."""
        if self._dictionary.local_path is None:
            return None
        return Path(self._dictionary.local_path)
