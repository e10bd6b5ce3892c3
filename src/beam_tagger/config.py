"""Configuration system for beam-tagger.

Uses pydantic-settings for declarative, layered configuration:
init kwargs -> environment variables (BT_*) -> .env file -> field defaults.

Per-call overrides are applied via resolve_config() which creates a new
config instance without mutating the defaults. Infrastructure fields are
protected from per-call override.
"""

from __future__ import annotations

from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from beam_tagger.exceptions import ConfigurationError

# Fields that can be overridden per call via resolve_config().
# Resource paths, the context generator and logging are fixed for a tagger
# instance.
_PER_CALL_FIELDS: frozenset[str] = frozenset(
    {
        "beam_size",
        "validity_filter",
        "closed_class_tags",
        "case_sensitive_tags",
    }
)

# All known config field names (populated after class definition).
_ALL_FIELDS: frozenset[str] = frozenset()

_OVERRIDE_PREFIX = "bt_"


class BeamTaggerConfig(BaseSettings):
    """Configuration for beam-tagger.

    Resolution order: init kwargs -> env vars (BT_*) -> .env file -> defaults.

    Fields are divided into two groups:
    - **Infrastructure**: model and dictionary paths, context generator, logging --
      NOT overridable per call.
    - **Decoding parameters**: beam width, validity filter --
      overridable per call via ``bt_``-prefixed overrides.
    """

    model_config = SettingsConfigDict(
        env_prefix="BT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    # --- Infrastructure (NOT per-call overridable) ---

    model_path: str = Field(
        default="",
        description="Path to a JSON log-linear model file",
    )
    dictionary_path: str = Field(
        default="",
        description="Path to a serialized n-gram model of common words (empty = none)",
    )
    dictionary_cutoff: int = Field(
        default=0,
        description="Drop dictionary entries seen fewer times than this",
    )
    tag_dictionary_path: str = Field(
        default="",
        description="Path to a JSON map of word -> allowed tags",
    )
    context_generator: str = Field(
        default="default",
        description="Context generator: 'default' (POS) or 'chunk'",
    )

    # --- Search (per-call overridable) ---

    beam_size: int = Field(
        default=3,
        description="Number of partial sequences kept after each position",
    )

    # --- Validity filter (per-call overridable) ---

    validity_filter: str = Field(
        default="accept_all",
        description="Validity filter: 'accept_all' or 'tag_dictionary'",
    )
    closed_class_tags: list[str] = Field(
        default_factory=list,
        description="Tags that unknown words may never receive",
    )
    case_sensitive_tags: bool = Field(
        default=False,
        description="Match tag dictionary words case-sensitively",
    )

    # --- Logging (NOT per-call overridable) ---

    log_level: str = Field(
        default="summary",
        description="Decode logging verbosity: 'none', 'summary', 'full'",
    )
    diagnostic_mode: bool = Field(
        default=False,
        description="Store all decode records in memory for analysis",
    )


# Populate _ALL_FIELDS now that the class is defined.
_ALL_FIELDS = frozenset(BeamTaggerConfig.model_fields.keys())


def _strip_prefix(key: str) -> str:
    """Strip the ``bt_`` prefix from an override key, if present."""
    if key.startswith(_OVERRIDE_PREFIX):
        return key[len(_OVERRIDE_PREFIX) :]
    return key


def validate_overrides(overrides: dict[str, Any]) -> None:
    """Validate all bt_* keys in *overrides* without creating a config.

    Args:
        overrides: Dictionary of per-call overrides, keys prefixed with ``bt_``.

    Raises:
        ConfigurationError: If any bt_* key is unknown or non-overridable.
    """
    for key in overrides:
        if not key.startswith(_OVERRIDE_PREFIX):
            continue
        field_name = _strip_prefix(key)
        if field_name not in _ALL_FIELDS:
            raise ConfigurationError(
                f"Unknown config field: '{key}' (no field '{field_name}' exists)"
            )
        if field_name not in _PER_CALL_FIELDS:
            raise ConfigurationError(
                f"Field '{field_name}' is an infrastructure field and cannot be "
                f"overridden per call"
            )


def resolve_config(
    defaults: BeamTaggerConfig,
    overrides: dict[str, Any] | None,
) -> BeamTaggerConfig:
    """Create a new config instance merging defaults with per-call overrides.

    Override keys use the ``bt_`` prefix (e.g. ``'bt_beam_size': 5``). Keys
    without the prefix are ignored.

    Args:
        defaults: The base configuration loaded from the environment.
        overrides: Per-call overrides.

    Returns:
        *defaults* itself when nothing applies, otherwise a new validated
        BeamTaggerConfig.

    Raises:
        ConfigurationError: If a bt_* key is unknown or non-overridable, or
            a value fails validation.
    """
    if not overrides:
        return defaults

    validate_overrides(overrides)

    applied = {
        _strip_prefix(key): value
        for key, value in overrides.items()
        if key.startswith(_OVERRIDE_PREFIX)
    }
    if not applied:
        return defaults

    # model_validate runs full type coercion; model_copy(update=...) would not.
    merged = defaults.model_dump()
    merged.update(applied)
    try:
        return BeamTaggerConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid override: {exc}") from exc
