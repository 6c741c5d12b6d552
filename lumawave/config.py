"""Filter configuration models and TOML loading.

A ``FilterConfig`` is an immutable value handed to the frame filter for each
frame. It can be built directly, from a mapping, or from the ``[filter]``
table of a ``lumawave.toml`` file::

    [filter]
    scheme = "haar"
    levels = 4
    contrast = "histogram"

    [[filter.per_level]]
    noise_gate = 3
    bias = 1
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from typing import Any, Literal, cast

from pydantic import BaseModel, Field, ValidationError, field_validator

# TOML loading for Python 3.11+ and older
try:
    import tomllib  # type: ignore[import-not-found, unused-ignore]
except ImportError:
    import tomli as tomllib  # type: ignore[import-not-found, no-redef, unused-ignore]

from lumawave.errors import ConfigurationError

logger = logging.getLogger(__name__)

MAX_LEVELS = 6

Scheme = Literal["haar", "linear", "none"]
Contrast = Literal["histogram", "none"]


class LevelParameters(BaseModel):
    """Reconstruction controls for one wavelet level.

    Attributes:
        noise_gate: Differences with magnitude below this are zeroed
        gain: Right shift applied to reconstructed samples
        bias: Reconstructed samples are raised by ``1 << bias`` (0 disables)
    """

    model_config = {"frozen": True}

    noise_gate: int = Field(default=0, ge=0, le=255)
    gain: int = Field(default=0, ge=0, le=7)
    bias: int = Field(default=0, ge=0, le=7)


class FilterConfig(BaseModel):
    """Complete per-frame filter configuration.

    Attributes:
        scheme: Lifting scheme, or 'none' to skip both transforms
        levels: Number of decomposition levels
        invert_reconstruction: Run the (shaped) inverse transform
        invert_luma: Invert brightness after reconstruction
        contrast: Auto-contrast mode
        one_bit: Threshold the output to black and white
        one_bit_bias: Threshold for one-bit output
        squash: Flatten the coarsest average band during reconstruction
        squash_bias: Value the coarsest average band is forced to
        per_level: Reconstruction controls for levels 1..N
    """

    model_config = {"frozen": True}

    scheme: Scheme = "haar"
    levels: int = Field(default=MAX_LEVELS, ge=1, le=MAX_LEVELS)
    invert_reconstruction: bool = True
    invert_luma: bool = False
    contrast: Contrast = "none"
    one_bit: bool = False
    one_bit_bias: int = Field(default=128, ge=0, le=255)
    squash: bool = False
    squash_bias: int = Field(default=128, ge=0, le=255)
    per_level: tuple[LevelParameters, ...] = Field(default=(), max_length=MAX_LEVELS)

    @field_validator("scheme", "contrast", mode="before")
    @classmethod
    def _normalize_selector(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> FilterConfig:
        """Validate a plain mapping.

        Raises:
            ConfigurationError: If a selector is unknown or a value is out of range
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise ConfigurationError(f"Invalid filter configuration: {e}") from e

    def level(self, level: int) -> LevelParameters:
        """Return the parameters for ``level`` (1-based); unset levels are neutral."""
        if not 1 <= level <= MAX_LEVELS:
            raise ValueError(f"level must be in [1, {MAX_LEVELS}], got {level}")
        if level <= len(self.per_level):
            return self.per_level[level - 1]
        return LevelParameters()


def coerce_config(config: FilterConfig | Mapping[str, Any] | None) -> FilterConfig:
    """Accept a FilterConfig, a mapping or None (defaults)."""
    if config is None:
        return FilterConfig()
    if isinstance(config, FilterConfig):
        return config
    if isinstance(config, Mapping):
        return FilterConfig.from_mapping(config)
    raise TypeError(f"Expected FilterConfig or mapping, got {type(config)}")


def _resolve_config_path(config_path: str | None) -> str:
    """Resolve configuration path from env, explicit path, or defaults."""
    env_config = os.environ.get("LUMAWAVE_CONFIG")
    if env_config:
        return env_config
    if config_path:
        return config_path
    candidates = [
        "lumawave.toml",
        os.path.expanduser("~/lumawave.toml"),
    ]
    for candidate in candidates:
        if os.path.exists(candidate):
            return candidate
    raise FileNotFoundError(
        "Config file not found. Set LUMAWAVE_CONFIG or create lumawave.toml"
    )


def load_filter_config(config_path: str | None = None) -> FilterConfig:
    """Load the ``[filter]`` table of a TOML config file.

    Args:
        config_path: Path to lumawave.toml (auto-detected if None)

    Raises:
        FileNotFoundError: If no config file can be found
        ConfigurationError: If the file has no [filter] table or it is invalid
    """
    resolved_path = _resolve_config_path(config_path)
    if not os.path.exists(resolved_path):
        raise FileNotFoundError(
            f"Config file not found at {resolved_path}. Set LUMAWAVE_CONFIG or create lumawave.toml"
        )
    with open(resolved_path, "rb") as f:
        config = cast(dict[str, Any], tomllib.load(f))
    try:
        filter_cfg = cast(dict[str, Any], config["filter"])
    except KeyError as e:
        raise ConfigurationError(f"No [filter] table in {resolved_path}") from e

    logger.info("loaded filter config from %s", resolved_path)
    return FilterConfig.from_mapping(filter_cfg)
