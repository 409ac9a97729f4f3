"""
Segmentation defaults.

Cold-start timeouts and percentile choices live here as named values so they
can be tested and overridden independently. Every value can be overridden
from the environment with a ``CHATCADENCE_`` prefixed variable, e.g.
``CHATCADENCE_SESSION_PERCENTILE=90``.
"""
import logging
import os
from functools import lru_cache
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

ENV_PREFIX = "CHATCADENCE_"

# Cold-start timeouts (seconds), used when there are no gaps at all
DEFAULT_TURN_TIMEOUT = 180.0  # 3 minutes
DEFAULT_THREADLET_TIMEOUT = 1800.0  # 30 minutes
DEFAULT_SESSION_TIMEOUT = 14400.0  # 4 hours

# Percentile timeout of an empty gap list
EMPTY_PERCENTILE_TIMEOUT = 300.0  # 5 minutes

TURN_PERCENTILE = 70.0
THREADLET_FALLBACK_PERCENTILE = 85.0
SESSION_PERCENTILE = 95.0

# Knee detection is unreliable below this many gaps
MIN_KNEE_SAMPLES = 5

# Hex characters kept from the sha256 digest of a volley
VOLLEY_ID_LENGTH = 16


class SegmentationConfig(BaseModel):
    """
    Tunable constants for the three-phase segmenter.

    Attributes
    ----------
    default_turn_timeout : float
        Turn timeout when a message list yields no gaps
    default_threadlet_timeout : float
        Volley timeout when a turn list yields no gaps
    default_session_timeout : float
        Session timeout when a volley list yields no gaps
    empty_percentile_timeout : float
        Value of a percentile taken over an empty gap list
    turn_percentile : float
        Percentile of message gaps used as the turn timeout
    threadlet_fallback_percentile : float
        Percentile used for the volley timeout when no usable knee exists
    session_percentile : float
        Percentile of volley gaps used as the session timeout
    min_knee_samples : int
        Minimum number of gaps before knee detection is attempted
    volley_id_length : int
        Length of the hex volley identifier
    """

    model_config = ConfigDict(frozen=True)

    default_turn_timeout: float = Field(DEFAULT_TURN_TIMEOUT, ge=0)
    default_threadlet_timeout: float = Field(DEFAULT_THREADLET_TIMEOUT, ge=0)
    default_session_timeout: float = Field(DEFAULT_SESSION_TIMEOUT, ge=0)
    empty_percentile_timeout: float = Field(EMPTY_PERCENTILE_TIMEOUT, ge=0)
    turn_percentile: float = Field(TURN_PERCENTILE, ge=0, le=100)
    threadlet_fallback_percentile: float = Field(
        THREADLET_FALLBACK_PERCENTILE, ge=0, le=100
    )
    session_percentile: float = Field(SESSION_PERCENTILE, ge=0, le=100)
    min_knee_samples: int = Field(MIN_KNEE_SAMPLES, ge=3)
    volley_id_length: int = Field(VOLLEY_ID_LENGTH, ge=8, le=64)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "SegmentationConfig":
        """
        Build a config from ``CHATCADENCE_*`` environment variables.

        Parameters
        ----------
        environ : Mapping[str, str], optional
            Environment to read from (default: ``os.environ``)

        Returns
        -------
        SegmentationConfig
            Config with any overrides applied; unset fields keep defaults

        Raises
        ------
        pydantic.ValidationError
            If an override is not a valid value for its field
        """
        environ = os.environ if environ is None else environ
        overrides: Dict[str, Any] = {}
        for name in cls.model_fields:
            value = environ.get(ENV_PREFIX + name.upper())
            if value is not None:
                overrides[name] = value
        if overrides:
            logger.debug("Segmentation config overrides from env: %s", overrides)
        return cls(**overrides)


@lru_cache(maxsize=1)
def get_config() -> SegmentationConfig:
    """Process-wide default config, read once from the environment."""
    return SegmentationConfig.from_env()


def resolve_config(config: Optional[SegmentationConfig]) -> SegmentationConfig:
    """Return ``config`` or the process default when it is None."""
    return config if config is not None else get_config()
