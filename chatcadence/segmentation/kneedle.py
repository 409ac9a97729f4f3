"""
Adaptive timeout estimation with the Kneedle heuristic.

Finds the "elbow" of a sorted gap distribution (Satopaa et al., "Finding a
'Kneedle' in a Haystack") to pick a data-driven boundary between short and
long gaps, and falls back to fixed percentiles when the distribution is too
small or has no usable elbow.
"""
import logging
import math
from typing import Optional, Sequence

import numpy as np

from chatcadence.core.config import SegmentationConfig, resolve_config
from chatcadence.core.models import GapStats, TimeoutTriple

logger = logging.getLogger(__name__)


def find_knee_point(sorted_values: Sequence[float]) -> int:
    """
    Locate the knee (point of maximum curvature) of an ascending curve.

    Both axes are normalized to [0, 1] and the knee is the interior point
    furthest from the diagonal, i.e. with the largest
    ``|x_norm - y_norm|``. Ties go to the lowest index.

    Parameters
    ----------
    sorted_values : Sequence[float]
        Values sorted ascending (e.g. time gaps)

    Returns
    -------
    int
        Index of the knee. The middle index when there are fewer than three
        values or all values are equal.
    """
    n = len(sorted_values)
    if n < 3:
        return n // 2

    y = np.asarray(sorted_values, dtype=float)
    y_min = y[0]
    y_range = y[-1] - y_min
    if y_range == 0:
        return n // 2

    x_norm = np.arange(n, dtype=float) / (n - 1)
    y_norm = (y - y_min) / y_range
    differences = np.abs(x_norm - y_norm)

    # Endpoints always lie on the diagonal
    return int(np.argmax(differences[1:-1])) + 1


def get_percentile_timeout(
    gaps: Sequence[float],
    percentile: float,
    config: Optional[SegmentationConfig] = None,
) -> float:
    """
    Smallest gap at or above the given percentile.

    Uses ``index = ceil(percentile / 100 * n) - 1`` on the sorted gaps,
    clamped to ``[0, n - 1]``; no interpolation.

    Parameters
    ----------
    gaps : Sequence[float]
        Gaps in seconds, in any order
    percentile : float
        Percentile in [0, 100]
    config : SegmentationConfig, optional
        Supplies the value returned for an empty gap list

    Returns
    -------
    float
        Timeout in seconds
    """
    if len(gaps) == 0:
        return resolve_config(config).empty_percentile_timeout

    ordered = sorted(gaps)
    index = math.ceil((percentile / 100) * len(ordered)) - 1
    index = max(0, min(index, len(ordered) - 1))
    return float(ordered[index])


def get_adaptive_timeout(
    gaps: Sequence[float],
    fallback_percentile: float = 85,
    config: Optional[SegmentationConfig] = None,
) -> float:
    """
    Timeout at the knee of the gap distribution.

    The knee is only trusted when it is strictly interior; a knee on either
    endpoint means the curve has no real elbow. Small samples skip knee
    detection entirely.

    Parameters
    ----------
    gaps : Sequence[float]
        Gaps in seconds, in any order
    fallback_percentile : float
        Percentile used when no usable knee exists (default: 85)
    config : SegmentationConfig, optional
        Supplies ``min_knee_samples`` and the empty-list timeout

    Returns
    -------
    float
        Timeout in seconds
    """
    config = resolve_config(config)
    if len(gaps) < config.min_knee_samples:
        return get_percentile_timeout(gaps, fallback_percentile, config)

    ordered = sorted(gaps)
    knee_index = find_knee_point(ordered)
    if 0 < knee_index < len(ordered) - 1:
        return float(ordered[knee_index])

    logger.debug(
        "Knee at boundary index %d of %d gaps, using p%s fallback",
        knee_index, len(ordered), fallback_percentile,
    )
    return get_percentile_timeout(ordered, fallback_percentile, config)


def calculate_timeouts(
    gaps: Sequence[float],
    config: Optional[SegmentationConfig] = None,
) -> TimeoutTriple:
    """
    Derive the turn, volley and session timeouts from one gap distribution.

    - turn: fixed high percentile (p70 by default)
    - threadlet (volley): knee of the distribution, p85 fallback
    - session: p95 by default

    An empty gap list (a single message, turn or volley) gives the
    cold-start defaults.

    Parameters
    ----------
    gaps : Sequence[float]
        Gaps in seconds, in any order
    config : SegmentationConfig, optional
        Percentiles and defaults to use

    Returns
    -------
    TimeoutTriple
        The three timeouts in seconds
    """
    config = resolve_config(config)
    if len(gaps) == 0:
        return TimeoutTriple(
            turn_timeout=config.default_turn_timeout,
            threadlet_timeout=config.default_threadlet_timeout,
            session_timeout=config.default_session_timeout,
        )

    ordered = sorted(gaps)
    return TimeoutTriple(
        turn_timeout=get_percentile_timeout(ordered, config.turn_percentile, config),
        threadlet_timeout=get_adaptive_timeout(
            ordered, config.threadlet_fallback_percentile, config
        ),
        session_timeout=get_percentile_timeout(ordered, config.session_percentile, config),
    )


def analyze_gaps(
    gaps: Sequence[float],
    config: Optional[SegmentationConfig] = None,
) -> GapStats:
    """
    Describe a gap distribution.

    Parameters
    ----------
    gaps : Sequence[float]
        Gaps in seconds, in any order
    config : SegmentationConfig, optional
        Supplies ``min_knee_samples``

    Returns
    -------
    GapStats
        Count, min, max, median (element ``n // 2``), mean, p70/p85/p95 and,
        with enough samples, the gap value at the knee. All zeros when empty.
    """
    config = resolve_config(config)
    if len(gaps) == 0:
        return GapStats()

    ordered = np.sort(np.asarray(gaps, dtype=float))
    values = ordered.tolist()
    knee_point = None
    if len(values) >= config.min_knee_samples:
        knee_point = values[find_knee_point(values)]

    return GapStats(
        count=len(values),
        min=values[0],
        max=values[-1],
        median=values[len(values) // 2],
        mean=float(ordered.mean()),
        p70=get_percentile_timeout(values, 70, config),
        p85=get_percentile_timeout(values, 85, config),
        p95=get_percentile_timeout(values, 95, config),
        knee_point=knee_point,
    )
