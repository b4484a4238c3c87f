"""
Order statistics for box-plot charts.

Quartiles use the lower nearest-rank index ``floor(n * p)`` into the
sorted samples, not interpolated percentiles.
"""
import logging
import math
from typing import Dict, List, NamedTuple, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

MIN_BOXPLOT_SAMPLES = 5


class FiveNumberSummary(NamedTuple):
    min: float
    q1: float
    median: float
    q3: float
    max: float


def five_number_summary(samples: Sequence[float]) -> FiveNumberSummary:
    """
    Compute min, Q1, median, Q3 and max of a sample.

    Raises:
        ValueError: if samples is empty
    """
    if len(samples) == 0:
        raise ValueError("five_number_summary requires at least one sample")

    values = np.sort(np.asarray(samples))
    n = len(values)

    def at(p: float):
        return values[math.floor(n * p)].item()

    return FiveNumberSummary(
        min=values[0].item(),
        q1=at(0.25),
        median=at(0.5),
        q3=at(0.75),
        max=values[-1].item(),
    )


def eligible_samples(samples: Sequence[float]) -> List[float]:
    """Non-zero, finite sample values."""
    return [s for s in samples if s != 0 and math.isfinite(s)]


def summarize_categories(
    samples_by_category: Dict[str, Sequence[float]],
    min_samples: int = MIN_BOXPLOT_SAMPLES
) -> List[Tuple[str, FiveNumberSummary]]:
    """
    Summarize each category with enough non-zero samples.

    Categories with fewer than ``min_samples`` non-zero values are dropped.
    Input order is preserved.
    """
    summaries = []
    for category, samples in samples_by_category.items():
        values = eligible_samples(samples)
        if len(values) < min_samples:
            logger.debug(f"Dropping '{category}' from boxplot: {len(values)} samples < {min_samples}")
            continue
        summaries.append((category, five_number_summary(values)))
    return summaries
