"""Sample generation for demos and tests.

Distributions are parameterised by their target mean and standard
deviation so that a run can be checked against known moments regardless of
shape.
"""

import logging
import math
from typing import Literal, Optional

import numpy as np
from scipy import stats

logger = logging.getLogger(__name__)

Distribution = Literal["normal", "uniform", "lognormal", "exponential"]

DISTRIBUTIONS = ("normal", "uniform", "lognormal", "exponential")


def frozen_distribution(distribution: str, mean: float, std_dev: float):
    """Build a frozen scipy distribution with the requested moments.

    Args:
        distribution: One of ``normal``, ``uniform``, ``lognormal`` or
            ``exponential``.
        mean: Target mean.
        std_dev: Target standard deviation, must be positive.

    Returns:
        Frozen ``scipy.stats`` distribution.

    Raises:
        ValueError: For an unknown distribution, a non-positive standard
            deviation, or a non-positive mean with ``lognormal``.
    """
    if std_dev <= 0:
        raise ValueError(f"std_dev must be positive, got {std_dev}")

    if distribution == "normal":
        return stats.norm(loc=mean, scale=std_dev)
    if distribution == "uniform":
        half_width = math.sqrt(3.0) * std_dev
        return stats.uniform(loc=mean - half_width, scale=2 * half_width)
    if distribution == "lognormal":
        if mean <= 0:
            raise ValueError(f"lognormal requires a positive mean, got {mean}")
        sigma2 = math.log1p((std_dev / mean) ** 2)
        mu = math.log(mean) - sigma2 / 2
        return stats.lognorm(s=math.sqrt(sigma2), scale=math.exp(mu))
    if distribution == "exponential":
        # Shifted so that mean = loc + scale and std = scale
        return stats.expon(loc=mean - std_dev, scale=std_dev)
    raise ValueError(f"Unknown distribution {distribution!r}; expected one of {DISTRIBUTIONS}")


def generate_samples(
    num_samples: int,
    distribution: str = "normal",
    mean: float = 2.0,
    std_dev: float = 3.0,
    seed: Optional[int] = None,
) -> np.ndarray:
    """Draw reproducible random samples.

    Args:
        num_samples: Number of samples to draw.
        distribution: Distribution name, see :func:`frozen_distribution`.
        mean: Target mean.
        std_dev: Target standard deviation.
        seed: Seed for ``numpy.random.default_rng``; ``None`` for fresh
            entropy.

    Returns:
        1-D float64 array of samples.
    """
    if num_samples < 0:
        raise ValueError(f"num_samples must be non-negative, got {num_samples}")
    dist = frozen_distribution(distribution, mean, std_dev)
    rng = np.random.default_rng(seed)
    logger.info(
        "Drawing %d samples from %s(mean=%s, std_dev=%s), seed=%s",
        num_samples,
        distribution,
        mean,
        std_dev,
        seed,
    )
    return np.asarray(dist.rvs(size=num_samples, random_state=rng), dtype=np.float64)
