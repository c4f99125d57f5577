"""Command line demo: sample a distribution, accumulate, print the histogram.

Usage::

    hstats --samples 5000000 --bins 30 --start -8 --end 10
    hstats --config run.yaml --workers 8 --executor process
    python -m hstats --distribution lognormal --mean 3 --std-dev 1.5
"""

import argparse
import logging
from pathlib import Path
import sys
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
import yaml

from hstats._version import __version__
from hstats.config import HstatsConfig
from hstats.histogram import HistogramAccumulator
from hstats.parallel import accumulate_parallel
from hstats.rendering import render_histogram
from hstats.sampling import DISTRIBUTIONS, generate_samples

logger = logging.getLogger(__name__)

# argparse destination -> dunder path in HstatsConfig
_OVERRIDES = {
    "start": "histogram__start",
    "end": "histogram__end",
    "bins": "histogram__bin_count",
    "numeric": "histogram__numeric",
    "distribution": "sampling__distribution",
    "mean": "sampling__mean",
    "std_dev": "sampling__std_dev",
    "samples": "sampling__num_samples",
    "seed": "sampling__seed",
    "workers": "parallel__n_workers",
    "chunk_size": "parallel__chunk_size",
    "executor": "parallel__executor",
    "precision": "display__precision",
    "bar_char": "display__bar_char",
    "log_level": "logging__level",
}


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="hstats",
        description="Accumulate random samples into a streaming histogram and print it",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--start", type=float, help="Lower bound of the binned range")
    parser.add_argument("--end", type=float, help="Upper bound of the binned range")
    parser.add_argument("--bins", type=int, help="Number of bins")
    parser.add_argument(
        "--numeric", choices=["float64", "float32", "decimal"], help="Numeric domain"
    )
    parser.add_argument("--distribution", choices=DISTRIBUTIONS, help="Sample distribution")
    parser.add_argument("--mean", type=float, help="Target mean of the samples")
    parser.add_argument("--std-dev", type=float, help="Target standard deviation")
    parser.add_argument("--samples", type=int, help="Number of samples")
    parser.add_argument("--seed", type=int, help="Random seed")
    parser.add_argument(
        "--parallel", action="store_true", help="Accumulate in parallel and merge"
    )
    parser.add_argument("--workers", type=int, help="Worker count (implies --parallel)")
    parser.add_argument("--chunk-size", type=int, help="Samples per chunk (implies --parallel)")
    parser.add_argument(
        "--executor", choices=["thread", "process"], help="Worker pool type (implies --parallel)"
    )
    parser.add_argument("--progress", action="store_true", help="Show a progress bar")
    parser.add_argument("--precision", type=int, help="Digits after the decimal point")
    parser.add_argument("--bar-char", help="Glyph used to draw bars")
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level"
    )
    return parser


def load_config(args: argparse.Namespace) -> HstatsConfig:
    """Combine the optional YAML file with command line overrides.

    Raises:
        FileNotFoundError: If ``--config`` points to a missing file.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the file does not hold a mapping.
        ValidationError: If the combined configuration is invalid.
    """
    config = HstatsConfig.from_yaml(args.config) if args.config else HstatsConfig()

    overrides: Dict[str, Any] = {}
    for dest, path in _OVERRIDES.items():
        value = getattr(args, dest)
        if value is not None:
            overrides[path] = value
    if args.parallel or args.workers or args.chunk_size or args.executor:
        overrides["parallel__enabled"] = True
    if args.progress:
        overrides["parallel__progress"] = True

    return config.override(**overrides) if overrides else config


def run(config: HstatsConfig) -> HistogramAccumulator:
    """Generate samples and accumulate them as the configuration describes."""
    sampling = config.sampling
    samples = generate_samples(
        sampling.num_samples,
        distribution=sampling.distribution,
        mean=sampling.mean,
        std_dev=sampling.std_dev,
        seed=sampling.seed,
    )

    settings = config.histogram
    logger.info("Number of random samples: %d", len(samples))
    logger.info("Number of bins: %d", settings.bin_count)
    logger.info("Start: %s", settings.start)
    logger.info("End: %s", settings.end)

    if config.parallel.enabled:
        return accumulate_parallel(
            samples,
            settings.start,
            settings.end,
            settings.bin_count,
            n_workers=config.parallel.n_workers,
            chunk_size=config.parallel.chunk_size,
            executor=config.parallel.executor,
            numeric=settings.numeric,
            nan_policy=settings.nan_policy,
            progress=config.parallel.progress,
        )

    hist = settings.build()
    hist.add_many(samples)
    return hist


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point of the ``hstats`` command.

    Returns:
        0 on success, 2 on configuration errors.
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args)
    except (ValidationError, FileNotFoundError, ValueError, yaml.YAMLError) as e:
        print(f"hstats: invalid configuration: {e}", file=sys.stderr)
        return 2

    config.setup_logging()

    try:
        hist = run(config)
    except ValueError as e:
        print(f"hstats: {e}", file=sys.stderr)
        return 2

    sys.stdout.write(render_histogram(hist, config.display))
    return 0
