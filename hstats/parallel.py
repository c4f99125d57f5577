"""Partition-and-merge accumulation.

Accumulators are plain values with no locking, so parallel ingestion works
by splitting the samples into disjoint chunks, building one accumulator per
chunk in a worker, and folding the partial results with
:meth:`HistogramAccumulator.merge`. Because merging is associative and
commutative the result does not depend on the chunking or on the order in
which workers finish.

Example:
    >>> from hstats.parallel import accumulate_parallel
    >>> from hstats.sampling import generate_samples
    >>> samples = generate_samples(1_000_000, seed=42)
    >>> hist = accumulate_parallel(samples, -8.0, 10.0, 30, n_workers=4)
    >>> hist.count
    1000000
"""

from concurrent.futures import ProcessPoolExecutor, ThreadPoolExecutor, as_completed
from functools import partial, reduce
import logging
import math
import time
from typing import Any, Iterable, List, Optional, Sequence, Union

import numpy as np
import psutil
from tqdm import tqdm

from hstats.histogram import HistogramAccumulator
from hstats.numeric import NumericDomain

logger = logging.getLogger(__name__)

EXECUTORS = {"thread": ThreadPoolExecutor, "process": ProcessPoolExecutor}


def default_worker_count() -> int:
    """Number of physical cores, falling back to 1 when undetectable."""
    return psutil.cpu_count(logical=False) or psutil.cpu_count(logical=True) or 1


def chunk_samples(
    samples: Sequence[Any],
    n_chunks: Optional[int] = None,
    chunk_size: Optional[int] = None,
) -> List[Sequence[Any]]:
    """Split samples into disjoint contiguous chunks.

    Exactly one of ``n_chunks`` and ``chunk_size`` is required. With
    ``n_chunks`` the chunk size is ``ceil(len(samples) / n_chunks)``, so at
    most ``n_chunks`` chunks are produced.

    Args:
        samples: Sliceable sequence or array.
        n_chunks: Desired number of chunks.
        chunk_size: Samples per chunk; the last chunk may be shorter.

    Returns:
        List of slices covering ``samples`` in order. Empty for empty input.

    Raises:
        ValueError: If both or neither sizing argument is given, or a size is
            not positive.
    """
    if (n_chunks is None) == (chunk_size is None):
        raise ValueError("Specify exactly one of n_chunks and chunk_size")
    n_items = len(samples)
    if chunk_size is None:
        if n_chunks is None or n_chunks < 1:
            raise ValueError(f"n_chunks must be positive, got {n_chunks}")
        chunk_size = max(1, math.ceil(n_items / n_chunks))
    elif chunk_size < 1:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    return [samples[i : i + chunk_size] for i in range(0, n_items, chunk_size)]


def merge_all(accumulators: Iterable[HistogramAccumulator]) -> HistogramAccumulator:
    """Fold accumulators together with :meth:`HistogramAccumulator.merge`.

    Raises:
        ValueError: If no accumulator is given.
        IncompatibleHistogramError: If any two domains differ.
    """
    items = list(accumulators)
    if not items:
        raise ValueError("merge_all() requires at least one accumulator")
    return reduce(lambda left, right: left.merge(right), items)


def accumulate(
    samples: Union[Iterable[Any], np.ndarray],
    start: Any,
    end: Any,
    bin_count: int,
    numeric: Union[str, NumericDomain, None] = None,
    nan_policy: str = "count",
) -> HistogramAccumulator:
    """Build a single accumulator over ``samples``.

    Module-level so it can be shipped to worker processes.
    """
    hist = HistogramAccumulator(start, end, bin_count, numeric=numeric, nan_policy=nan_policy)
    hist.add_many(samples)
    return hist


def accumulate_parallel(
    samples: Sequence[Any],
    start: Any,
    end: Any,
    bin_count: int,
    n_workers: Optional[int] = None,
    chunk_size: Optional[int] = None,
    executor: str = "thread",
    numeric: Union[str, NumericDomain, None] = None,
    nan_policy: str = "count",
    progress: bool = False,
) -> HistogramAccumulator:
    """Accumulate ``samples`` in parallel and merge the partial histograms.

    Args:
        samples: Sliceable sequence or array of samples.
        start: Lower bound of the binned domain.
        end: Upper bound of the binned domain.
        bin_count: Number of bins.
        n_workers: Pool size; defaults to the physical core count.
        chunk_size: Samples per chunk; defaults to splitting into
            ``2 * n_workers`` chunks.
        executor: ``"thread"`` or ``"process"``.
        numeric: Numeric domain for every partial accumulator.
        nan_policy: NaN policy for every partial accumulator.
        progress: Show a tqdm progress bar over completed chunks.

    Returns:
        Merged accumulator, equal in counts to a single-pass accumulation.

    Raises:
        HistogramConfigError: If the domain is invalid (raised before any
            worker starts).
        ValueError: For an unknown executor or a non-positive worker count.
    """
    # Validates the domain up front and serves as the result for empty input
    template = HistogramAccumulator(start, end, bin_count, numeric=numeric, nan_policy=nan_policy)

    if executor not in EXECUTORS:
        raise ValueError(f"executor must be one of {sorted(EXECUTORS)}, got {executor!r}")
    if n_workers is None:
        n_workers = default_worker_count()
    if n_workers < 1:
        raise ValueError(f"n_workers must be positive, got {n_workers}")

    if chunk_size is None:
        chunks = chunk_samples(samples, n_chunks=n_workers * 2)
    else:
        chunks = chunk_samples(samples, chunk_size=chunk_size)
    if not chunks:
        return template

    logger.info(
        "Accumulating %d samples in %d chunks on %d %s workers",
        len(samples),
        len(chunks),
        n_workers,
        executor,
    )

    work = partial(
        accumulate,
        start=template.start,
        end=template.end,
        bin_count=bin_count,
        numeric=template.numeric,
        nan_policy=nan_policy,
    )
    partials: List[Optional[HistogramAccumulator]] = [None] * len(chunks)

    comp_start = time.time()
    with EXECUTORS[executor](max_workers=n_workers) as pool:
        futures = {pool.submit(work, chunk): idx for idx, chunk in enumerate(chunks)}
        with tqdm(total=len(chunks), desc="Accumulating", disable=not progress) as pbar:
            for future in as_completed(futures):
                partials[futures[future]] = future.result()
                pbar.update(1)
    elapsed = time.time() - comp_start

    merged = merge_all(p for p in partials if p is not None)
    logger.debug("Merged %d partial histograms in %.3fs", len(chunks), elapsed)
    return merged
