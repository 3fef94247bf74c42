#!/usr/bin/env python3
"""
Marshaling round-trip benchmark against the local reference engine.

Times ``set_matrix`` followed by ``get_matrix`` for real and complex arrays of
a chosen shape. Engine-side costs (parsing, reshaping) are included, so the
numbers bound the overhead of the protocol rather than a real engine link.
"""

from __future__ import annotations

import argparse
import sys
import time
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Sequence

import numpy as np

from matbridge import LocalEngine, MatrixProcessor, MatrixValue


@dataclass
class BenchmarkResult:
    kind: str
    shape: Sequence[int]
    min_s: float
    mean_s: float
    iterations: int
    mb_per_s: Optional[float]


def build_matrix(shape: Sequence[int], *, complex_values: bool, seed: int) -> MatrixValue:
    rng = np.random.default_rng(seed)
    arr = rng.normal(size=tuple(shape))
    if complex_values:
        arr = arr + 1j * rng.normal(size=tuple(shape))
    return MatrixValue.from_array(arr)


def bench(fn: Callable[[], None], *, iterations: int, warmup: int) -> Iterable[float]:
    timings = []
    for step in range(iterations + warmup):
        start = time.perf_counter()
        fn()
        elapsed = time.perf_counter() - start
        if step >= warmup:
            timings.append(elapsed)
    return timings


def run(
    matrix: MatrixValue,
    *,
    kind: str,
    iterations: int,
    warmup: int,
) -> BenchmarkResult:
    processor = MatrixProcessor(LocalEngine())

    def roundtrip() -> None:
        processor.set_matrix("bench", matrix)
        processor.get_matrix("bench")

    timings = list(bench(roundtrip, iterations=iterations, warmup=warmup))
    min_s = min(timings)
    mean_s = sum(timings) / len(timings)
    parts = 1 if matrix.is_real else 2
    megabytes = matrix.size * 8 * parts / 1e6
    return BenchmarkResult(
        kind=kind,
        shape=matrix.lengths,
        min_s=min_s,
        mean_s=mean_s,
        iterations=iterations,
        mb_per_s=megabytes / min_s if min_s > 0 else None,
    )


def format_results(results: List[BenchmarkResult]) -> str:
    lines = ["kind     shape            min (ms)   mean (ms)   MB/s"]
    for res in results:
        rate = f"{res.mb_per_s:8.1f}" if res.mb_per_s is not None else "     n/a"
        shape = "x".join(str(dim) for dim in res.shape)
        lines.append(
            f"{res.kind:<8} {shape:<16} {res.min_s * 1e3:9.3f} {res.mean_s * 1e3:10.3f}  {rate}"
        )
    return "\n".join(lines)


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Benchmark matbridge set/get round trips on the local engine."
    )
    parser.add_argument(
        "--shape",
        type=int,
        nargs="+",
        default=[64, 64, 16],
        help="Array shape to marshal (default: 64 64 16).",
    )
    parser.add_argument(
        "--kind",
        choices=("real", "complex", "all"),
        default="all",
        help="Value kinds to benchmark (default: all).",
    )
    parser.add_argument(
        "--seed", type=int, default=2024, help="Random seed for inputs (default: 2024)."
    )
    parser.add_argument(
        "--iterations", type=int, default=30, help="Timed iterations per kind (default: 30)."
    )
    parser.add_argument(
        "--warmup", type=int, default=5, help="Warmup iterations to discard (default: 5)."
    )
    return parser.parse_args(argv)


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    requested = ("real", "complex") if args.kind == "all" else (args.kind,)
    results = []
    for kind in requested:
        matrix = build_matrix(args.shape, complex_values=kind == "complex", seed=args.seed)
        results.append(run(matrix, kind=kind, iterations=args.iterations, warmup=args.warmup))
    if not results:
        print("Nothing was benchmarked.", file=sys.stderr)
        return 1
    print(format_results(results))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
