"""Timing and correctness harness for the dgemm kernels."""

from __future__ import annotations

import argparse
import re
import sys
import time
from dataclasses import dataclass
from typing import Iterable, Sequence, TextIO

import numpy as np

from hpcbench.dgemm import Kernel, get_kernel

DEFAULT_MAX_SPEED = 56.0
DEFAULT_TIMEOUT = 0.1

# Sizes chosen to show performance dips near multiples of powers of two.
ALL_TEST_SIZES = [
    31, 32, 33, 63, 64, 65, 95, 96, 97, 127, 128, 129, 159, 160, 161, 191,
    192, 193, 223, 224, 225, 255, 256, 257, 287, 288, 289, 319, 320, 321, 351, 352,
    353, 383, 384, 385, 415, 416, 417, 447, 448, 449, 479, 480, 481, 511, 512, 513,
    543, 544, 545, 575, 576, 577, 607, 608, 609, 639, 640, 641, 671, 672, 673, 703,
    704, 705, 735, 736, 737, 767, 768, 769, 799, 800, 801, 831, 832, 833, 863, 864,
    865, 895, 896, 897, 927, 928, 929, 959, 960, 961, 991, 992, 993, 1023, 1024, 1025,
]
DEFAULT_TEST_SIZES = [
    31, 32, 96, 97, 127, 128, 129, 191, 192, 229, 255, 256, 257,
    319, 320, 321, 417, 479, 480, 511, 512, 639, 640, 767, 768, 769,
]

_INTEGER = re.compile(r"\s*[+-]?\d+")


@dataclass(frozen=True)
class SizeResult:
    """Measured rate for one matrix size."""

    size: int
    mflops: float
    percentage: float


def parse_sizes(args: Sequence[str] = (), all_sizes: bool = False) -> list[int]:
    """Return the sorted test sizes given on the command line, or the built-in set."""
    if not args:
        return sorted(ALL_TEST_SIZES if all_sizes else DEFAULT_TEST_SIZES)
    sizes = []
    for arg in args:
        if not _INTEGER.fullmatch(arg) or int(arg) < 1:
            raise ValueError("all arguments must be positive numbers")
        sizes.append(int(arg))
    return sorted(sizes)


def fill(rng: np.random.Generator, n: int) -> np.ndarray:
    """Return an n-by-n column-major matrix of random values."""
    values = 2 * rng.uniform(-1.0, 1.0, n * n) - 1
    return values.reshape((n, n), order="F")


def reference_dgemm(alpha: float, a: np.ndarray, b: np.ndarray, c: np.ndarray) -> None:
    """Update c in place with alpha * a @ b."""
    c += alpha * (a @ b)


def measure(
    kernel: Kernel,
    a: np.ndarray,
    b: np.ndarray,
    c: np.ndarray,
    timeout: float = DEFAULT_TIMEOUT,
) -> float:
    """Return the kernel's rate in Gflop/s, doubling the call count until timeout is reached."""
    if timeout <= 0:
        raise ValueError("timeout must be positive")
    n = a.shape[0]
    iterations = 1
    while True:
        kernel(a, b, c)  # warm-up
        start = time.perf_counter()
        for _ in range(iterations):
            kernel(a, b, c)
        seconds = time.perf_counter() - start
        if seconds >= timeout:
            return 2e-9 * iterations * n * n * n / seconds
        iterations *= 2


def within_error_bound(kernel: Kernel, a: np.ndarray, b: np.ndarray, c: np.ndarray) -> bool:
    """Check the kernel's product against the componentwise error bound.

    c is used as scratch space and overwritten; a and b are left as they are.
    """
    n = a.shape[0]
    c.fill(0.0)
    kernel(a, b, c)
    reference_dgemm(-1.0, a, b, c)
    abs_a, abs_b = np.abs(a), np.abs(b)
    np.abs(c, out=c)
    eps = np.finfo(np.float64).eps
    reference_dgemm(-3.0 * eps * n, abs_a, abs_b, c)
    return not bool((c > 0).any())


def run(
    kernel: Kernel,
    sizes: Iterable[int],
    max_speed: float = DEFAULT_MAX_SPEED,
    out: TextIO | None = None,
    rng: np.random.Generator | None = None,
) -> list[SizeResult]:
    """Benchmark and verify the kernel at each size, writing a report line per size.

    Raises ArithmeticError if the kernel's error exceeds the bound.
    """
    out = sys.stdout if out is None else out
    rng = np.random.default_rng() if rng is None else rng
    sizes = list(sizes)
    if not sizes:
        raise ValueError("at least one size is needed")

    results = []
    for n in sizes:
        a, b, c = fill(rng, n), fill(rng, n), fill(rng, n)
        gflops = measure(kernel, a, b, c)
        result = SizeResult(n, gflops * 1000, gflops * 100 / max_speed)
        results.append(result)
        out.write(
            f"Size: {n}\tMflops/s: {result.mflops:.2f}\tPercentage: {result.percentage:.2f}\n"
        )
        if not within_error_bound(kernel, a, b, c):
            raise ArithmeticError(
                "Error in matrix multiply exceeds componentwise error bounds."
            )

    average = sum(r.percentage for r in results) / len(results)
    out.write(f"Average percentage of Peak = {average:.2f}\n")
    return results


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(description="Benchmark a square dgemm kernel.")
    parser.add_argument("sizes", nargs="*", help="matrix sizes to test")
    parser.add_argument("--kernel", default="blocked", help="naive, blocked or blas")
    parser.add_argument("--max-speed", type=float, default=DEFAULT_MAX_SPEED,
                        help="peak speed of the CPU in GF/s")
    parser.add_argument("--all-sizes", action="store_true",
                        help="test an extended set of sizes")
    args = parser.parse_args(argv)

    try:
        description, kernel = get_kernel(args.kernel)
        sizes = parse_sizes(args.sizes, args.all_sizes)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        return 1

    print(f"Description:\t{description}\n")
    try:
        run(kernel, sizes, args.max_speed)
    except ArithmeticError as exc:
        print(f"*** FAILURE *** {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())