"""Square matrix multiply-accumulate kernels: C := C + A * B."""

from __future__ import annotations

from itertools import product
from typing import Callable

import numpy as np

DEFAULT_BLOCK_SIZE = 41

Kernel = Callable[[np.ndarray, np.ndarray, np.ndarray], None]


def _check_operands(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> int:
    """Validate that a, b and c are square matrices of one size; return that size."""
    if a.ndim != 2 or a.shape[0] != a.shape[1]:
        raise ValueError("A must be a square matrix")
    if b.shape != a.shape or c.shape != a.shape:
        raise ValueError("A, B and C must have the same shape")
    if not c.flags.writeable:
        raise ValueError("C must be writable")
    return a.shape[0]


def naive_dgemm(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> None:
    """Update c in place with a @ b, one element at a time with three loops."""
    n = _check_operands(a, b, c)
    rows = a.tolist()
    cols = b.T.tolist()
    for i, j in product(range(n), range(n)):
        cij = float(c[i, j])
        for x, y in zip(rows[i], cols[j]):
            cij += x * y
        c[i, j] = cij


def blocked_dgemm(
    a: np.ndarray, b: np.ndarray, c: np.ndarray, block_size: int = DEFAULT_BLOCK_SIZE
) -> None:
    """Update c in place with a @ b, working on square blocks of block_size."""
    n = _check_operands(a, b, c)
    if block_size < 1:
        raise ValueError("block_size must be positive")
    starts = range(0, n, block_size)
    for i, j, k in product(starts, starts, starts):
        # Slicing trims blocks that run off the edge of the matrix.
        rows = slice(i, i + block_size)
        cols = slice(j, j + block_size)
        inner = slice(k, k + block_size)
        c[rows, cols] += a[rows, inner] @ b[inner, cols]


def blas_dgemm(a: np.ndarray, b: np.ndarray, c: np.ndarray) -> None:
    """Update c in place with a @ b using the optimised library routine."""
    _check_operands(a, b, c)
    c += a @ b


_KERNELS: dict[str, tuple[str, Kernel]] = {
    "naive": ("Naive, three-loop dgemm.", naive_dgemm),
    "blocked": ("Simple blocked dgemm.", blocked_dgemm),
    "blas": ("Reference dgemm.", blas_dgemm),
}


def get_kernel(name: str) -> tuple[str, Kernel]:
    """Return the (description, function) pair of the kernel called name."""
    try:
        return _KERNELS[name]
    except KeyError:
        choices = ", ".join(sorted(_KERNELS))
        raise ValueError(f"unknown kernel {name!r}; choose one of {choices}") from None