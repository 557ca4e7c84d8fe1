import io

import numpy as np
import pytest

from hpcbench.benchmark import (
    ALL_TEST_SIZES,
    DEFAULT_TEST_SIZES,
    SizeResult,
    fill,
    main,
    measure,
    parse_sizes,
    reference_dgemm,
    run,
    within_error_bound,
)
from hpcbench.dgemm import blas_dgemm, naive_dgemm


def _sloppy_kernel(a, b, c):
    c += a @ b + 1e-3


def test_parse_sizes_defaults():
    assert parse_sizes([]) == sorted(DEFAULT_TEST_SIZES)
    assert parse_sizes([], True) == sorted(ALL_TEST_SIZES)
    assert len(parse_sizes([], True)) == 96


def test_parse_sizes_sorts_arguments():
    assert parse_sizes(["64", "31", " 32", "+7"]) == [7, 31, 32, 64]


@pytest.mark.parametrize("arg", ["0", "-5", "12abc", "abc", "", "3.5", "4 "])
def test_parse_sizes_rejects(arg):
    with pytest.raises(ValueError, match="positive numbers"):
        parse_sizes(["10", arg])


def test_fill_shape_and_range():
    m = fill(np.random.default_rng(1), 20)
    assert m.shape == (20, 20)
    assert m.flags.f_contiguous
    assert m.min() >= -3.0
    assert m.max() < 1.0


def test_fill_is_reproducible_with_seed():
    first = fill(np.random.default_rng(5), 6)
    second = fill(np.random.default_rng(5), 6)
    np.testing.assert_array_equal(first, second)


def test_reference_dgemm_scales_product():
    rng = np.random.default_rng(2)
    a, b, c = fill(rng, 5), fill(rng, 5), fill(rng, 5)
    original = c.copy()
    reference_dgemm(1.0, a, b, c)
    reference_dgemm(-1.0, a, b, c)
    np.testing.assert_allclose(c, original, atol=1e-12)


def test_measure_returns_positive_rate():
    rng = np.random.default_rng(3)
    a, b, c = fill(rng, 8), fill(rng, 8), fill(rng, 8)
    assert measure(blas_dgemm, a, b, c, 0.01) > 0


def test_measure_rejects_bad_timeout():
    rng = np.random.default_rng(3)
    a, b, c = fill(rng, 2), fill(rng, 2), fill(rng, 2)
    with pytest.raises(ValueError):
        measure(blas_dgemm, a, b, c, 0)


@pytest.mark.parametrize("kernel", [blas_dgemm, naive_dgemm])
def test_correct_kernels_pass_bound(kernel):
    rng = np.random.default_rng(4)
    a, b, c = fill(rng, 10), fill(rng, 10), fill(rng, 10)
    a0 = a.copy()
    assert within_error_bound(kernel, a, b, c) is True
    np.testing.assert_array_equal(a, a0)


def test_sloppy_kernel_fails_bound():
    rng = np.random.default_rng(4)
    a, b, c = fill(rng, 10), fill(rng, 10), fill(rng, 10)
    assert within_error_bound(_sloppy_kernel, a, b, c) is False


def test_run_reports_each_size():
    out = io.StringIO()
    results = run(blas_dgemm, [2, 4], 56.0, out, np.random.default_rng(0))
    assert [r.size for r in results] == [2, 4]
    assert all(isinstance(r, SizeResult) and r.mflops > 0 for r in results)
    for r in results:
        assert r.percentage == pytest.approx(r.mflops / 1000 * 100 / 56.0)
    lines = out.getvalue().splitlines()
    assert lines[0].startswith("Size: 2\tMflops/s: ")
    assert lines[1].startswith("Size: 4\tMflops/s: ")
    assert lines[2].startswith("Average percentage of Peak = ")


def test_run_raises_on_wrong_kernel():
    with pytest.raises(ArithmeticError):
        run(_sloppy_kernel, [3], 56.0, io.StringIO(), np.random.default_rng(0))


def test_run_rejects_empty_sizes():
    with pytest.raises(ValueError):
        run(blas_dgemm, [], 56.0, io.StringIO(), np.random.default_rng(0))


def test_main_prints_description(capsys):
    assert main(["--kernel", "blas", "3", "2"]) == 0
    output = capsys.readouterr().out
    assert output.startswith("Description:\tReference dgemm.\n\n")
    assert output.index("Size: 2") < output.index("Size: 3")


def test_main_unknown_kernel(capsys):
    assert main(["--kernel", "nope", "2"]) == 1
    assert "nope" in capsys.readouterr().err


def test_main_bad_size(capsys):
    assert main(["--kernel", "blas", "0"]) == 1
    assert "positive numbers" in capsys.readouterr().err