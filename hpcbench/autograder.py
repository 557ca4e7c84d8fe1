"""Grades serial complexity and parallel scaling from summary files."""

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Sequence, TextIO

from hpcbench.common import find_option, read_string

HELP = (
    "Options:\n"
    "-h to see this help \n"
    "-s <filename> to specify name of summary file \n"
    "-v to specify what to autograde (serial,pthreads,openmp,mpi) \n"
)

PARALLEL_KINDS = ("pthreads", "openmp", "mpi")


@dataclass(frozen=True)
class SerialGrade:
    """Empirical complexity exponents of a serial run and the resulting grade."""

    slopes: list[float]
    fit_slope: float
    grade: float


@dataclass(frozen=True)
class ScalingGrade:
    """Strong and weak scaling figures of a parallel run and the resulting grade."""

    threads: list[int]
    speedup: list[float]
    strong_efficiency: list[float]
    weak_efficiency: list[float]
    strong_average: float
    weak_average: float
    grade: float


def read_serial_summary(stream: TextIO) -> list[tuple[int, float]]:
    """Parse "n time" records."""
    tokens = stream.read().split()
    if len(tokens) % 2:
        raise ValueError("serial summary must hold pairs of size and time")
    return [(int(n), float(t)) for n, t in zip(tokens[::2], tokens[1::2])]


def read_parallel_summary(stream: TextIO) -> list[tuple[int, int, float]]:
    """Parse a serial "n time" record followed by "n procs time" records."""
    tokens = stream.read().split()
    if len(tokens) < 2 or (len(tokens) - 2) % 3:
        raise ValueError("parallel summary must start with a serial record then triples")
    records = [(int(tokens[0]), 1, float(tokens[1]))]
    rest = tokens[2:]
    records.extend(
        (int(n), int(p), float(t)) for n, p, t in zip(rest[::3], rest[1::3], rest[2::3])
    )
    return records


def serial_grade(records: Sequence[tuple[int, float]]) -> SerialGrade:
    """Estimate the exponent of time against size and grade it."""
    if len(records) < 2:
        raise ValueError("at least two records are needed")
    ln = [math.log(n) for n, _ in records]
    lt = [math.log(t) for _, t in records]
    slopes = [
        (t1 - t0) / (n1 - n0)
        for (n0, t0), (n1, t1) in zip(zip(ln, lt), zip(ln[1:], lt[1:]))
    ]
    count = len(records)
    sx, sy = sum(ln), sum(lt)
    sxy = sum(x * y for x, y in zip(ln, lt))
    sx2 = sum(x * x for x in ln)
    b2 = (sxy - sx * sy / count) / (sx2 - sx * sx / count)

    if b2 < 1.3:
        grade = 100.0
    elif b2 < 1.5:
        grade = 75.0 + (1.5 - b2) / 0.2 * 25.0
    elif b2 < 2:
        grade = (2 - b2) / 0.5 * 75.0
    else:
        grade = 0.0
    return SerialGrade(slopes, b2, grade)


def efficiency_grade(value: float) -> float:
    """Map an average scaling efficiency to a grade out of 100."""
    if value > 0.8:
        return 100.0
    if value > 0.5:
        return 75.0 + 25.0 * (value - 0.5) / 0.3
    return value / 0.5 * 75.0


def parallel_grade(records: Sequence[tuple[int, int, float]]) -> ScalingGrade:
    """Compute strong and weak scaling from timed records and grade them."""
    num = len(records) // 2
    if num < 1:
        raise ValueError("at least two records are needed")
    t = [time for _, _, time in records]
    p = [procs for _, procs, _ in records]

    speedup = [t[0] / t[1]]
    strong = [t[0] / t[1]]
    weak = [t[0] / t[1]]
    for i in range(2, num + 1):
        speedup.append(t[0] / t[i])
        strong.append(speedup[-1] / p[i])
        weak.append(t[0] / t[i + num - 1])

    strong_avg = sum(strong) / num
    weak_avg = sum(weak) / num
    grade = 0.5 * efficiency_grade(strong_avg) + 0.5 * efficiency_grade(weak_avg)
    return ScalingGrade(p[1:num + 1], speedup, strong, weak, strong_avg, weak_avg, grade)


def _format_serial(result: SerialGrade) -> str:
    return (
        "\nSerial code is O(N^slope)"
        "\nSlope estimates are :"
        + "".join(f" {s:f}" for s in result.slopes)
        + f"\nSlope estimate for line fit is: {result.fit_slope:f}\n"
        + f"Serial Grade = {result.grade:7.2f}\n\n"
    )


def _format_parallel(name: str, result: ScalingGrade) -> str:
    threads = "".join(f" {p:7d}" for p in result.threads)
    return (
        "\nStrong scaling estimates are :\n"
        + "".join(f" {v:7.2f}" for v in result.speedup) + " (speedup)\n"
        + "".join(f" {v:7.2f}" for v in result.strong_efficiency)
        + " (efficiency)    for\n"
        + threads + " threads/processors\n\n"
        + f"Average strong scaling efficiency: {result.strong_average:7.2f} \n\n"
        + "Weak scaling estimates are :\n"
        + "".join(f" {v:7.2f}" for v in result.weak_efficiency)
        + " (efficiency)    for\n"
        + threads + " threads/processors\n\n"
        + f"Average weak scaling efficiency: {result.weak_average:7.2f} \n\n"
        + f"\n{name} Grade = {result.grade:7.2f}\n\n"
    )


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    argv = list(sys.argv[1:] if argv is None else argv)
    if find_option(argv, "-h") is not None:
        print(HELP, end="")
        return 0

    savename = read_string(argv, "-s")
    kind = read_string(argv, "-v")
    if kind is None:
        print("-v is required", file=sys.stderr)
        return 1
    if kind != "serial" and kind not in PARALLEL_KINDS:
        return 0
    if savename is None:
        print("-s is required", file=sys.stderr)
        return 1

    try:
        with open(savename) as stream:
            if kind == "serial":
                text = _format_serial(serial_grade(read_serial_summary(stream)))
            else:
                text = _format_parallel(kind, parallel_grade(read_parallel_summary(stream)))
    except (OSError, ValueError, ZeroDivisionError) as exc:
        print(exc, file=sys.stderr)
        return 1
    print(text, end="")
    return 0


if __name__ == "__main__":
    sys.exit(main())