"""Single-threaded n-body run with correctness statistics."""

from __future__ import annotations

import contextlib
import sys
from dataclasses import dataclass
from itertools import combinations
from typing import Callable, Sequence

from hpcbench.common import (
    NSTEPS,
    SAVEFREQ,
    Particle,
    SaveWriter,
    Stats,
    apply_force,
    find_option,
    init_particles,
    move,
    read_int,
    read_string,
    read_timer,
    system_size,
)


def _help(n_text: str = "the number of particles", workers_text: str | None = None) -> str:
    lines = ["Options:", "-h to see this help", f"-n <int> to set {n_text}"]
    if workers_text is not None:
        lines.append(f"-p <int> to set {workers_text}")
    lines += [
        "-o <filename> to specify the output file name",
        "-s <filename> to specify a summary file name",
        "-no turns off all correctness checks and particle output",
    ]
    return "\n".join(lines) + "\n"


HELP = _help()


@dataclass(frozen=True)
class RunResult:
    """Minimum and mean neighbour distance over a run, or None when checks were off."""

    absmin: float | None = None
    absavg: float | None = None

    @property
    def checked(self) -> bool:
        """Whether the run collected statistics."""
        return self.absmin is not None


class _Tracker:
    """Accumulates per-step statistics and saves frames when checks are on."""

    def __init__(self, check: bool, saver: SaveWriter | None = None) -> None:
        self.check = check
        self.saver = saver
        self.absmin = 1.0
        self.total = 0.0
        self.count = 0

    def record(self, step: int, stats: Stats, particles: Sequence[Particle]) -> None:
        if not self.check:
            return
        if stats.navg:
            self.total += stats.davg / stats.navg
            self.count += 1
        self.absmin = min(self.absmin, stats.dmin)
        if self.saver is not None and step % SAVEFREQ == 0:
            self.saver.write(particles)

    def result(self) -> RunResult:
        if not self.check:
            return RunResult()
        return RunResult(self.absmin, self.total / self.count if self.count else 0.0)


def simulate(
    particles: Sequence[Particle],
    size: float,
    steps: int = NSTEPS,
    check: bool = True,
    saver: SaveWriter | None = None,
) -> RunResult:
    """Advance the particles for the given number of steps in one thread."""
    tracker = _Tracker(check, saver)
    for step in range(steps):
        stats = Stats()
        for p in particles:
            p.ax = p.ay = 0.0
        for p, q in combinations(particles, 2):
            apply_force(p, q, stats)
        for p in particles:
            move(p, size)
        tracker.record(step, stats, particles)
    return tracker.result()


def report(n: int, seconds: float, result: RunResult, threads: int | None = None) -> str:
    """Return the summary text printed at the end of a run."""
    if threads is None:
        text = f"n = {n}, simulation time = {seconds:g} seconds"
    else:
        text = f"n = {n},threads = {threads}, simulation time = {seconds:g} seconds"
    if result.checked:
        text += f", absmin = {result.absmin:f}, absavg = {result.absavg:f}"
        if result.absmin < 0.4:
            text += (
                "\nThe minimum distance is below 0.4 meaning that some particle "
                "is not interacting"
            )
        if result.absavg < 0.8:
            text += (
                "\nThe average distance is below 0.8 meaning that most particles "
                "are not interacting"
            )
    return text + "\n"


_Runner = Callable[[list, float, "int | None", bool, "SaveWriter | None"], RunResult]


def _run_main(
    argv: Sequence[str] | None,
    runner: _Runner,
    help_text: str,
    worker_default: int | None = None,
    show_threads: bool = False,
) -> int:
    """Shared command-line driver; workers are read from -p when worker_default is set."""
    argv = list(sys.argv[1:] if argv is None else argv)
    if find_option(argv, "-h") is not None:
        print(help_text, end="")
        return 0

    n = read_int(argv, "-n", 1000)
    workers = read_int(argv, "-p", worker_default) if worker_default is not None else None
    savename = read_string(argv, "-o")
    sumname = read_string(argv, "-s")
    check = find_option(argv, "-no") is None

    if workers is not None and workers < 1:
        print("the number of threads must be positive", file=sys.stderr)
        return 1

    with contextlib.ExitStack() as stack:
        fsave = stack.enter_context(open(savename, "w")) if savename else None
        fsum = stack.enter_context(open(sumname, "a")) if sumname else None

        size = system_size(n)
        particles = init_particles(n, size)
        saver = SaveWriter(fsave, size) if fsave is not None else None

        start = read_timer()
        result = runner(particles, size, workers, check, saver)
        seconds = read_timer() - start

        print(report(n, seconds, result, workers if show_threads else None), end="")
        if fsum is not None:
            counts = f"{n}" if workers is None else f"{n} {workers}"
            fsum.write(f"{counts} {seconds:g}\n")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    return _run_main(
        argv,
        lambda particles, size, _workers, check, saver: simulate(
            particles, size, NSTEPS, check, saver
        ),
        HELP,
    )


if __name__ == "__main__":
    sys.exit(main())