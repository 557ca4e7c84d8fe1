"""Worker-pool n-body run: every particle sums forces from all others in shared chunks."""

from __future__ import annotations

import os
import sys
from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from typing import Sequence

from hpcbench.common import (
    NSTEPS,
    Particle,
    SaveWriter,
    Stats,
    apply_force,
    move,
)
from hpcbench.serial import RunResult, _help, _run_main, _Tracker

HELP = _help(n_text="number of particles", workers_text="the number of worker threads")


def _chunks(items: Sequence[Particle], n_workers: int) -> list[Sequence[Particle]]:
    """Split items into small pieces so that idle workers can pick up more work."""
    step = max(1, len(items) // (n_workers * 4))
    return [items[start:start + step] for start in range(0, len(items), step)]


def _forces(chunk: Sequence[Particle], particles: Sequence[Particle]) -> Stats:
    """Compute the acceleration of every particle in chunk from all particles."""
    stats = Stats()
    for p in chunk:
        p.ax = p.ay = 0.0
        for q in particles:
            apply_force(p, q, stats)
    return stats


def _move_all(chunk: Sequence[Particle], size: float) -> None:
    for p in chunk:
        move(p, size)


def simulate_parallel(
    particles: Sequence[Particle],
    size: float,
    n_workers: int = 2,
    steps: int = NSTEPS,
    check: bool = True,
    saver: SaveWriter | None = None,
) -> RunResult:
    """Advance the particles for the given number of steps using a pool of n_workers threads."""
    if n_workers < 1:
        raise ValueError("at least one worker is needed")
    particles = list(particles)
    chunks = _chunks(particles, n_workers)
    tracker = _Tracker(check, saver)

    with ThreadPoolExecutor(max_workers=n_workers) as pool:
        for step in range(steps):
            partial = list(pool.map(lambda chunk: _forces(chunk, particles), chunks))
            stats = reduce(Stats.merge, partial, Stats())
            list(pool.map(lambda chunk: _move_all(chunk, size), chunks))
            tracker.record(step, stats, particles)

    return tracker.result()


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    return _run_main(
        argv,
        lambda particles, size, workers, check, saver: simulate_parallel(
            particles, size, workers, NSTEPS, check, saver
        ),
        HELP,
        worker_default=os.cpu_count() or 1,
        show_threads=True,
    )


if __name__ == "__main__":
    sys.exit(main())