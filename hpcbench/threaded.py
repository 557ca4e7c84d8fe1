"""Multi-threaded n-body run that computes each pair force once."""

from __future__ import annotations

import sys
import threading
from typing import Sequence

from hpcbench.barrier import Barrier
from hpcbench.common import (
    NSTEPS,
    SAVEFREQ,
    Particle,
    SaveWriter,
    Stats,
    apply_force,
    move,
)
from hpcbench.serial import RunResult, _help, _run_main, _Tracker

HELP = _help(workers_text="the number of threads")


def _pair_forces(
    particles: Sequence[Particle], first: int, last: int, stats: Stats
) -> list[list[float]]:
    """Return per-particle acceleration from pairs (i, j) with first <= i < last and i < j."""
    accel = [[0.0, 0.0] for _ in particles]
    for i, p in enumerate(particles[first:last], start=first):
        probe = Particle(p.x, p.y)
        for j, q in enumerate(particles[i + 1:], start=i + 1):
            probe.ax = probe.ay = 0.0
            apply_force(probe, q, stats)
            accel[i][0] += probe.ax
            accel[i][1] += probe.ay
            accel[j][0] -= probe.ax
            accel[j][1] -= probe.ay
    return accel


def simulate_threaded(
    particles: Sequence[Particle],
    size: float,
    n_threads: int = 2,
    steps: int = NSTEPS,
    check: bool = True,
    saver: SaveWriter | None = None,
) -> RunResult:
    """Advance the particles using n_threads threads, each owning a contiguous slice."""
    if n_threads < 1:
        raise ValueError("at least one thread is needed")
    n = len(particles)
    per_thread = (n + n_threads - 1) // n_threads
    barrier = Barrier(n_threads)
    lock = threading.Lock()
    outcomes: list[RunResult] = []
    errors: list[BaseException] = []

    def worker(thread_id: int) -> None:
        try:
            _run(thread_id)
        except BaseException as exc:  # reported in the calling thread
            errors.append(exc)
            raise

    def _run(thread_id: int) -> None:
        first = min(thread_id * per_thread, n)
        last = min((thread_id + 1) * per_thread, n)
        own = particles[first:last]
        tracker = _Tracker(check)

        for step in range(steps):
            stats = Stats()
            for p in own:
                p.ax = p.ay = 0.0
            accel = _pair_forces(particles, first, last, stats)
            barrier.wait()

            with lock:
                for p, (ax, ay) in zip(particles, accel):
                    p.ax += ax
                    p.ay += ay
            barrier.wait()

            tracker.record(step, stats, own)
            for p in own:
                move(p, size)
            barrier.wait()

            if check and thread_id == 0 and saver is not None and step % SAVEFREQ == 0:
                saver.write(particles)

        with lock:
            outcomes.append(tracker.result())

    threads = [
        threading.Thread(target=worker, args=(thread_id,), daemon=True)
        for thread_id in range(1, n_threads)
    ]
    for thread in threads:
        thread.start()
    worker(0)
    for thread in threads:
        thread.join()
    barrier.destroy()
    if errors:
        raise errors[0]

    if not check:
        return RunResult()
    absmin = min(r.absmin for r in outcomes)
    absavg = sum(r.absavg for r in outcomes) / n_threads
    return RunResult(absmin, absavg)


def main(argv: Sequence[str] | None = None) -> int:
    """Command-line entry point."""
    return _run_main(
        argv,
        lambda particles, size, workers, check, saver: simulate_threaded(
            particles, size, workers, NSTEPS, check, saver
        ),
        HELP,
        worker_default=2,
    )


if __name__ == "__main__":
    sys.exit(main())