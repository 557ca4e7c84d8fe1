"""Particle model, integration step, output and option helpers for the n-body runs."""

from __future__ import annotations

import functools
import math
import random
import re
import time
from dataclasses import dataclass
from typing import Iterable, Sequence, TextIO

DENSITY = 0.0005
MASS = 0.01
CUTOFF = 0.01
MIN_R = CUTOFF / 100
DT = 0.0005

NSTEPS = 1000
SAVEFREQ = 10

_ATOI = re.compile(r"\s*([+-]?\d+)")


@dataclass(slots=True)
class Particle:
    """Position, velocity and acceleration of one particle."""

    x: float
    y: float
    vx: float = 0.0
    vy: float = 0.0
    ax: float = 0.0
    ay: float = 0.0


@dataclass
class Stats:
    """Running minimum and mean of neighbour distances, in units of the cutoff."""

    dmin: float = 1.0
    davg: float = 0.0
    navg: int = 0

    def record(self, r2: float) -> None:
        """Account for one interacting pair at squared distance r2."""
        if r2 == 0:
            return
        distance = math.sqrt(r2) / CUTOFF
        if r2 / (CUTOFF * CUTOFF) < self.dmin * self.dmin:
            self.dmin = distance
        self.davg += distance
        self.navg += 1

    def merge(self, other: Stats) -> Stats:
        """Fold other into this record and return it."""
        self.dmin = min(self.dmin, other.dmin)
        self.davg += other.davg
        self.navg += other.navg
        return self


@functools.cache
def _start_time() -> float:
    return time.perf_counter()


def read_timer() -> float:
    """Return seconds elapsed since the first call."""
    start = _start_time()
    return time.perf_counter() - start


def system_size(n: int) -> float:
    """Return the side of the square box that keeps the density constant for n particles."""
    if n < 0:
        raise ValueError("number of particles must not be negative")
    return math.sqrt(DENSITY * n)


def init_particles(n: int, size: float, rng: random.Random | None = None) -> list[Particle]:
    """Place n particles on an even grid in random order with random velocities."""
    if n < 0:
        raise ValueError("number of particles must not be negative")
    if n == 0:
        return []
    rng = random.Random() if rng is None else rng
    sx = math.ceil(math.sqrt(n))
    sy = (n + sx - 1) // sx

    # Shuffle so particles are not spatially sorted.
    order = list(range(n))
    rng.shuffle(order)

    particles = []
    for k in order:
        particles.append(
            Particle(
                x=size * (1.0 + k % sx) / (1 + sx),
                y=size * (1.0 + k // sx) / (1 + sy),
                vx=rng.random() * 2 - 1,
                vy=rng.random() * 2 - 1,
            )
        )
    return particles


def apply_force(particle: Particle, neighbor: Particle, stats: Stats | None = None) -> None:
    """Add the short-range repulsive force that neighbor exerts on particle."""
    dx = neighbor.x - particle.x
    dy = neighbor.y - particle.y
    r2 = dx * dx + dy * dy
    if r2 > CUTOFF * CUTOFF:
        return
    if stats is not None:
        stats.record(r2)
    r2 = max(r2, MIN_R * MIN_R)
    r = math.sqrt(r2)
    coef = (1 - CUTOFF / r) / r2 / MASS
    particle.ax += coef * dx
    particle.ay += coef * dy


def move(particle: Particle, size: float) -> None:
    """Advance particle one time step and bounce it off the walls of the box."""
    particle.vx += particle.ax * DT
    particle.vy += particle.ay * DT
    particle.x += particle.vx * DT
    particle.y += particle.vy * DT

    while particle.x < 0 or particle.x > size:
        particle.x = -particle.x if particle.x < 0 else 2 * size - particle.x
        particle.vx = -particle.vx
    while particle.y < 0 or particle.y > size:
        particle.y = -particle.y if particle.y < 0 else 2 * size - particle.y
        particle.vy = -particle.vy


class SaveWriter:
    """Writes particle positions to a text stream, with a header before the first frame."""

    def __init__(self, stream: TextIO, size: float) -> None:
        self.stream = stream
        self.size = size
        self._header_written = False

    def write(self, particles: Sequence[Particle]) -> None:
        """Write one frame of positions."""
        if not self._header_written:
            self.stream.write(f"{len(particles)} {self.size:g}\n")
            self._header_written = True
        self.stream.writelines(f"{p.x:g} {p.y:g}\n" for p in particles)


def find_option(argv: Iterable[str], option: str) -> int | None:
    """Return the position of option among the arguments, or None if absent."""
    for index, arg in enumerate(argv):
        if arg == option:
            return index
    return None


def _atoi(text: str) -> int:
    match = _ATOI.match(text)
    return int(match.group(1)) if match else 0


def read_int(argv: Sequence[str], option: str, default: int) -> int:
    """Return the integer following option, or default if there is none."""
    index = find_option(argv, option)
    if index is not None and index < len(argv) - 1:
        return _atoi(argv[index + 1])
    return default


def read_string(argv: Sequence[str], option: str, default: str | None = None) -> str | None:
    """Return the argument following option, or default if there is none."""
    index = find_option(argv, option)
    if index is not None and index < len(argv) - 1:
        return argv[index + 1]
    return default