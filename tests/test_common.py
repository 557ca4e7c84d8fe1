import io
import math
import random

import pytest

from hpcbench.common import (
    CUTOFF,
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


def test_system_size_scales_with_square_root():
    assert system_size(4000) == pytest.approx(2 * system_size(1000))


def test_system_size_rejects_negative():
    with pytest.raises(ValueError):
        system_size(-1)


def test_init_particles_count_and_bounds():
    size = system_size(50)
    particles = init_particles(50, size, random.Random(7))
    assert len(particles) == 50
    for p in particles:
        assert 0 < p.x < size
        assert 0 < p.y < size
        assert -1 <= p.vx < 1
        assert -1 <= p.vy < 1
        assert p.ax == 0 and p.ay == 0


def test_init_particles_distinct_grid_positions():
    size = system_size(30)
    first = init_particles(30, size, random.Random(1))
    second = init_particles(30, size, random.Random(2))
    positions = {(p.x, p.y) for p in first}
    assert len(positions) == 30
    assert positions == {(p.x, p.y) for p in second}


def test_init_particles_reproducible():
    a = init_particles(10, 1.0, random.Random(3))
    b = init_particles(10, 1.0, random.Random(3))
    assert a == b


def test_init_particles_empty():
    assert init_particles(0, 1.0) == []


def test_apply_force_outside_cutoff_does_nothing():
    p = Particle(0.0, 0.0)
    q = Particle(2 * CUTOFF, 0.0)
    stats = Stats()
    apply_force(p, q, stats)
    assert (p.ax, p.ay) == (0.0, 0.0)
    assert stats == Stats()


def test_apply_force_repels_and_records():
    p = Particle(0.5, 0.5)
    q = Particle(0.5 + CUTOFF / 2, 0.5)
    stats = Stats()
    apply_force(p, q, stats)
    assert p.ax < 0
    assert p.ay == 0
    assert stats.navg == 1
    assert stats.dmin == pytest.approx(0.5)
    assert stats.davg == pytest.approx(0.5)


def test_apply_force_is_antisymmetric():
    p = Particle(0.3, 0.3)
    q = Particle(0.303, 0.304)
    apply_force(p, q)
    apply_force(q, p)
    assert p.ax == pytest.approx(-q.ax)
    assert p.ay == pytest.approx(-q.ay)


def test_apply_force_same_position_not_recorded():
    p = Particle(0.2, 0.2)
    q = Particle(0.2, 0.2)
    stats = Stats()
    apply_force(p, q, stats)
    assert stats.navg == 0
    assert (p.ax, p.ay) == (0.0, 0.0)


def test_move_at_rest_stays_put():
    p = Particle(0.1, 0.2)
    move(p, 1.0)
    assert (p.x, p.y) == (0.1, 0.2)


def test_move_bounces_off_far_wall():
    p = Particle(0.999999, 0.5, vx=1.0)
    move(p, 1.0)
    assert p.x <= 1.0
    assert p.vx == -1.0


def test_move_bounces_off_near_wall():
    p = Particle(0.5, 0.0000001, vy=-1.0)
    move(p, 1.0)
    assert p.y >= 0.0
    assert p.vy == 1.0


def test_stats_merge():
    a = Stats(dmin=0.7, davg=1.5, navg=2)
    b = Stats(dmin=0.4, davg=2.0, navg=3)
    merged = a.merge(b)
    assert merged is a
    assert a == Stats(dmin=0.4, davg=3.5, navg=5)


def test_stats_record_keeps_minimum():
    stats = Stats()
    stats.record((0.5 * CUTOFF) ** 2)
    stats.record((0.8 * CUTOFF) ** 2)
    assert stats.dmin == pytest.approx(0.5)
    assert stats.navg == 2


def test_save_writer_header_once():
    stream = io.StringIO()
    writer = SaveWriter(stream, 0.5)
    particles = [Particle(0.25, 0.125), Particle(0.5, 0.375)]
    writer.write(particles)
    writer.write(particles)
    lines = stream.getvalue().splitlines()
    assert lines[0] == "2 0.5"
    assert lines[1] == "0.25 0.125"
    assert len(lines) == 1 + 2 * len(particles)
    assert lines[3] == lines[1]


def test_find_option():
    args = ["-n", "5", "-no"]
    assert find_option(args, "-n") == 0
    assert find_option(args, "-no") == 2
    assert find_option(args, "-o") is None


def test_read_int():
    assert read_int(["-n", "42"], "-n", 1000) == 42
    assert read_int(["-p"], "-n", 1000) == 1000
    assert read_int(["-n"], "-n", 1000) == 1000
    assert read_int(["-n", "12abc"], "-n", 1000) == 12
    assert read_int(["-n", "abc"], "-n", 1000) == 0


def test_read_string():
    assert read_string(["-o", "out.txt"], "-o") == "out.txt"
    assert read_string(["-s"], "-s") is None
    assert read_string([], "-s", "sum.txt") == "sum.txt"


def test_read_timer_monotonic():
    first = read_timer()
    second = read_timer()
    assert 0 <= first <= second
    assert not math.isnan(second)