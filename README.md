# hpcbench

Two small performance workloads and the tools to measure them:

* **Matrix multiply (DGEMM)**: three kernels computing `C := C + A @ B` on
  square matrices. They are a naive triple loop, a cache-blocked version and a
  reference built on NumPy's matrix product. A benchmark driver times each
  size, reports Mflop/s and percentage of peak, and checks the result against
  a componentwise error bound.
* **Particle simulation**: a 2-D short-range repulsive particle system. It can
  run in one thread, in several threads synchronised by a reusable barrier, or
  on a pool of worker threads. Each run reports the minimum and average
  interaction distance, which shows whether particles interact correctly. A
  run can also append a timing line to a summary file.
* **Autograder**: reads the summary files and estimates two things, the serial
  complexity exponent and the strong and weak scaling efficiency. It turns
  them into a grade.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Matrix-multiply benchmark

```
hpcbench-dgemm
hpcbench-dgemm 31 64 128
hpcbench-dgemm --kernel naive 31 32
```

Options:

| option          | meaning                                                    |
|-----------------|------------------------------------------------------------|
| `--kernel NAME` | `naive`, `blocked` (default) or `blas`                     |
| `--max-speed X` | peak speed of the CPU in GF/s, used for the percentage (default 56) |
| `--all-sizes`   | use the extended set of sizes, 31 to 1025 around multiples of 32 |

Without size arguments, the tool uses a representative set of sizes from 31
to 769. Any sizes given replace that set. Each size must be a positive
integer, and the sizes run in increasing order.

The tool first prints the kernel's description. For each size it then prints:

```
Size: 128	Mflops/s: ...	Percentage: ...
```

At the end it prints the average percentage of peak. A kernel's result may
fall outside the error bound `3 * eps * n * |A| * |B|`. In that case a
failure is printed and the command exits with status 1. An unknown kernel or
a bad size also exits with status 1.

From Python:

```python
import numpy as np
from hpcbench.dgemm import naive_dgemm, blocked_dgemm, blas_dgemm, get_kernel

rng = np.random.default_rng()
a = rng.uniform(-1.0, 1.0, (64, 64))
b = rng.uniform(-1.0, 1.0, (64, 64))
c = np.zeros((64, 64))

blocked_dgemm(a, b, c, 41)                    # c now holds a @ b
description, kernel = get_kernel("naive")     # "naive", "blocked" or "blas"
```

The kernels update `c` in place. They raise `ValueError` unless `a`, `b` and
`c` are writable square matrices of the same shape.

`hpcbench.benchmark` exposes the parts of the driver:

* `parse_sizes`
* `fill`
* `reference_dgemm`
* `measure`, which returns Gflop/s
* `within_error_bound`
* `run`, which returns a list of `SizeResult` records and raises
  `ArithmeticError` when the bound is exceeded

## Particle simulation

```
hpcbench-serial  -n 500 -o particles.txt -s serial.txt
hpcbench-threads -n 500 -p 4 -s threads.txt
hpcbench-pool    -n 500 -p 4 -s pool.txt
```

Options shared by the simulation commands:

| option          | meaning                                               |
|-----------------|-------------------------------------------------------|
| `-h`            | show the options and exit                             |
| `-n <int>`      | number of particles (default 1000)                    |
| `-o <filename>` | write particle positions every 10 steps               |
| `-s <filename>` | append a timing line to a summary file                |
| `-no`           | turn off correctness statistics and particle output   |
| `-p <int>`      | number of threads: `hpcbench-threads` default 2, `hpcbench-pool` default the CPU count |

The commands differ in how they split the work:

* `hpcbench-serial` computes each pair force once, in one thread.
* `hpcbench-threads` gives each thread a contiguous slice of particles. It
  still computes each pair force once, and the steps are synchronised with
  `hpcbench.barrier.Barrier`.
* `hpcbench-pool` has every particle sum the force from every other particle.
  The particles are processed in small chunks on a thread pool.

The simulation runs 1000 steps in a square box whose side keeps the particle
density constant. At the end it prints the number of particles and the wall
time. `hpcbench-pool` also prints the thread count. Unless `-no` is given, it
then prints `absmin` and `absavg`. These are the smallest and the average
distance between interacting particles, as a fraction of the cutoff. A
correct simulation keeps `absmin` above 0.4 (typically 0.7–0.8) and `absavg`
around 0.95. A warning is printed when either value falls below its
threshold.

The output file starts with a line holding the particle count and box size.
One `x y` line per particle follows for every saved step.

The summary line is `n seconds` for `hpcbench-serial`. For the threaded
commands it is `n threads seconds`.

The same runs are available from Python:

* `hpcbench.serial.simulate`
* `hpcbench.threaded.simulate_threaded`
* `hpcbench.pool.simulate_parallel`

Each takes a list of particles, the box size, a step count, a `check` flag
and an optional `SaveWriter`. The threaded versions also take a thread count.
Each returns a `RunResult`, and `hpcbench.serial.report` formats one. The
building blocks live in `hpcbench.common` (`Particle`, `Stats`, `SaveWriter`,
`init_particles`, `apply_force`, `move`, `system_size`, and the option
helpers `find_option`, `read_int`, `read_string`) and in `hpcbench.barrier`
(`Barrier`, `BarrierError`).

## Autograder

Collect summary lines from several runs into one file, then grade them:

```
hpcbench-autograder -v serial -s serial.txt
hpcbench-autograder -v pthreads -s threads.txt
```

`-v` chooses what to grade: `serial`, `pthreads`, `openmp` or `mpi`. Any
other value prints nothing. `-v` and `-s` are both required for grading.

* **serial**: each line is `n seconds`. The tool prints the slope between
  consecutive runs and a least-squares fit of `log(time)` against `log(n)`.
  A slope under 1.3 earns full marks, and the grade falls to zero at 2.
* **parallel** (`pthreads`, `openmp`, `mpi`): the first line is the
  single-worker `n seconds` run. The remaining lines are `n workers seconds`:
  first a strong-scaling series at fixed `n`, then a weak-scaling series with
  `n` growing with the worker count. The tool prints speedup and efficiency
  for each series. The grade is the mean of the strong and weak scores, and
  each score is full above 0.8 average efficiency.

The same calculations are available in `hpcbench.autograder`:

* `read_serial_summary`
* `read_parallel_summary`
* `serial_grade`
* `parallel_grade`
* `efficiency_grade`

`serial_grade` returns a `SerialGrade` record and `parallel_grade` returns a
`ScalingGrade` record.

## What is not included

All simulation commands run inside one process, on threads. There is no
command that distributes the particles over several processes or machines,
and none that runs on a GPU. The autograder accepts `mpi` summaries, but the
package cannot produce them itself.