"""Matrix-multiply kernels and benchmark, threaded particle simulations and a scaling autograder."""

__version__ = "0.1.0"