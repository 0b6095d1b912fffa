"""Performance benchmarks for gradopt.

This package contains microbenchmarks for the optimizer loops on synthetic
linear-model problems.
"""
