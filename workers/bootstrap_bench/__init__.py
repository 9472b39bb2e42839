"""
bootstrap_bench — self-hosting compiler bootstrap timing harness.

Builds the compiler four ways (release/debug x precompiled/interpreted),
then times each build compiling the compiler's own source again.
"""

__version__ = "0.1.0"
BENCH_VERSION = "v0"
PACKAGE_NAME = "bootstrap_bench"
PROFILE_ID = "scm-bootstrap-max"
