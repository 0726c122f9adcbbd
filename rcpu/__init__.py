"""SMT-aware remaining CPU capacity estimator."""

__version__ = "0.1.0"
