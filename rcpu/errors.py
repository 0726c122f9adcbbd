from __future__ import annotations


class RcpuError(Exception):
    """Base class for every error raised by the estimator."""


class ConfigurationError(RcpuError):
    """Unsupported processor, SMT disabled or an invalid core topology.

    Fatal at startup: the sampling loop must not be started.
    """


class TransientIOError(RcpuError):
    """The counter source could not be read on this tick."""


class EmptyDataError(TransientIOError):
    """The counter source was readable but held no per-CPU records."""


class DataIntegrityError(RcpuError):
    """Two snapshots could not be paired into a period."""


class CpuPairingError(DataIntegrityError):
    pass


class TimestampOrderError(DataIntegrityError):
    pass


class DegenerateInputError(RcpuError):
    """An estimator saw a zero total period and has no data for this tick."""
