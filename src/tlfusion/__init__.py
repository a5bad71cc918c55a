"""tlfusion: forensic event log normalization and tamper-evident timelines."""

__version__ = "0.1.0"
