"""
Exception hierarchy for the logging pipeline
"""


class LogShieldError(Exception):
    """Base class for all logshield errors"""


class ConfigurationError(LogShieldError, ValueError):
    """Raised synchronously when a configuration value is invalid"""


class SinkError(LogShieldError):
    """Wraps a failure raised by a sink while writing a batch

    Never propagated to logging call sites; handed to the error callback
    or the diagnostics logger instead.
    """

    def __init__(self, message: str, entries: int = 0):
        super().__init__(message)
        self.entries = entries
