from __future__ import annotations


class BenchError(Exception):
    """Base class for errors that abort a benchmark."""


class SetupError(BenchError, ValueError):
    """Invalid run configuration, request or scenario. Raised before any request is sent."""


class TargetUnreachable(BenchError):
    def __init__(self, url: str, attempts: int, reason: str = "") -> None:
        self.url = url
        self.attempts = attempts
        self.reason = reason
        msg = f"{url} not ready after {attempts} attempts"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class RunCancelled(BenchError):
    """The run was cancelled before any request was measured."""
