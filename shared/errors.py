"""Error taxonomy for capture cycles.

`InvalidConfig` is raised synchronously before any request is sent. The
`CaptureError` subclasses describe failures of an asynchronous request; the
controller does not raise them into the event loop but logs them and hands
them to its error listeners.
"""
from __future__ import annotations


class InvalidConfig(ValueError):
    """Capture configuration rejected before any request was sent."""


class CaptureError(RuntimeError):
    """A request to the instrument failed; `diagnostic` holds the response detail."""

    def __init__(self, message: str, diagnostic: str = "") -> None:
        super().__init__(message if not diagnostic else f"{message}: {diagnostic}")
        self.diagnostic = diagnostic


class CaptureStartError(CaptureError):
    """The instrument rejected the start-capture request."""


class TriggerPollError(CaptureError):
    """A trigger-status query failed."""


class TraceFetchError(CaptureError):
    """Fetching the captured trace set failed."""


__all__ = [
    "CaptureError",
    "CaptureStartError",
    "InvalidConfig",
    "TraceFetchError",
    "TriggerPollError",
]
