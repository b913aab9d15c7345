"""Acquisition clients for the remote capture instrument."""
from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlparse

from .base_client import AcquisitionClient, Reply, ReplyCallback

if TYPE_CHECKING:
    from core.scheduler import Scheduler


def create_client(url: str, scheduler: "Scheduler") -> AcquisitionClient:
    """Build a client from an instrument URL.

    ``sim://`` selects the in-process simulator; ``http://`` and ``https://``
    select the QtNetwork client (imported lazily so headless use needs no Qt).
    """
    scheme = urlparse(url).scheme.lower()
    if scheme == "sim":
        from .simulated_client import SimulatedAcquisitionClient

        return SimulatedAcquisitionClient(scheduler)
    if scheme in ("http", "https"):
        from .http_client import HttpAcquisitionClient

        return HttpAcquisitionClient(url)
    raise ValueError(f"Unsupported instrument URL {url!r}; expected sim://, http:// or https://")


__all__ = ["AcquisitionClient", "Reply", "ReplyCallback", "create_client"]
