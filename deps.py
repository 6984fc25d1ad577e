"""
deps.py — FastAPI dependencies resolving the per-app services.
"""

import threading
import time
from collections import deque
from typing import Deque, Dict

from fastapi import Request

from config import Config
from errors import RateLimited
from mailer import Mailer
from resources import Resources
from utils import logger


def get_config(request: Request) -> Config:
    return request.app.state.config


def get_resources(request: Request) -> Resources:
    return request.app.state.resources


def get_mailer(request: Request) -> Mailer:
    return request.app.state.mailer


class RateLimiter:
    """Sliding-window request limiter keyed by client address."""

    def __init__(self, limit: int, window_seconds: int, clock=time.monotonic):
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._lock = threading.Lock()

    def _expire(self, now: float) -> None:
        # Clients whose hits have all left the window are forgotten
        for key in list(self._hits):
            hits = self._hits[key]
            while hits and now - hits[0] >= self.window_seconds:
                hits.popleft()
            if not hits:
                del self._hits[key]

    def hit(self, key: str) -> bool:
        """Record a request for ``key``; False when it is over the limit."""
        now = self.clock()
        with self._lock:
            self._expire(now)
            hits = self._hits.get(key)
            if hits is not None and len(hits) >= self.limit:
                return False
            self._hits.setdefault(key, deque()).append(now)
            return True

    def tracked_clients(self) -> int:
        with self._lock:
            return len(self._hits)


def contact_rate_limit(request: Request) -> None:
    client = request.client.host if request.client else "unknown"
    if not request.app.state.contact_limiter.hit(client):
        logger.warning("Contact form rate limit hit for %s", client)
        raise RateLimited()
