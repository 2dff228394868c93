"""Transient user notifications (toasts) queued by services and drained by the UI."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import List

from ..utils.logging import get_logger

LOGGER = get_logger("services.notifications")

INFO = "info"
SUCCESS = "success"
ERROR = "error"


@dataclass(frozen=True)
class Notification:
    message: str
    level: str = INFO


class Notifier:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._pending: List[Notification] = []

    def push(self, message: str, level: str = INFO) -> Notification:
        note = Notification(message, level)
        if level == ERROR:
            LOGGER.warning("notify level=%s message=%s", level, message)
        else:
            LOGGER.debug("notify level=%s message=%s", level, message)
        with self._lock:
            self._pending.append(note)
        return note

    def info(self, message: str) -> Notification:
        return self.push(message, INFO)

    def success(self, message: str) -> Notification:
        return self.push(message, SUCCESS)

    def error(self, message: str) -> Notification:
        return self.push(message, ERROR)

    def drain(self) -> List[Notification]:
        with self._lock:
            pending, self._pending = self._pending, []
        return pending
