from typing import Callable, List
from loguru import logger


class ObserverEvent:
    """Plain-Python signal used by non-Qt systems (config, locator)."""

    def __init__(self, name: str):
        self.name = name
        self._subscribers: List[Callable] = []

    def connect(self, callback: Callable):
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def disconnect(self, callback: Callable):
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def emit(self, *args, **kwargs):
        for sub in list(self._subscribers):
            try:
                sub(*args, **kwargs)
            except Exception as e:
                logger.error(f"Event '{self.name}' error in subscriber '{sub}': {e}")
