from abc import ABC, abstractmethod
from typing import Iterator

from src.transformations.sessionizer import KeySessions


class BaseJob(ABC):
    """One session metric: a name and how to observe it in a partition."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def extract(self, key_sessions: KeySessions) -> Iterator[int]:
        """Yield this metric's observations for one sessionized partition"""

    def __call__(self, key_sessions: KeySessions) -> Iterator[int]:
        return self.extract(key_sessions)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"
