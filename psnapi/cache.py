"""Lazily populated single-document cache used by the API wrappers."""
import logging
from enum import Enum
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')


class CacheState(Enum):
    EMPTY = 'empty'
    POPULATED = 'populated'


class CachedDocument(Generic[T]):
    """Holds at most one parsed response document.

    The document is fetched by *loader* on the first :meth:`get` and parsed
    with *parser*; later calls return the stored value until ``force=True``
    is passed. A loader or parser failure propagates and leaves the previous
    state untouched.

    Args:
        loader: Zero-argument callable returning the raw JSON dict.
        parser: Callable turning that dict into the cached value.
        name:   Label used in debug logging.
    """

    def __init__(self, loader: Callable[[], Dict[str, Any]],
                 parser: Callable[[Dict[str, Any]], T],
                 name: str = 'document') -> None:
        self._loader = loader
        self._parser = parser
        self._name = name
        self._state = CacheState.EMPTY
        self._value: Optional[T] = None

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def is_populated(self) -> bool:
        return self._state is CacheState.POPULATED

    def get(self, force: bool = False) -> T:
        """Return the cached value, fetching it when empty or *force* is set."""
        if self._state is CacheState.EMPTY or force:
            logger.debug("Fetching %s (force=%s)", self._name, force)
            value = self._parser(self._loader())
            self._value = value
            self._state = CacheState.POPULATED
        return self._value

    def refresh(self) -> T:
        return self.get(force=True)
