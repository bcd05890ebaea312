"""Lazy, restartable sequence over endpoints that return a ``next`` link."""
import logging
from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, TypeVar
from urllib.parse import urljoin

logger = logging.getLogger(__name__)

T = TypeVar('T')


class Paginator(Generic[T]):
    """Walks a paged endpoint one request at a time.

    Nothing is fetched until iteration starts. Each call to :meth:`pages` or
    ``iter()`` starts over from the first page, so a paginator can be reused.

    Args:
        client:    :class:`~psnapi.client.Client` used for the GETs.
        url:       URL of the first page.
        params:    Query parameters for the first page only; ``next`` links
                   already carry their own query string.
        items_key: Key of the list of elements in each page body.
        factory:   Builds one wrapper per element.
        base_url:  Base used to resolve relative ``next`` links.
        next_key:  Key holding the link to the following page.
    """

    def __init__(self, client, url: str, params: Optional[Dict[str, Any]],
                 items_key: str, factory: Callable[[Dict[str, Any]], T],
                 base_url: Optional[str] = None, next_key: str = 'next') -> None:
        self._client = client
        self._url = url
        self._params = dict(params or {})
        self._items_key = items_key
        self._factory = factory
        self._base_url = base_url or url
        self._next_key = next_key

    def pages(self) -> Iterator[List[T]]:
        """Yield one list of wrappers per remote page."""
        url: Optional[str] = self._url
        params: Optional[Dict[str, Any]] = self._params
        seen = set()
        while url:
            if url in seen:
                logger.warning("Pagination loop detected at %s; stopping", url)
                return
            seen.add(url)
            body = self._client.get(url, params)
            items = body.get(self._items_key) or []
            if body.get('size') == 0 or not items:
                return
            yield [self._factory(item) for item in items]

            next_link = body.get(self._next_key)
            url = urljoin(self._base_url, next_link) if next_link else None
            params = None

    def __iter__(self) -> Iterator[T]:
        for page in self.pages():
            yield from page

    def first(self) -> List[T]:
        """Return only the first page (one request)."""
        return next(self.pages(), [])
