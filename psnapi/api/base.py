"""Base class for every API wrapper."""
import logging
from typing import Any, Dict, Iterable, Optional

from ..client import Client, MultipartPart


class AbstractApi:
    """Holds the injected :class:`~psnapi.client.Client` and forwards the
    HTTP verbs to it so wrappers read as ``self.get(...)``.
    """

    def __init__(self, client: Client) -> None:
        self.client = client
        self._log = logging.getLogger(f'psnapi.api.{type(self).__name__}')

    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self.client.get(url, params)

    def post(self, url: str, data: Any = None) -> Dict[str, Any]:
        return self.client.post(url, data)

    def post_json(self, url: str, data: Any = None) -> Dict[str, Any]:
        return self.client.post_json(url, data)

    def put_json(self, url: str, data: Any) -> Dict[str, Any]:
        return self.client.put_json(url, data)

    def delete(self, url: str) -> Dict[str, Any]:
        return self.client.delete(url)

    def post_multipart(self, url: str, parts: Iterable[MultipartPart]) -> Dict[str, Any]:
        return self.client.post_multipart(url, list(parts))
