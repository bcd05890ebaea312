"""Community discussion thread wrapper."""
from typing import Any, Dict, List

from ..errors import MissingFieldError, ValidationError
from .base import AbstractApi


class Thread(AbstractApi):
    """One of a community's threads (typically the MOTD thread at index 0
    and the discussion thread at index 1).
    """

    COMMUNITY_ENDPOINT = 'https://communities.api.playstation.com/v1/'

    def __init__(self, client, data: Dict[str, Any], community=None) -> None:
        super().__init__(client)
        self._data = data
        self._community = community

    def __repr__(self) -> str:
        return f"Thread({self._data.get('id')!r}, name={self.name()!r})"

    def _url(self) -> str:
        if self._community is None:
            raise ValidationError("Thread was built without its community")
        return self.COMMUNITY_ENDPOINT + 'communities/{}/threads/{}'.format(
            self._community.community_id(), self.thread_id())

    def thread_id(self) -> str:
        if 'id' not in self._data:
            raise MissingFieldError('id', 'thread')
        return str(self._data['id'])

    def name(self) -> str:
        return self._data.get('name') or ''

    def community(self):
        return self._community

    def messages(self, limit: int = 100) -> List[Dict[str, Any]]:
        body = self.get(self._url() + '/messages', {'limit': limit})
        if body.get('size') == 0:
            return []
        return list(body.get('messages') or [])

    def send_message(self, text: str) -> Dict[str, Any]:
        return self.post_json(self._url() + '/messages', {'message': text})
