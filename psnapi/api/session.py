"""Live game/party session wrapper."""
from datetime import datetime
from enum import IntFlag
from typing import Any, Dict, List, Optional

from ..errors import MissingFieldError
from ..models import parse_timestamp
from .base import AbstractApi
from .game import Game


class SessionType(IntFlag):
    UNKNOWN = 0
    GAME = 1
    PARTY = 2


class Session(AbstractApi):
    """One entry of a user's active sessions. Built from the fragment the
    sessions endpoint returned; never fetches on its own.
    """

    SESSION_ENDPOINT = 'https://us-ivt.np.community.playstation.net/sessionInvitation/v1/users/{}/sessions'

    def __init__(self, client, data: Dict[str, Any]) -> None:
        super().__init__(client)
        self._data = data

    def __repr__(self) -> str:
        return f"Session({self._data.get('sessionId')!r}, type={self.title_type()!r})"

    @property
    def data(self) -> Dict[str, Any]:
        return self._data

    def _title_detail(self) -> Dict[str, Any]:
        detail = self._data.get('npTitleDetail')
        return detail if isinstance(detail, dict) else {}

    def session_id(self) -> str:
        if 'sessionId' not in self._data:
            raise MissingFieldError('sessionId', 'session')
        return self._data['sessionId']

    def name(self) -> str:
        return self._data.get('sessionName') or ''

    def title_type(self) -> SessionType:
        title_type = self._data.get('npTitleType')
        if title_type == 'party':
            return SessionType.PARTY
        if title_type == 'game' or self._title_detail().get('npTitleId'):
            return SessionType.GAME
        return SessionType.UNKNOWN

    def title_id(self) -> Optional[str]:
        return self._title_detail().get('npTitleId')

    def title_name(self) -> Optional[str]:
        return self._title_detail().get('npTitleName')

    def platform(self) -> Optional[str]:
        return self._title_detail().get('platform') or self._data.get('platform')

    def member_count(self) -> int:
        if 'memberCount' in self._data:
            return int(self._data['memberCount'])
        return len(self._data.get('members') or [])

    def max_members(self) -> int:
        return int(self._data.get('sessionMaxUser') or 0)

    def members(self) -> List['User']:
        from .user import User

        return [
            User(self.client, member['onlineId'])
            for member in self._data.get('members') or []
            if member.get('onlineId')
        ]

    def created_at(self) -> Optional[datetime]:
        return parse_timestamp(
            self._data.get('sessionCreateTimestamp'), 'sessionCreateTimestamp', 'session')

    def game(self) -> Optional[Game]:
        title_id = self.title_id()
        if not title_id:
            return None
        detail = self._title_detail()
        return Game(self.client, title_id, data={
            'titleId':  title_id,
            'name':     detail.get('npTitleName'),
            'imageUrl': detail.get('npTitleIconUrl'),
            'platform': detail.get('platform'),
        })
