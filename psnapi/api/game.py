"""Game title wrapper."""
from typing import Any, Dict, List, Optional

from ..cache import CachedDocument
from ..errors import MissingFieldError
from ..models import TitleInfo, require_field
from .base import AbstractApi


class Game(AbstractApi):
    """A PlayStation title, usually built from an entry of a user's title list.

    Fields present in the fragment the wrapper was built from are read
    directly; anything else triggers one cached GET of the title document.
    """

    GAME_ENDPOINT = 'https://gamelist.api.playstation.com/v1/'

    def __init__(self, client, title_id: str, user=None,
                 data: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(client)
        self._title_id = title_id
        self._user = user
        self._fragment = TitleInfo.from_json(data) if data else None
        self._title: CachedDocument[TitleInfo] = CachedDocument(
            lambda: self.get(self.GAME_ENDPOINT + f'titles/{self._title_id}'),
            TitleInfo.from_json,
            name=f'title {title_id}',
        )

    def __repr__(self) -> str:
        return f"Game({self._title_id!r})"

    def title_id(self) -> str:
        return self._title_id

    def user(self):
        """The :class:`~psnapi.api.user.User` whose list this title came from, if any."""
        return self._user

    def info(self, force: bool = False) -> TitleInfo:
        return self._title.get(force)

    def _field(self, name: str) -> Any:
        if self._fragment is not None and getattr(self._fragment, name) is not None:
            return getattr(self._fragment, name)
        return getattr(self.info(), name)

    def name(self) -> str:
        name = self._field('name')
        if name is None:
            raise MissingFieldError('name', 'title')
        return name

    def image_url(self) -> Optional[str]:
        return self._field('image_url')

    def last_played(self) -> Optional[str]:
        """ISO-8601 timestamp of the last play; only known for user title lists."""
        if self._fragment is None:
            return None
        return self._fragment.last_played_date

    def communities(self) -> List['Community']:
        """Communities associated with this title."""
        from .community import Community

        body = self.get(Community.COMMUNITY_ENDPOINT + 'communities', {
            'titleId': self._title_id,
            'fields':  'id,name,members,titleName',
            'sort':    'common',
        })
        if body.get('size') == 0:
            return []
        return [
            Community(self.client, require_field(item, 'id', 'community'))
            for item in body.get('communities') or []
        ]
