"""Community wrapper."""
from typing import Any, Dict, Iterable, List, Optional, Union

from ..cache import CachedDocument
from ..client import MultipartPart
from ..errors import MissingFieldError, ValidationError
from ..models import CommunityInfo, require_field
from ..pagination import Paginator
from ..resources import Image
from .base import AbstractApi
from .game import Game
from .thread import Thread

MAX_MEMBER_PAGE_SIZE = 100
COMMUNITY_STATUSES = ('open', 'closed')


class Community(AbstractApi):
    """A PlayStation community, identified by its community id.

    Args:
        client:       Authenticated :class:`~psnapi.client.Client`.
        community_id: Remote id of the community.
    """

    COMMUNITY_ENDPOINT = 'https://communities.api.playstation.com/v1/'
    SATCHEL_ENDPOINT   = 'https://satchel.api.playstation.com/v1/item/community/{}'

    _INFO_FIELDS = 'backgroundImage,description,id,isCommon,members,name,profileImage,role,' \
                   'unreadMessageCount,sessions,timezoneUtcOffset,language,titleId,titleName'

    def __init__(self, client, community_id: str) -> None:
        super().__init__(client)
        self._community_id = str(community_id)
        self._info: CachedDocument[CommunityInfo] = CachedDocument(
            lambda: self.get(self._url(), {'includeFields': self._INFO_FIELDS}),
            CommunityInfo.from_json,
            name=f'community {community_id}',
        )

    def __repr__(self) -> str:
        return f"Community({self._community_id!r})"

    @classmethod
    def create(cls, client, name: str, type: str = 'open', title_id: str = '') -> 'Community':
        """Create a community and return a wrapper for it.

        Args:
            client:   Authenticated client.
            name:     Community name (must be unique).
            type:     Who can join: ``'open'`` or ``'closed'``.
            title_id: Title id of an associated game, or ``''`` for none.
        """
        if not name:
            raise ValidationError("Community name must not be empty")
        if type not in COMMUNITY_STATUSES:
            raise ValidationError(f"Community type must be one of {COMMUNITY_STATUSES}, got {type!r}")
        response = client.post_json(cls.COMMUNITY_ENDPOINT + 'communities?action=create', {
            'name':    name,
            'type':    type,
            'titleId': title_id,
        })
        if not response.get('id'):
            raise MissingFieldError('id', 'community creation response')
        return cls(client, response['id'])

    def _url(self) -> str:
        return self.COMMUNITY_ENDPOINT + f'communities/{self._community_id}'

    # ------------------------------------------------------------------
    # Info
    # ------------------------------------------------------------------

    def info(self, force: bool = False) -> CommunityInfo:
        """All information fields of the community.

        Args:
            force: Issue a new request instead of using the cached document.
        """
        return self._info.get(force)

    def community_id(self) -> str:
        """The id this wrapper was built with (no request)."""
        return self._community_id

    def id(self) -> str:
        return self.info().id

    def name(self) -> str:
        return self.info().name

    def description(self) -> str:
        return self.info().description

    def member_count(self) -> int:
        return self.info().member_count

    def status(self) -> str:
        return self.info().type

    def title_name(self) -> Optional[str]:
        return self.info().title_name

    def game(self) -> Optional[Game]:
        """The game the community is associated with, or ``None``."""
        title_id = self.info().title_id
        if title_id is None:
            return None
        return Game(self.client, title_id)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def set_game(self, title_id: str) -> None:
        self._set({'titleId': title_id})

    def set_name(self, name: str) -> None:
        self._set({'name': name})

    def set_status(self, status: str) -> None:
        """Set who can join the community (``'open'`` or ``'closed'``)."""
        if status not in COMMUNITY_STATUSES:
            raise ValidationError(f"Status must be one of {COMMUNITY_STATUSES}, got {status!r}")
        self._set({'type': status})

    def set_image(self, image: Union[Image, bytes]) -> None:
        url = self._upload_image('communityProfileImage', image)
        self._set({'profileImage': {'sourceUrl': url}})

    def set_background_image(self, image: Union[Image, bytes]) -> None:
        url = self._upload_image('communityBackgroundImage', image)
        self._set({'backgroundImage': {'sourceUrl': url}})

    def set_background_color(self, color: int) -> None:
        """Set the background colour, keeping the current background image.

        Args:
            color: RGB value, e.g. ``0x1A2B3C``.
        """
        if isinstance(color, bool) or not isinstance(color, int) or not 0 <= color <= 0xFFFFFF:
            raise ValidationError(f"Color must be an RGB integer between 0x000000 and 0xFFFFFF, got {color!r}")
        background = self.info(force=True).background_image
        self._set({
            'backgroundImage': {
                'color':     '%06X' % color,
                'sourceUrl': background.get('sourceUrl') or '',
            }
        })

    def _set(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.put_json(self._url(), data)

    def _upload_image(self, purpose: str, image: Union[Image, bytes]) -> str:
        """Upload a JPEG to the image CDN and return its URL.

        Every community image must be set with a CDN URL. Known purposes:
        ``communityProfileImage``, ``communityBackgroundImage``,
        ``communityWallImage``.
        """
        image = Image.coerce(image)
        if image.type() != 'image/jpeg':
            raise ValidationError("Image file type can only be JPEG.")

        response = self.post_multipart(self.SATCHEL_ENDPOINT.format(self._community_id), [
            MultipartPart('purpose', purpose),
            MultipartPart('file', image.data(), 'image/jpeg', filename='dummy_file_name'),
            MultipartPart('mimeType', 'image/jpeg'),
        ])
        if not response.get('url'):
            raise MissingFieldError('url', 'image upload response')
        return response['url']

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    def invite(self, online_ids: Iterable[str]) -> None:
        online_ids = list(online_ids)
        if not online_ids:
            raise ValidationError("At least one online id is required to invite")
        self.post_json(self._url() + '/members', {'onlineIds': online_ids})

    def join(self) -> None:
        self.post_json(self._url() + '/members')

    def leave(self) -> None:
        self.delete(self._url() + '/members')

    def _check_limit(self, limit: int) -> None:
        if limit > MAX_MEMBER_PAGE_SIZE:
            raise ValidationError(f"Limit can only have a maximum value of {MAX_MEMBER_PAGE_SIZE}.")
        if limit < 1:
            raise ValidationError("Limit must be at least 1.")

    def _member(self, item: Dict[str, Any]) -> 'User':
        from .user import User

        return User(self.client, require_field(item, 'onlineId', 'community member'))

    def members(self, limit: int = MAX_MEMBER_PAGE_SIZE) -> List['User']:
        """One page of community members.

        Use :meth:`member_pages` to walk past the first page.

        Args:
            limit: Page size, at most 100.
        """
        self._check_limit(limit)
        body = self.get(self._url() + '/members', {'limit': limit})
        if body.get('size') == 0:
            return []
        return [self._member(item) for item in body.get('members') or []]

    def member_pages(self, limit: int = MAX_MEMBER_PAGE_SIZE) -> Paginator:
        """All members as a lazy sequence following the endpoint's ``next`` link."""
        self._check_limit(limit)
        return Paginator(
            self.client,
            self._url() + '/members',
            {'limit': limit},
            'members',
            self._member,
            base_url=self.COMMUNITY_ENDPOINT,
        )

    # ------------------------------------------------------------------
    # Threads
    # ------------------------------------------------------------------

    def threads(self) -> List[Thread]:
        """All threads of the community.

        Typically index 0 is the MOTD thread and index 1 the discussion thread.
        """
        body = self.get(self._url() + '/threads')
        return [Thread(self.client, item, self) for item in body.get('threads') or []]
