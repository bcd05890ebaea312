"""
Typed views over PlayStation Network response documents.

Each schema is built with ``from_json`` and validates its required keys at
that point, raising :class:`~psnapi.errors.MissingFieldError`. Optional keys
fall back to the defaults declared on the dataclass. The untouched response
dict is kept in ``raw`` for fields the schema does not model.
"""
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .errors import MissingFieldError


def require_field(data: Dict[str, Any], key: str, document: str) -> Any:
    if not isinstance(data, dict) or data.get(key) is None:
        raise MissingFieldError(key, document)
    return data[key]


_TIMESTAMP = re.compile(
    r'^(?P<base>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})'
    r'(?:\.(?P<fraction>\d+))?'
    r'(?P<zone>Z|[+-]\d{2}:?\d{2})?$'
)


def parse_timestamp(stamp: Optional[str], key: str, document: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp as sent by PSN (``Z`` suffix, any number of
    fractional digits). ``None`` or ``''`` gives ``None``.

    Raises:
        MissingFieldError: *stamp* is not a timestamp.
    """
    if not stamp:
        return None
    match = _TIMESTAMP.match(str(stamp))
    if match is None:
        raise MissingFieldError(key, document)
    text = match.group('base')
    if match.group('fraction'):
        # datetime only holds microseconds
        text += '.' + match.group('fraction')[:6].ljust(6, '0')
    zone = match.group('zone')
    if zone == 'Z':
        text += '+00:00'
    elif zone:
        text += zone if ':' in zone else zone[:3] + ':' + zone[3:]
    try:
        return datetime.fromisoformat(text)
    except ValueError as exc:
        raise MissingFieldError(key, document) from exc


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


@dataclass
class UserProfile:
    online_id: str
    account_id: Optional[str] = None
    np_id: Optional[str] = None
    about_me: str = ''
    avatar_urls: List[Dict[str, Any]] = field(default_factory=list)
    following: bool = False
    follower_count: int = 0
    friends_count: int = 0
    following_users_count: int = 0
    is_officially_verified: bool = False
    friend_relation: str = 'no'
    personal_detail_sharing: str = 'no'
    blocking: bool = False
    plus: bool = False
    languages_used: List[str] = field(default_factory=list)
    primary_online_status: str = 'offline'
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'UserProfile':
        """Build from a ``profile2`` response (the ``profile`` envelope is optional)."""
        profile = data.get('profile', data) if isinstance(data, dict) else data
        return cls(
            online_id=require_field(profile, 'onlineId', 'profile'),
            account_id=profile.get('accountId'),
            np_id=profile.get('npId'),
            about_me=profile.get('aboutMe') or '',
            avatar_urls=list(profile.get('avatarUrls') or []),
            following=bool(profile.get('following', False)),
            follower_count=int(profile.get('followerCount') or 0),
            friends_count=int(profile.get('friendsCount') or 0),
            following_users_count=int(profile.get('followingUsersCount') or 0),
            is_officially_verified=bool(profile.get('isOfficiallyVerified', False)),
            friend_relation=profile.get('friendRelation') or 'no',
            personal_detail_sharing=profile.get('personalDetailSharing') or 'no',
            blocking=bool(profile.get('blocking', False)),
            plus=bool(profile.get('plus', False)),
            languages_used=list(profile.get('languagesUsed') or []),
            primary_online_status=profile.get('primaryOnlineStatus') or 'offline',
            raw=profile,
        )


@dataclass
class CommunityInfo:
    id: str
    name: str
    description: str = ''
    type: str = 'open'
    member_count: int = 0
    title_id: Optional[str] = None
    title_name: Optional[str] = None
    background_image: Dict[str, Any] = field(default_factory=dict)
    profile_image: Dict[str, Any] = field(default_factory=dict)
    role: Optional[str] = None
    language: Optional[str] = None
    timezone_utc_offset: int = 0
    unread_message_count: int = 0
    is_common: bool = False
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'CommunityInfo':
        return cls(
            id=str(require_field(data, 'id', 'community')),
            name=require_field(data, 'name', 'community'),
            description=data.get('description') or '',
            type=data.get('type') or 'open',
            member_count=int(_section(data, 'members').get('size') or 0),
            title_id=data.get('titleId') or None,
            title_name=data.get('titleName') or None,
            background_image=_section(data, 'backgroundImage'),
            profile_image=_section(data, 'profileImage'),
            role=data.get('role'),
            language=data.get('language'),
            timezone_utc_offset=int(data.get('timezoneUtcOffset') or 0),
            unread_message_count=int(data.get('unreadMessageCount') or 0),
            is_common=bool(data.get('isCommon', False)),
            raw=data,
        )


@dataclass
class MessageThreadInfo:
    thread_id: str
    members: List[Dict[str, Any]] = field(default_factory=list)
    name: str = ''
    events: List[Dict[str, Any]] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'MessageThreadInfo':
        return cls(
            thread_id=str(require_field(data, 'threadId', 'message thread')),
            members=list(data.get('threadMembers') or []),
            name=_section(data, 'threadNameDetail').get('threadName') or '',
            events=list(data.get('threadEvents') or []),
            raw=data,
        )


@dataclass
class TitleInfo:
    title_id: str
    name: Optional[str] = None
    image_url: Optional[str] = None
    last_played_date: Optional[str] = None
    platform: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'TitleInfo':
        # Title lists return image as either a URL string or {'url': ...}
        image = data.get('imageUrl') or data.get('image')
        if isinstance(image, dict):
            image = image.get('url')
        return cls(
            title_id=require_field(data, 'titleId', 'title'),
            name=data.get('name') or data.get('titleName'),
            image_url=image or None,
            last_played_date=data.get('lastPlayedDate'),
            platform=data.get('platform'),
            raw=data,
        )


@dataclass
class StoryComment:
    comment_id: str
    online_id: str
    text: str = ''
    date: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any]) -> 'StoryComment':
        return cls(
            comment_id=str(require_field(data, 'commentId', 'comment')),
            online_id=require_field(data, 'onlineId', 'comment'),
            text=data.get('commentString') or '',
            date=data.get('date'),
            raw=data,
        )
