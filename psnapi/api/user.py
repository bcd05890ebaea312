"""User profile wrapper."""
from typing import List, Optional, Union

from ..cache import CachedDocument
from ..errors import MissingFieldError, ValidationError
from ..models import UserProfile, require_field
from ..resources import Image
from .base import AbstractApi
from .community import Community
from .game import Game
from .message_thread import Message, MessageThread
from .session import Session, SessionType
from .story import Story


class User(AbstractApi):
    """A PlayStation Network account.

    Args:
        client:    Authenticated :class:`~psnapi.client.Client`.
        online_id: Online ID of the account, or ``None`` for the
                   authenticated account (sent as ``"me"``).
    """

    USERS_ENDPOINT = 'https://us-prof.np.community.playstation.net/userProfile/v1/users/{}/'

    _PROFILE_FIELDS = (
        'npId,onlineId,accountId,avatarUrls,plus,aboutMe,languagesUsed,'
        'trophySummary(@default,progress,earnedTrophies),isOfficiallyVerified,'
        'personalDetail(@default,profilePictureUrls),personalDetailSharing,'
        'personalDetailSharingRequestMessageFlag,primaryOnlineStatus,'
        'presences(@titleInfo,hasBroadcastData),friendRelation,requestMessageFlag,'
        'blocking,mutualFriendsCount,following,followerCount,friendsCount,followingUsersCount'
    )
    _SESSION_FIELDS = '@default,npTitleDetail,npTitleDetail.platform,sessionName,' \
                      'sessionCreateTimestamp,availablePlatforms,members,memberCount,sessionMaxUser'
    _COMMUNITY_FIELDS = 'backgroundImage,description,id,isCommon,members,name,profileImage,role,' \
                        'unreadMessageCount,sessions,timezoneUtcOffset,language,titleId,titleName'

    def __init__(self, client, online_id: Optional[str] = None) -> None:
        super().__init__(client)
        self._online_id = online_id
        self._online_id_parameter = online_id or 'me'
        self._profile: CachedDocument[UserProfile] = CachedDocument(
            lambda: self.get(self._users_url('profile2'), {
                'fields':                   self._PROFILE_FIELDS,
                'avatarSizes':              'm,xl',
                'profilePictureSizes':      'm,xl',
                'languagesUsedLanguageSet': 'set3',
                'psVitaTitleIcon':          'circled',
                'titleIconSize':            's',
            }),
            UserProfile.from_json,
            name=f'profile {self._online_id_parameter}',
        )
        self._sessions: CachedDocument[List[Session]] = CachedDocument(
            lambda: self.get(Session.SESSION_ENDPOINT.format(self._online_id_parameter), {
                'fields':        self._SESSION_FIELDS,
                'titleIconSize': 's',
                'npLanguage':    'en',
            }),
            self._parse_sessions,
            name=f'sessions {self._online_id_parameter}',
        )

    def __repr__(self) -> str:
        return f"User({self._online_id_parameter!r})"

    def _users_url(self, path: str, user: Optional[str] = None) -> str:
        return self.USERS_ENDPOINT.format(user or self._online_id_parameter) + path

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    def online_id(self) -> str:
        return self.info().online_id

    def online_id_parameter(self) -> str:
        """The path segment used for this user's requests (``"me"`` for the own account)."""
        return self._online_id_parameter

    def info(self, force: bool = False) -> UserProfile:
        """Profile information, fetched once per instance unless *force* is set."""
        return self._profile.get(force)

    def about_me(self) -> str:
        return self.info().about_me

    def following(self) -> bool:
        """Whether the logged in account follows this user."""
        return self.info().following

    def follower_count(self) -> int:
        return self.info().follower_count

    def verified(self) -> bool:
        return self.info().is_officially_verified

    def avatar_url(self) -> str:
        avatars = self.info().avatar_urls
        if not avatars or not avatars[0].get('avatarUrl'):
            raise MissingFieldError('avatarUrls[0].avatarUrl', 'profile')
        return avatars[0]['avatarUrl']

    def friend(self) -> bool:
        return self.info().friend_relation != 'no'

    def close_friend(self) -> bool:
        return self.info().personal_detail_sharing != 'no'

    def blocking(self) -> bool:
        return self.info().blocking

    def plus(self) -> bool:
        return self.info().plus

    # ------------------------------------------------------------------
    # Friend and block lists
    # ------------------------------------------------------------------

    def _other_online_id(self) -> str:
        if self._online_id is None:
            raise ValidationError("This operation needs another user's online id, not the own account")
        return self._online_id

    def add(self, request_message: Optional[str] = None) -> None:
        """Send a friend request, optionally with a message."""
        target = self._other_online_id()
        data = {} if request_message is None else {'requestMessage': request_message}
        self.post_json(self._users_url(f'friendList/{target}', self.client.online_id()), data)

    def remove(self) -> None:
        target = self._other_online_id()
        self.delete(self._users_url(f'friendList/{target}', self.client.online_id()))

    def block(self) -> None:
        target = self._other_online_id()
        self.post(self._users_url(f'blockList/{target}', self.client.online_id()))

    def unblock(self) -> None:
        target = self._other_online_id()
        self.delete(self._users_url(f'blockList/{target}', self.client.online_id()))

    def friends(self, filter: str = 'online', limit: int = 36) -> List['User']:
        """The user's friends.

        Args:
            filter: Presence filter, e.g. ``'online'``.
            limit:  How many users to return.
        """
        body = self.get(self._users_url('friends/profiles2'), {
            'fields': 'onlineId',
            'filter': filter,
            'limit':  limit,
            'sort':   'name-onlineId',
        })
        return [
            User(self.client, require_field(item, 'onlineId', 'friend'))
            for item in body.get('profiles') or []
        ]

    # ------------------------------------------------------------------
    # Games, communities, activity
    # ------------------------------------------------------------------

    def games(self, limit: int = 100) -> List[Game]:
        """Titles the user has played, most recent first."""
        body = self.get(Game.GAME_ENDPOINT + f'users/{self._online_id_parameter}/titles', {
            'type':  'played',
            'app':   'richProfile',
            'sort':  '-lastPlayedDate',
            'limit': limit,
            'iw':    240,
            'ih':    240,
        })
        if body.get('size') == 0:
            return []
        return [
            Game(self.client, require_field(item, 'titleId', 'title'), self, item)
            for item in body.get('titles') or []
        ]

    def communities(self) -> List[Community]:
        params = {
            'fields':        self._COMMUNITY_FIELDS,
            'includeFields': 'gameSessions,timezoneUtcOffset,parties',
            'sort':          'common',
        }
        if self._online_id is not None:
            params['onlineId'] = self._online_id
        body = self.get(Community.COMMUNITY_ENDPOINT + 'communities', params)
        if body.get('size') == 0:
            return []
        return [
            Community(self.client, require_field(item, 'id', 'community'))
            for item in body.get('communities') or []
        ]

    def story(self, page: int = 0, include_comments: bool = True,
              offset: int = 0, block_size: int = 10) -> List[Story]:
        """One page of the user's activity feed."""
        body = self.get(
            Story.ACTIVITY_ENDPOINT + f'v2/users/{self._online_id_parameter}/feed/{page}',
            {
                'includeComments': str(include_comments).lower(),
                'offset':          offset,
                'blockSize':       block_size,
            },
        )
        stories: List[Story] = []
        for item in body.get('feed') or []:
            # Condensed entries group similar stories (e.g. trophy unlocks) and
            # can't be interacted with themselves
            condensed = item.get('condensedStories')
            if condensed:
                stories.extend(Story(self.client, child, self) for child in condensed)
            else:
                stories.append(Story(self.client, item, self))
        return stories

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    def _parse_sessions(self, body) -> List[Session]:
        if body.get('size') == 0:
            return []
        # A user can be in a party and a game session at once
        return [Session(self.client, item) for item in body.get('sessions') or []]

    def sessions(self, force: bool = False) -> List[Session]:
        """All of the user's active sessions (cached per instance)."""
        return self._sessions.get(force)

    def _filter_sessions(self, session_type: SessionType) -> List[Session]:
        return [s for s in self.sessions() if s.title_type() & session_type]

    def party_session(self) -> Optional[Session]:
        return next(iter(self._filter_sessions(SessionType.PARTY)), None)

    def game_session(self) -> Optional[Session]:
        return next(iter(self._filter_sessions(SessionType.GAME)), None)

    # ------------------------------------------------------------------
    # Messaging
    # ------------------------------------------------------------------

    def message_threads(self) -> List[MessageThread]:
        """All message threads that include this user."""
        body = self.get(MessageThread.MESSAGE_THREAD_ENDPOINT + 'users/me/threadIds', {
            'withOnlineIds': self._other_online_id(),
        })
        return [
            MessageThread(self.client, require_field(item, 'threadId', 'message thread'))
            for item in body.get('threadIds') or []
        ]

    def private_message_thread(self) -> Optional[MessageThread]:
        """The thread holding only the logged in account and this user, if any."""
        for thread in self.message_threads():
            if thread.member_count() == 2:
                return thread
        return None

    def _message_group(self) -> MessageThread:
        thread = self.private_message_thread()
        if thread is None:
            self._log.debug("No private thread with %s; creating one", self._online_id)
            thread = MessageThread.create(self.client, [self._other_online_id()])
        return thread

    def send_message(self, text: str) -> Message:
        return self._message_group().send_message(text)

    def send_image(self, image: Union[Image, bytes]) -> Message:
        return self._message_group().send_image(image)

    def send_audio(self, audio: bytes, length_seconds: int) -> Message:
        return self._message_group().send_audio(audio, length_seconds)
