"""Activity feed story wrapper."""
from typing import Any, Dict, List, Optional

from ..errors import MissingFieldError
from ..models import StoryComment
from .base import AbstractApi
from .game import Game


class Story(AbstractApi):
    """A single activity-feed entry.

    Condensed stories (e.g. several trophy unlocks rolled into one entry) are
    expanded by :meth:`psnapi.api.user.User.story`, so a ``Story`` always
    refers to something that can be liked or commented on.
    """

    ACTIVITY_ENDPOINT = 'https://activity.api.np.km.playstation.net/activity/api/'

    def __init__(self, client, data: Dict[str, Any], user=None) -> None:
        super().__init__(client)
        self._data = data
        self._user = user

    def __repr__(self) -> str:
        return f"Story({self._data.get('storyId')!r}, type={self.story_type()!r})"

    @property
    def data(self) -> Dict[str, Any]:
        return self._data

    def story_id(self) -> str:
        if 'storyId' not in self._data:
            raise MissingFieldError('storyId', 'story')
        return self._data['storyId']

    def story_type(self) -> str:
        return self._data.get('storyType') or ''

    def caption(self) -> str:
        return self._data.get('caption') or ''

    def date(self) -> Optional[str]:
        return self._data.get('date')

    def like_count(self) -> int:
        return int(self._data.get('likeCount') or 0)

    def comment_count(self) -> int:
        return int(self._data.get('commentCount') or 0)

    def liked(self) -> bool:
        return bool(self._data.get('liked', False))

    def user(self):
        return self._user

    def game(self) -> Optional[Game]:
        targets = self._data.get('targets') or []
        title_id = self._data.get('titleId') or next(
            (t.get('meta') for t in targets if t.get('type') == 'TITLE_ID'), None
        )
        if not title_id:
            return None
        return Game(self.client, title_id, self._user)

    def like(self) -> None:
        self.post_json(self.ACTIVITY_ENDPOINT + 'v1/users/{}/set/like/story/{}'.format(
            self.client.online_id(), self.story_id()))

    def unlike(self) -> None:
        self.post_json(self.ACTIVITY_ENDPOINT + 'v1/users/{}/set/dislike/story/{}'.format(
            self.client.online_id(), self.story_id()))

    def comment(self, text: str) -> Dict[str, Any]:
        return self.post_json(
            self.ACTIVITY_ENDPOINT + 'v1/users/{}/comment/{}'.format(
                self.client.online_id(), self.story_id()),
            {'commentString': text},
        )

    def comments(self, count: int = 25) -> List[StoryComment]:
        body = self.get(self.ACTIVITY_ENDPOINT + 'v1/users/{}/stories/{}/comments'.format(
            self.client.online_id(), self.story_id()), {'count': count, 'sort': 'newest'})
        return [StoryComment.from_json(c) for c in body.get('userComments') or []]
