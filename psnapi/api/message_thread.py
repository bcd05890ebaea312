"""Group messaging wrappers."""
import json
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, Iterable, List, Optional, Union

from ..cache import CachedDocument
from ..client import MultipartPart
from ..errors import MissingFieldError, ValidationError
from ..models import MessageThreadInfo, parse_timestamp
from ..resources import Image
from .base import AbstractApi

_JSON_UTF8 = 'application/json; charset=utf-8'
_MESSAGE_IMAGE_TYPES = ('image/jpeg', 'image/png')


class MessageType(IntEnum):
    TEXT = 1
    IMAGE = 3
    AUDIO = 1011


class Message(AbstractApi):
    """One event of a message thread."""

    def __init__(self, client, data: Dict[str, Any], thread=None,
                 outgoing: bool = False) -> None:
        super().__init__(client)
        self._data = data
        self._thread = thread
        self._outgoing = outgoing

    def __repr__(self) -> str:
        return f"Message({self.event_index()!r}, type={self.message_type()!r})"

    @property
    def data(self) -> Dict[str, Any]:
        return self._data

    def thread(self):
        return self._thread

    def _detail(self) -> Dict[str, Any]:
        event = self._data.get('messageEventDetail', self._data)
        return event if isinstance(event, dict) else {}

    def event_index(self) -> Optional[str]:
        return self._data.get('eventIndex') or self._detail().get('eventIndex')

    def message_type(self) -> Optional[MessageType]:
        code = self._detail().get('eventCategoryCode')
        try:
            return MessageType(int(code))
        except (TypeError, ValueError):
            return None

    def body(self) -> str:
        return (self._detail().get('messageDetail') or {}).get('body') or ''

    def sender(self):
        from .user import User

        if self._outgoing:
            return User(self.client)
        sender = self._detail().get('sender') or {}
        if not sender.get('onlineId'):
            raise MissingFieldError('sender.onlineId', 'message')
        return User(self.client, sender['onlineId'])

    def posted_at(self) -> Optional[datetime]:
        return parse_timestamp(self._detail().get('postDate'), 'postDate', 'message')


class MessageThread(AbstractApi):
    """A group-messaging conversation identified by its thread id."""

    MESSAGE_THREAD_ENDPOINT = 'https://us-gmsg.np.community.playstation.net/groupMessaging/v1/'

    _INFO_FIELDS = 'threadMembers,threadNameDetail,threadThumbnailDetail,threadProperty,' \
                   'latestTakedownEventDetail,newArrivalEventDetail,threadEvents'

    def __init__(self, client, thread_id: str) -> None:
        super().__init__(client)
        self._thread_id = thread_id
        self._info: CachedDocument[MessageThreadInfo] = CachedDocument(
            lambda: self._fetch(count=1),
            MessageThreadInfo.from_json,
            name=f'message thread {thread_id}',
        )

    def __repr__(self) -> str:
        return f"MessageThread({self._thread_id!r})"

    @classmethod
    def create(cls, client, online_ids: Iterable[str]) -> 'MessageThread':
        """Create a thread between the authenticated account and *online_ids*."""
        members = [oid for oid in online_ids if oid]
        if not members:
            raise ValidationError("A message thread needs at least one other member")
        own_id = client.online_id()
        if own_id not in members:
            members.append(own_id)
        detail = {'threadDetail': {'threadMembers': [{'onlineId': oid} for oid in members]}}
        response = client.post_multipart(cls.MESSAGE_THREAD_ENDPOINT + 'threads/', [
            MultipartPart('threadDetail', json.dumps(detail, indent=4), _JSON_UTF8),
        ])
        if not response.get('threadId'):
            raise MissingFieldError('threadId', 'thread creation response')
        return cls(client, response['threadId'])

    def _url(self) -> str:
        return self.MESSAGE_THREAD_ENDPOINT + f'threads/{self._thread_id}'

    def _fetch(self, count: int) -> Dict[str, Any]:
        return self.get(self._url(), {'fields': self._INFO_FIELDS, 'count': count})

    def thread_id(self) -> str:
        return self._thread_id

    def info(self, force: bool = False) -> MessageThreadInfo:
        return self._info.get(force)

    def name(self) -> str:
        return self.info().name

    def member_count(self) -> int:
        return len(self.info().members)

    def members(self) -> List['User']:
        from .user import User

        return [
            User(self.client, member['onlineId'])
            for member in self.info().members
            if member.get('onlineId')
        ]

    def messages(self, count: int = 20) -> List[Message]:
        """Most recent *count* events; always fetched fresh."""
        info = MessageThreadInfo.from_json(self._fetch(count=count))
        return [Message(self.client, event, self) for event in info.events]

    def send_message(self, text: str) -> Message:
        if not text:
            raise ValidationError("Message text must not be empty")
        return self._send(MessageType.TEXT, {'body': text})

    def send_image(self, image: Union[Image, bytes]) -> Message:
        image = Image.coerce(image)
        if image.type() not in _MESSAGE_IMAGE_TYPES:
            raise ValidationError(f"Unsupported message image type: {image.type()}")
        return self._send(MessageType.IMAGE, {'body': ''}, MultipartPart(
            'imageData', image.data(), image.type(), filename='image'))

    def send_audio(self, audio: bytes, length_seconds: int) -> Message:
        if not audio:
            raise ValidationError("Audio data must not be empty")
        if length_seconds <= 0:
            raise ValidationError("Audio length must be a positive number of seconds")
        return self._send(
            MessageType.AUDIO,
            {'body': '', 'voiceDetail': {'playbackTime': length_seconds}},
            MultipartPart('voiceData', audio, 'audio/3gpp', filename='voice'),
        )

    def _send(self, message_type: MessageType, message_detail: Dict[str, Any],
              attachment: Optional[MultipartPart] = None) -> Message:
        event = {
            'messageEventDetail': {
                'eventCategoryCode': int(message_type),
                'messageDetail':     message_detail,
            }
        }
        parts = [MultipartPart('messageEventDetail', json.dumps(event, indent=4), _JSON_UTF8)]
        if attachment is not None:
            parts.append(attachment)
        response = self.post_multipart(self._url() + '/messages', parts)
        self._log.debug("Sent %s message to thread %s", message_type.name, self._thread_id)
        event['eventIndex'] = response.get('eventIndex')
        return Message(self.client, event, self, outgoing=True)

    def set_name(self, name: str) -> None:
        self.put_json(self._url() + '/name', {'threadNameDetail': {'threadName': name}})

    def leave(self) -> None:
        self.delete(self._url() + '/users/me')
