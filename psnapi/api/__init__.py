"""API wrappers; exposes all concrete wrappers from one import."""
from .community import Community
from .game import Game
from .message_thread import Message, MessageThread, MessageType
from .session import Session, SessionType
from .story import Story
from .thread import Thread
from .user import User

__all__ = [
    'Community',
    'Game',
    'Message',
    'MessageThread',
    'MessageType',
    'Session',
    'SessionType',
    'Story',
    'Thread',
    'User',
]
