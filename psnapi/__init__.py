"""
psnapi package.

Thin object wrappers over the PlayStation Network private REST endpoints:

  psnapi/client.py  authenticated HTTP client (NPSSO login, bearer tokens).
  psnapi/api/       one wrapper per remote resource (User, Community, ...).

Every wrapper receives the :class:`Client` explicitly; there is no global
session.
"""
from .api import (
    Community, Game, Message, MessageThread, MessageType, Session, SessionType,
    Story, Thread, User,
)
from .cache import CachedDocument, CacheState
from .client import Client, MultipartPart
from .config import load_config, setup_logging
from .errors import (
    AuthError, ConfigError, MissingFieldError, NotFoundError, PSNError,
    RemoteError, ValidationError,
)
from .pagination import Paginator
from .resources import Image

__version__ = '1.0.0'

__all__ = [
    'AuthError',
    'CachedDocument',
    'CacheState',
    'Client',
    'Community',
    'ConfigError',
    'Game',
    'Image',
    'Message',
    'MessageThread',
    'MessageType',
    'MissingFieldError',
    'MultipartPart',
    'NotFoundError',
    'Paginator',
    'PSNError',
    'RemoteError',
    'Session',
    'SessionType',
    'Story',
    'Thread',
    'User',
    'ValidationError',
    'load_config',
    'setup_logging',
]
