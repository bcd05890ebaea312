"""
client.py
=========
Authenticated HTTP client shared by every API wrapper.

Sony's PlayStation Network does not have an official public OAuth application
registration flow for third-party developers.  Instead, users provide their
**NPSSO token**, a long-lived session token that PlayStation stores in the
browser cookie ``npsso`` when logged in at ``my.playstation.com``.

Auth flow
---------
1. User retrieves their NPSSO token from browser cookies.
2. ``connect(npsso)`` exchanges the NPSSO for a short-lived OAuth access
   token via the Sony SSO endpoint.
3. Every request made through :meth:`Client.get` and friends carries the
   bearer token, refreshing it first when it has expired.

Usage
-----
::

    from psnapi import Client, User

    client = Client().connect(npsso)
    me = User(client)
    print(me.online_id(), me.follower_count())
"""
from __future__ import annotations

import logging
import time
from typing import Any, Dict, Iterable, NamedTuple, Optional, Union
from urllib.parse import parse_qs, urlparse

import requests

from .cache import CachedDocument
from .errors import AuthError, ConfigError, NotFoundError, RemoteError
from .models import UserProfile

logger = logging.getLogger(__name__)

_DEFAULT_TIMEOUT = 10  # seconds


class MultipartPart(NamedTuple):
    """One field of a ``multipart/form-data`` body."""
    name: str
    contents: Union[str, bytes]
    content_type: Optional[str] = None
    filename: Optional[str] = None


# ---------------------------------------------------------------------------
# Token storage
# ---------------------------------------------------------------------------

class _OAuth2Mixin:
    """Mixin that adds token storage, expiry tracking, and Authorization-header helper."""

    def __init__(self) -> None:
        self._access_token:  Optional[str] = None
        self._refresh_token: Optional[str] = None
        self._token_expiry:  float = 0.0   # unix timestamp

    @property
    def is_authenticated(self) -> bool:
        return bool(self._access_token)

    def _is_token_expired(self) -> bool:
        return time.time() >= self._token_expiry - 30  # 30-second buffer

    def _store_tokens(self, data: Dict[str, Any]) -> None:
        self._access_token  = data.get('access_token', '')
        self._refresh_token = data.get('refresh_token') or self._refresh_token
        expires_in          = int(data.get('expires_in', 3600))
        self._token_expiry  = time.time() + expires_in
        logger.info("%s: tokens stored, expires in %ds", self.__class__.__name__, expires_in)

    def _auth_header(self) -> Dict[str, str]:
        return {'Authorization': f'Bearer {self._access_token}'}


# ---------------------------------------------------------------------------
# PlayStation Network client
# ---------------------------------------------------------------------------

class Client(_OAuth2Mixin):
    """HTTP collaborator passed to every API wrapper.

    Args:
        access_token:  Existing bearer token, if one is already known.
        refresh_token: Refresh token paired with *access_token*.
        timeout:       HTTP request timeout in seconds.
        language:      Value for the ``Accept-Language`` header.
        expires_in:    Remaining lifetime of *access_token* in seconds.
    """

    _AUTHORIZE_URL = "https://ca.account.sony.com/api/authz/v3/oauth/authorize"
    _TOKEN_URL     = "https://ca.account.sony.com/api/authz/v3/oauth/token"
    _PROFILE_URL   = "https://us-prof.np.community.playstation.net/userProfile/v1/users/me/profile2"
    _REDIRECT_URI  = "com.scee.psxandroid.sceabroker://psxbroker"
    # Public client credentials shipped in the PlayStation Android app. They
    # only complete the standard OAuth2 code exchange.
    _CLIENT_ID     = "09515159-7237-4370-9b40-3806e67c0891"
    _CLIENT_SECRET = "ucIBBpU6QUVYETxW"
    _SCOPE         = "psn:mobile.v2.core psn:clientapp"

    def __init__(self, access_token: Optional[str] = None,
                 refresh_token: Optional[str] = None,
                 timeout: int = _DEFAULT_TIMEOUT,
                 language: str = 'en',
                 expires_in: int = 3600) -> None:
        _OAuth2Mixin.__init__(self)
        self._timeout = timeout
        self._session = requests.Session()
        self._session.headers.update({
            'User-Agent': 'PlayStation/21090100 CFNetwork/1126 Darwin/19.5.0',
            'Accept-Language': language,
        })
        if access_token:
            self._store_tokens({
                'access_token':  access_token,
                'refresh_token': refresh_token,
                'expires_in':    expires_in,
            })
        elif refresh_token:
            self._refresh_token = refresh_token
        self._profile: CachedDocument[UserProfile] = CachedDocument(
            lambda: self.get(self._PROFILE_URL, {'fields': 'onlineId'}),
            UserProfile.from_json,
            name='own profile',
        )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'Client':
        """Build a client from a dict returned by :func:`psnapi.config.load_config`.

        A configured access token is used as-is; otherwise the NPSSO token is
        exchanged immediately.

        Raises:
            ConfigError: Neither an access token, a refresh token nor an NPSSO
                token is configured.
            AuthError:   The NPSSO exchange or token refresh failed.
        """
        client = cls(
            access_token=config.get('access_token') or None,
            refresh_token=config.get('refresh_token') or None,
            timeout=int(config.get('api_timeout_seconds', _DEFAULT_TIMEOUT)),
            language=config.get('language') or 'en',
        )
        if client.is_authenticated:
            return client
        if config.get('npsso'):
            return client.connect(config['npsso'])
        if client._refresh_token:
            client.refresh_tokens()
            return client
        raise ConfigError("No PSN credentials configured; set 'npsso' or PSN_NPSSO")

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> 'Client':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    def connect(self, npsso: str) -> 'Client':
        """Exchange an NPSSO token for a PlayStation Network access token.

        Args:
            npsso: The NPSSO session token string.

        Returns:
            ``self``, so construction and login can be chained.

        Raises:
            AuthError: The NPSSO is invalid/expired or the token exchange failed.
        """
        params = {
            'access_type':   'offline',
            'client_id':     self._CLIENT_ID,
            'redirect_uri':  self._REDIRECT_URI,
            'response_type': 'code',
            'scope':         self._SCOPE,
        }
        try:
            resp = self._session.get(
                self._AUTHORIZE_URL,
                params=params,
                headers={'Cookie': f'npsso={npsso}'},
                allow_redirects=False,
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            logger.warning("PSN: NPSSO to auth code failed: %s", exc)
            raise AuthError(f"NPSSO exchange failed: {exc}", url=self._AUTHORIZE_URL) from exc

        location = resp.headers.get('Location', '')
        codes = parse_qs(urlparse(location).query).get('code', [])
        if not codes:
            logger.warning("PSN: NPSSO exchange did not return auth code. "
                           "Token may be expired or invalid.")
            raise AuthError(
                "NPSSO exchange did not return an authorization code",
                status_code=resp.status_code,
                url=self._AUTHORIZE_URL,
            )

        self._request_tokens({
            'code':         codes[0],
            'grant_type':   'authorization_code',
            'redirect_uri': self._REDIRECT_URI,
            'token_format': 'jwt',
        })
        logger.info("PSN: authenticated successfully")
        return self

    def refresh_tokens(self) -> None:
        """Refresh the PSN access token using the stored refresh token.

        Raises:
            AuthError: No refresh token is stored or the refresh failed.
        """
        if not self._refresh_token:
            raise AuthError("No refresh token available; call connect(npsso) again")
        self._request_tokens({
            'grant_type':    'refresh_token',
            'refresh_token': self._refresh_token,
            'token_format':  'jwt',
            'scope':         self._SCOPE,
        })

    def _request_tokens(self, data: Dict[str, str]) -> None:
        try:
            resp = self._session.post(
                self._TOKEN_URL,
                data=data,
                auth=(self._CLIENT_ID, self._CLIENT_SECRET),
                timeout=self._timeout,
            )
            resp.raise_for_status()
            body = resp.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("PSN: token request (%s) failed: %s", data.get('grant_type'), exc)
            raise AuthError(f"Failed to obtain PSN token: {exc}", url=self._TOKEN_URL) from exc

        if not body.get('access_token'):
            raise AuthError("PSN token response missing 'access_token'", url=self._TOKEN_URL)
        self._store_tokens(body)

    def _ensure_token(self) -> None:
        if not self.is_authenticated:
            if not self._refresh_token:
                raise AuthError("Client is not authenticated; call connect(npsso) first")
            self.refresh_tokens()
        elif self._is_token_expired() and self._refresh_token:
            self.refresh_tokens()

    # ------------------------------------------------------------------
    # Account
    # ------------------------------------------------------------------

    def online_id(self, force: bool = False) -> str:
        """Online ID of the authenticated account (fetched once)."""
        return self._profile.get(force).online_id

    # ------------------------------------------------------------------
    # HTTP verbs
    # ------------------------------------------------------------------

    def get(self, url: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._request('GET', url, params=params or {})

    def post(self, url: str, data: Any = None) -> Dict[str, Any]:
        return self._request('POST', url, data=data)

    def post_json(self, url: str, data: Any = None) -> Dict[str, Any]:
        # An absent body is still sent as an empty JSON object
        return self._request('POST', url, json={} if data is None else data)

    def put_json(self, url: str, data: Any) -> Dict[str, Any]:
        return self._request('PUT', url, json=data)

    def delete(self, url: str) -> Dict[str, Any]:
        return self._request('DELETE', url)

    def post_multipart(self, url: str, parts: Iterable[MultipartPart]) -> Dict[str, Any]:
        """POST a ``multipart/form-data`` body built from *parts*."""
        files = [
            (part.name, (part.filename, part.contents, part.content_type))
            for part in parts
        ]
        return self._request('POST', url, files=files)

    def _request(self, method: str, url: str, **kwargs: Any) -> Dict[str, Any]:
        """Perform one authenticated request and return the decoded JSON body."""
        self._ensure_token()
        logger.debug("%s %s", method, url)
        resp = None
        try:
            resp = self._session.request(
                method,
                url,
                headers=self._auth_header(),
                timeout=self._timeout,
                **kwargs,
            )
            resp.raise_for_status()
        except requests.HTTPError as exc:
            raise self._status_error(method, url, resp) from exc
        except requests.RequestException as exc:
            logger.warning("PSN %s %s failed: %s", method, url, exc)
            raise RemoteError(f"Network error calling {url}: {exc}", url=url) from exc

        if resp.status_code == 204 or not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError as exc:
            raise RemoteError(
                f"Could not decode response from {url}",
                status_code=resp.status_code,
                url=url,
            ) from exc

    @staticmethod
    def _status_error(method: str, url: str, resp: requests.Response) -> RemoteError:
        status = resp.status_code
        logger.warning("PSN %s %s returned HTTP %s", method, url, status)
        message = f"PSN API error {status} for {url}: {resp.text}"
        if status == 404:
            return NotFoundError(message, status_code=status, url=url)
        if status in (401, 403):
            return AuthError(message, status_code=status, url=url)
        return RemoteError(message, status_code=status, url=url)
