"""
Per-installation cache of installation access tokens

Entries are immutable InstallationToken objects. A refresh builds the new token
completely and then swaps it into the mapping under a lock, so readers only ever
see the old entry or the new one. Network calls run outside the lock: two
threads missing the cache at once both fetch a token and the last write wins.
"""

import logging
import threading
from datetime import timedelta
from typing import Dict, Optional

import requests
from pydantic import ValidationError

from ..clock import Clock, SystemClock
from ..errors import AuthError, InvalidResponse, RequestFailed, SigningError
from ..transport import error_message, github_headers
from .app_jwt import AppJwtSigner
from .installation_token import InstallationToken

logger = logging.getLogger(__name__)


class TokenCache:
    """Hands out valid installation tokens, requesting new ones from GitHub when needed"""

    def __init__(
        self,
        signer: AppJwtSigner,
        api_url: str = "https://api.github.com",
        session: Optional[requests.Session] = None,
        clock: Optional[Clock] = None,
        refresh_margin: int = 60,
        request_timeout: float = 30.0,
        user_agent: str = "github-parts",
    ):
        self.signer = signer
        self.api_url = api_url.rstrip("/")
        self.session = session or requests.Session()
        self.clock = clock or SystemClock()
        self.refresh_margin = timedelta(seconds=refresh_margin)
        self.request_timeout = request_timeout
        self.user_agent = user_agent
        self._tokens: Dict[int, InstallationToken] = {}
        self._lock = threading.Lock()

    def get_token(self, installation_id: int) -> InstallationToken:
        """
        Return a token for the installation that stays valid for longer than the refresh margin.

        Raises:
            AuthError: signing the App JWT failed (the SigningError is the cause)
            RequestFailed: GitHub could not be reached or answered with a non-2xx status
            InvalidResponse: the token exchange returned an unusable body
        """
        with self._lock:
            cached = self._tokens.get(installation_id)

        if cached is not None and cached.is_valid(self.clock.now(), self.refresh_margin):
            logger.debug("Using cached installation token for installation %s", installation_id)
            return cached

        token = self._request_token(installation_id)

        with self._lock:
            self._tokens[installation_id] = token
        return token

    def invalidate(self, installation_id: int, token: Optional[InstallationToken] = None) -> None:
        """
        Drop the cached token of an installation.

        When ``token`` is given the entry is only dropped if it is still that token, so
        a stale 401 cannot evict a token that another thread has just refreshed.
        """
        with self._lock:
            cached = self._tokens.get(installation_id)
            if cached is None:
                return
            if token is not None and cached is not token:
                return
            del self._tokens[installation_id]
        logger.info("Invalidated cached installation token for installation %s", installation_id)

    def clear(self) -> None:
        with self._lock:
            self._tokens.clear()
        logger.info("Cleared all cached installation tokens")

    def peek(self, installation_id: int) -> Optional[InstallationToken]:
        """The cached entry as-is, without validity checks or network calls"""
        with self._lock:
            return self._tokens.get(installation_id)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

    def _request_token(self, installation_id: int) -> InstallationToken:
        try:
            app_jwt = self.signer.current()
        except SigningError as e:
            raise AuthError(f"Cannot request installation token for installation {installation_id}: {e}") from e

        url = f"{self.api_url}/app/installations/{installation_id}/access_tokens"
        headers = github_headers(app_jwt.token.get_secret_value(), self.user_agent)

        logger.info("Requesting new installation token for installation %s", installation_id)
        try:
            response = self.session.post(url, headers=headers, timeout=self.request_timeout)
        except requests.RequestException as e:
            logger.error("Network error requesting installation token for installation %s: %s", installation_id, e)
            raise RequestFailed(f"Network error requesting installation token: {e}") from e

        if not 200 <= response.status_code < 300:
            logger.error(
                "Failed to get installation token for installation %s (status %s)",
                installation_id,
                response.status_code,
            )
            if response.status_code == 401:
                self.signer.invalidate(app_jwt)
            raise RequestFailed(
                f"GitHub rejected the installation token request (status {response.status_code}): {error_message(response)}",
                status=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise InvalidResponse("Installation token response is not valid JSON") from e
        if not isinstance(data, dict):
            raise InvalidResponse("Installation token response is not a JSON object")

        try:
            token = InstallationToken.model_validate({**data, "installation_id": installation_id})
        except ValidationError as e:
            # the body holds the token, keep it out of the message
            fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
            raise InvalidResponse(f"Installation token response is missing or has invalid fields: {fields}") from None

        if not token.is_valid(self.clock.now()):
            raise InvalidResponse(f"GitHub returned an already expired token for installation {installation_id}")

        logger.info(
            "Obtained installation token for installation %s (expires at %s)",
            installation_id,
            token.expires_at.isoformat(),
        )
        return token

