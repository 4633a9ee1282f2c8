"""
App JWT signing

GitHub authenticates a GitHub App with a short-lived RS256 JWT whose issuer is
the App ID. The JWT is only used to exchange it for installation tokens.
https://docs.github.com/en/apps/creating-github-apps/authenticating-with-a-github-app/generating-a-json-web-token-jwt-for-a-github-app
"""

import logging
import threading
from datetime import datetime, timedelta
from typing import Optional

import jwt
from pydantic import BaseModel, ConfigDict, SecretStr

from ..clock import Clock, SystemClock
from ..credentials import AppCredentials
from ..errors import SigningError

logger = logging.getLogger(__name__)

ALGORITHM = "RS256"
# GitHub refuses App JWTs that live longer than this
MAX_LIFETIME = timedelta(minutes=10)


class AppJwt(BaseModel):
    """A signed App JWT and the validity window encoded in it"""

    model_config = ConfigDict(frozen=True)

    token: SecretStr
    issued_at: datetime
    expires_at: datetime

    def is_valid(self, now: datetime, margin: timedelta = timedelta(0)) -> bool:
        return self.expires_at - now > margin


class AppJwtSigner:
    """Mints App JWTs and keeps the latest one around for reuse

    The JWT is App-wide, so one signer is shared by every installation.
    """

    def __init__(
        self,
        credentials: AppCredentials,
        clock: Optional[Clock] = None,
        clock_skew: int = 60,
        refresh_margin: int = 60,
    ):
        self.credentials = credentials
        self.clock = clock or SystemClock()
        self.clock_skew = timedelta(seconds=clock_skew)
        self.refresh_margin = timedelta(seconds=refresh_margin)
        self._current: Optional[AppJwt] = None
        self._lock = threading.Lock()

    def mint(self) -> AppJwt:
        """Sign a new JWT, back-dated by the clock skew allowance"""
        issued_at = self.clock.now().replace(microsecond=0) - self.clock_skew
        expires_at = issued_at + MAX_LIFETIME

        payload = {
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
            "iss": str(self.credentials.app_id),
        }

        try:
            token = jwt.encode(payload, self.credentials.private_key.get_secret_value(), algorithm=ALGORITHM)
        except (jwt.PyJWTError, ValueError, TypeError) as e:
            # the message of a key parsing error never contains the key itself
            raise SigningError(f"Failed to sign JWT for GitHub App {self.credentials.app_id}: {e}") from e

        logger.info("Minted JWT for GitHub App %s (expires at %s)", self.credentials.app_id, expires_at.isoformat())
        return AppJwt(token=token, issued_at=issued_at, expires_at=expires_at)

    def current(self) -> AppJwt:
        """Return the cached JWT, or mint a replacement when it is about to expire"""
        now = self.clock.now()
        with self._lock:
            cached = self._current
        if cached is not None and cached.is_valid(now, self.refresh_margin):
            return cached

        fresh = self.mint()
        with self._lock:
            self._current = fresh
        return fresh

    def invalidate(self, app_jwt: AppJwt) -> None:
        """Forget ``app_jwt`` so the next call to :meth:`current` mints a new one

        A newer JWT swapped in by another thread is kept.
        """
        with self._lock:
            if self._current is app_jwt:
                self._current = None
