"""
Authenticated access to the GitHub REST API on behalf of an installation
"""

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional, Type, TypeVar

import requests
from github import Auth, Github
from pydantic import BaseModel, TypeAdapter, ValidationError

from .auth import AppJwtSigner, TokenCache
from .clock import Clock, SystemClock
from .config import DEFAULT_API_URL, DEFAULT_USER_AGENT, GitHubAppSettings
from .credentials import AppCredentials
from .errors import ApiError, DeserializationError, NotFoundError
from .transport import error_message, github_headers

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RequestSpec:
    """Method, path and optional JSON body of one API call

    ``path`` is relative to the API URL (``/repos/octocat/hello-world``). A pydantic
    model passed as ``body`` is serialized without its unset optional fields.
    """

    method: str
    path: str
    body: Any = None
    params: Optional[Dict[str, Any]] = None


class InstallationAuth(Auth.Auth):
    """PyGithub authentication that reads the installation token from the cache on every request"""

    def __init__(self, tokens: TokenCache, installation_id: int):
        self.tokens = tokens
        self.installation_id = installation_id

    @property
    def token_type(self) -> str:
        return "Bearer"

    @property
    def token(self) -> str:
        return self.tokens.get_token(self.installation_id).get()


@lru_cache(maxsize=None)
def _adapter(response_type: Any) -> TypeAdapter:
    return TypeAdapter(response_type)


class GitHubClient:
    """Executes API calls for any installation of one GitHub App

    Every call goes through the token cache, so a token is never reused past its
    refresh margin. Nothing is retried: ApiError and AuthError reach the caller.
    """

    def __init__(
        self,
        credentials: AppCredentials,
        api_url: str = DEFAULT_API_URL,
        session: Optional[requests.Session] = None,
        clock: Optional[Clock] = None,
        request_timeout: float = 30.0,
        token_refresh_margin: int = 60,
        jwt_clock_skew: int = 60,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        self.api_url = api_url.rstrip("/")
        self.session = session or requests.Session()
        self.request_timeout = request_timeout
        self.user_agent = user_agent
        self.clock = clock or SystemClock()
        self.signer = AppJwtSigner(
            credentials,
            clock=self.clock,
            clock_skew=jwt_clock_skew,
            refresh_margin=token_refresh_margin,
        )
        self.tokens = TokenCache(
            self.signer,
            api_url=self.api_url,
            session=self.session,
            clock=self.clock,
            refresh_margin=token_refresh_margin,
            request_timeout=request_timeout,
            user_agent=user_agent,
        )

    @classmethod
    def from_settings(cls, settings: Optional[GitHubAppSettings] = None, **kwargs) -> "GitHubClient":
        """Build a client from GITHUB_APP_* settings"""
        settings = settings or GitHubAppSettings()
        return cls(
            settings.credentials(),
            api_url=settings.api_url,
            request_timeout=settings.request_timeout,
            token_refresh_margin=settings.token_refresh_margin,
            jwt_clock_skew=settings.jwt_clock_skew,
            user_agent=settings.user_agent,
            **kwargs,
        )

    def execute(self, installation_id: int, request: RequestSpec, response_type: Optional[Type[T]] = None) -> T:
        """
        Perform one API call as the installation and validate the JSON response.

        Args:
            installation_id: installation to act for
            request: method, path and body of the call
            response_type: anything pydantic can validate into (a model, List[Model], dict...).
                When omitted the decoded JSON is returned unchanged.

        Raises:
            AuthError: no installation token could be obtained
            ApiError: GitHub answered with a non-2xx status (NotFoundError for 404)
            DeserializationError: the body does not match ``response_type``
        """
        token = self.tokens.get_token(installation_id)

        url = request.path if request.path.startswith(("http://", "https://")) else f"{self.api_url}{request.path}"
        body = request.body
        if isinstance(body, BaseModel):
            body = body.model_dump(mode="json", exclude_none=True)

        try:
            response = self.session.request(
                request.method,
                url,
                headers=github_headers(token.get(), self.user_agent),
                params=request.params,
                json=body,
                timeout=self.request_timeout,
            )
        except requests.RequestException as e:
            logger.error("Network error on %s %s: %s", request.method, request.path, e)
            raise ApiError(None, f"Network error on {request.method} {request.path}: {e}") from e

        if not 200 <= response.status_code < 300:
            message = error_message(response)
            logger.error(
                "Failed to %s %s for installation %s (status %s): %s",
                request.method,
                request.path,
                installation_id,
                response.status_code,
                message,
            )
            if response.status_code == 401:
                # GitHub no longer accepts the token, make the next call fetch a new one
                self.tokens.invalidate(installation_id, token)
            if response.status_code == 404:
                raise NotFoundError(404, message)
            raise ApiError(response.status_code, message)

        return self._deserialize(response, request, response_type)

    def get(self, installation_id: int, path: str, response_type: Optional[Type[T]] = None, params=None) -> T:
        return self.execute(installation_id, RequestSpec("GET", path, params=params), response_type)

    def post(self, installation_id: int, path: str, body: Any = None, response_type: Optional[Type[T]] = None) -> T:
        return self.execute(installation_id, RequestSpec("POST", path, body=body), response_type)

    def patch(self, installation_id: int, path: str, body: Any = None, response_type: Optional[Type[T]] = None) -> T:
        return self.execute(installation_id, RequestSpec("PATCH", path, body=body), response_type)

    def delete(self, installation_id: int, path: str) -> None:
        self.execute(installation_id, RequestSpec("DELETE", path))

    def pygithub(self, installation_id: int) -> Github:
        """A PyGithub client for the installation, for resources this library does not model

        Each PyGithub request takes its token from the cache, so a long-lived client
        keeps working across token refreshes. The first token is fetched here so
        that authentication errors surface immediately.
        """
        self.tokens.get_token(installation_id)
        return Github(
            auth=InstallationAuth(self.tokens, installation_id),
            base_url=self.api_url,
            timeout=int(self.request_timeout),
            user_agent=self.user_agent,
        )

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "GitHubClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _deserialize(self, response: requests.Response, request: RequestSpec, response_type):
        if not response.content:
            data = None
        else:
            try:
                data = response.json()
            except ValueError as e:
                raise DeserializationError(f"Response to {request.method} {request.path} is not valid JSON") from e

        if response_type is None:
            return data

        try:
            return _adapter(response_type).validate_python(data)
        except ValidationError as e:
            raise DeserializationError(
                f"Response to {request.method} {request.path} does not match {getattr(response_type, '__name__', response_type)}: {e}"
            ) from e
