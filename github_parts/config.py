"""
Settings for a GitHub App, read from GITHUB_APP_* environment variables

    GITHUB_APP_ID                   numeric App ID (required)
    GITHUB_APP_PRIVATE_KEY          PEM content of the private key
    GITHUB_APP_PRIVATE_KEY_PATH     path to the .pem file, used when the above is unset
    GITHUB_APP_INSTALLATION_ID      default installation for the tool server
    GITHUB_APP_API_URL              API base URL, change for GitHub Enterprise Server
    GITHUB_APP_REQUEST_TIMEOUT      seconds before an HTTP request is abandoned
    GITHUB_APP_TOKEN_REFRESH_MARGIN seconds before expiry at which tokens are renewed
    GITHUB_APP_JWT_CLOCK_SKEW       seconds the JWT iat claim is back-dated
    GITHUB_APP_USER_AGENT           User-Agent header sent with every request
"""

from typing import Optional

from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .credentials import AppCredentials
from .errors import ConfigurationError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_USER_AGENT = "github-parts"


class GitHubAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="GITHUB_APP_", extra="ignore")

    id: Optional[int] = None
    private_key: Optional[SecretStr] = None
    private_key_path: Optional[str] = None
    installation_id: Optional[int] = None
    api_url: str = DEFAULT_API_URL
    request_timeout: float = Field(default=30.0, gt=0)
    token_refresh_margin: int = Field(default=60, ge=0)
    jwt_clock_skew: int = Field(default=60, ge=0, le=300)
    user_agent: str = DEFAULT_USER_AGENT

    def credentials(self) -> AppCredentials:
        """Build the App credentials, preferring the inline key over the key file"""
        if not self.id:
            raise ConfigurationError("GitHub App ID is required. Set GITHUB_APP_ID.")
        if self.private_key is not None and self.private_key.get_secret_value():
            try:
                return AppCredentials(app_id=self.id, private_key=self.private_key.get_secret_value())
            except ValidationError as e:
                raise ConfigurationError(f"Invalid GitHub App credentials: {e.error_count()} error(s)") from None
        if self.private_key_path:
            try:
                return AppCredentials.from_pem_file(self.id, self.private_key_path)
            except ValidationError as e:
                raise ConfigurationError(f"Invalid GitHub App credentials: {e.error_count()} error(s)") from None
        raise ConfigurationError(
            "GitHub App private key is required. Set GITHUB_APP_PRIVATE_KEY or GITHUB_APP_PRIVATE_KEY_PATH."
        )
