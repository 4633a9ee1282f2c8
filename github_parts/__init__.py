"""
github-parts - typed GitHub App client

Authenticates as a GitHub App and acts on behalf of its installations:

- App JWTs signed with the App's private key (RS256, 10 minute lifetime)
- installation tokens cached per installation and renewed before they expire
- an executor that attaches the token to every API call and validates responses
- typed resources and actions for check runs, check suites and file contents

Usage:
    client = GitHubClient.from_settings()
    readme = get_file(client, installation_id, "octocat", "hello-world", "README.md")
"""

__version__ = "0.10.0"

from .actions import (
    CreateCheckRunInput,
    GetFileResult,
    UpdateCheckRunInput,
    create_check_run,
    get_file,
    list_check_runs,
    list_check_suites,
    update_check_run,
)
from .auth import AppJwt, AppJwtSigner, InstallationToken, TokenCache
from .client import GitHubClient, RequestSpec
from .clock import Clock, SystemClock
from .config import GitHubAppSettings
from .credentials import AppCredentials
from .errors import (
    ApiError,
    AuthError,
    ConfigurationError,
    DeserializationError,
    GetFileError,
    GitHubPartsError,
    InvalidResponse,
    IsDirectory,
    IsSubmodule,
    IsSymlink,
    NotFoundError,
    RequestFailed,
    SigningError,
    UnsupportedEncoding,
)

__all__ = [
    "ApiError",
    "AppCredentials",
    "AppJwt",
    "AppJwtSigner",
    "AuthError",
    "Clock",
    "ConfigurationError",
    "CreateCheckRunInput",
    "DeserializationError",
    "GetFileError",
    "GetFileResult",
    "GitHubAppSettings",
    "GitHubClient",
    "GitHubPartsError",
    "InstallationToken",
    "InvalidResponse",
    "IsDirectory",
    "IsSubmodule",
    "IsSymlink",
    "NotFoundError",
    "RequestFailed",
    "RequestSpec",
    "SigningError",
    "SystemClock",
    "TokenCache",
    "UnsupportedEncoding",
    "UpdateCheckRunInput",
    "create_check_run",
    "get_file",
    "list_check_runs",
    "list_check_suites",
    "update_check_run",
]
