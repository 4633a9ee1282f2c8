"""
Exceptions raised by github-parts

Every error is scoped to the operation that raised it. Nothing is retried
internally, callers decide whether to try again.
"""

from typing import Optional


class GitHubPartsError(Exception):
    """Base class for all library errors"""


class ConfigurationError(GitHubPartsError):
    """Missing or invalid GitHub App settings"""


class SigningError(GitHubPartsError):
    """The App JWT could not be signed, usually because of a malformed key"""


class AuthError(GitHubPartsError):
    """An installation token could not be obtained"""


class RequestFailed(AuthError):
    """GitHub rejected the token request, or it never reached GitHub"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class InvalidResponse(AuthError):
    """The token exchange answered with a body we cannot use"""


class ApiError(GitHubPartsError):
    """A resource-level API call failed"""

    def __init__(self, status: Optional[int], message: str):
        super().__init__(f"GitHub API error ({status}): {message}" if status else message)
        self.status = status
        self.message = message


class NotFoundError(ApiError):
    """The requested resource does not exist, or the installation cannot see it"""


class DeserializationError(GitHubPartsError):
    """The response body did not match the expected shape"""


class GetFileError(GitHubPartsError):
    """The path could not be returned as a file"""


class IsDirectory(GetFileError):
    def __init__(self, path: str):
        super().__init__(f"'{path}' is a directory, but must be a file")
        self.path = path


class IsSymlink(GetFileError):
    def __init__(self, path: str):
        super().__init__(f"'{path}' is a symlink, but must be a file")
        self.path = path


class IsSubmodule(GetFileError):
    def __init__(self, path: str):
        super().__init__(f"'{path}' is a submodule, but must be a file")
        self.path = path


class UnsupportedEncoding(GetFileError):
    def __init__(self, encoding: str):
        super().__init__(f"encoding {encoding} is not supported")
        self.encoding = encoding
