"""
Download a single file from a repository through the contents API
"""

import base64
import binascii
import logging
from typing import Optional
from urllib.parse import quote

from pydantic import BaseModel, ConfigDict, ValidationError

from ..client import GitHubClient, RequestSpec
from ..errors import DeserializationError, IsDirectory, IsSubmodule, IsSymlink, UnsupportedEncoding

logger = logging.getLogger(__name__)


class GetFileResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    sha: str
    size: int
    content: bytes

    def text(self, encoding: str = "utf-8") -> str:
        return self.content.decode(encoding)


class _ContentPayload(BaseModel):
    model_config = ConfigDict(extra="ignore")

    type: str
    name: str
    path: str
    sha: str
    size: int
    encoding: Optional[str] = None
    content: Optional[str] = None


def get_file(
    client: GitHubClient,
    installation_id: int,
    owner: str,
    repo: str,
    path: str,
    ref: Optional[str] = None,
) -> GetFileResult:
    """
    Get the decoded content of a file.

    Args:
        path: file path relative to the repository root
        ref: branch, tag or commit SHA, the default branch when omitted

    Raises:
        IsDirectory, IsSymlink, IsSubmodule: the path is not a regular file
        UnsupportedEncoding: GitHub did not return the content base64 encoded
        NotFoundError: the path does not exist at ``ref``
    """
    path = path.strip("/")
    request = RequestSpec(
        "GET",
        f"/repos/{owner}/{repo}/contents/{quote(path)}",
        params={"ref": ref} if ref else None,
    )
    data = client.execute(installation_id, request)

    # directories come back as a listing of their entries
    if isinstance(data, list):
        raise IsDirectory(path)

    try:
        payload = _ContentPayload.model_validate(data)
    except ValidationError as e:
        raise DeserializationError(f"Unexpected contents response for '{path}': {e}") from e

    if payload.type == "dir":
        raise IsDirectory(path)
    if payload.type == "symlink":
        raise IsSymlink(path)
    if payload.type == "submodule":
        raise IsSubmodule(path)
    if payload.encoding != "base64" or payload.content is None:
        # files over 1 MB are returned with encoding "none" and no content
        raise UnsupportedEncoding(payload.encoding or "none")

    try:
        content = base64.b64decode("".join(payload.content.split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DeserializationError(f"Content of '{path}' is not valid base64: {e}") from e

    logger.debug("Fetched %s/%s:%s (%d bytes)", owner, repo, path, len(content))
    return GetFileResult(name=payload.name, path=payload.path, sha=payload.sha, size=payload.size, content=content)
