"""
GitHub App identity

The private key is kept in a pydantic SecretStr so that it never shows up in
reprs, log records or tracebacks. Call ``private_key.get_secret_value()`` only
at the point where the key is handed to the signer.
"""

from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict, PositiveInt, SecretStr, field_validator

from .errors import ConfigurationError


class AppCredentials(BaseModel):
    """App ID plus the PEM encoded RSA private key of a GitHub App"""

    model_config = ConfigDict(frozen=True)

    app_id: PositiveInt
    private_key: SecretStr

    @field_validator("private_key", mode="before")
    @classmethod
    def _unescape_newlines(cls, value):
        # keys pasted into env files often carry literal "\n" sequences
        if isinstance(value, str):
            return value.replace("\\n", "\n")
        return value

    @classmethod
    def from_pem_file(cls, app_id: int, path: Union[str, Path]) -> "AppCredentials":
        """Load the private key from a .pem file"""
        key_path = Path(path).expanduser()
        if not key_path.is_file():
            raise ConfigurationError(f"GitHub App private key not found at: {key_path}")
        return cls(app_id=app_id, private_key=key_path.read_text(encoding="utf-8"))

    def __str__(self) -> str:
        return f"GitHub App {self.app_id}"
