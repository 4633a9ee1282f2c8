"""
Installation access tokens

An installation token lets the App act on the repositories of one installation.
GitHub issues them for one hour.
"""

from datetime import datetime, timedelta
from typing import Dict, Optional

from pydantic import AwareDatetime, BaseModel, ConfigDict, SecretStr


class InstallationToken(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    installation_id: int
    token: SecretStr
    expires_at: AwareDatetime
    permissions: Dict[str, str] = {}
    repository_selection: Optional[str] = None

    def get(self) -> str:
        """The bearer string, for the Authorization header only"""
        return self.token.get_secret_value()

    def is_valid(self, now: datetime, margin: timedelta = timedelta(0)) -> bool:
        """True while the token outlives ``now`` by more than ``margin``"""
        return self.expires_at - now > margin
