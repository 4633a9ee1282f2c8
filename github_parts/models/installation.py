from typing import Optional

from pydantic import BaseModel, ConfigDict

from .account import Account


class Installation(BaseModel):
    """A GitHub App added to an account. Its id is what installation tokens are requested for."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    account: Optional[Account] = None
    app_id: Optional[int] = None

    def __str__(self) -> str:
        return str(self.id)


class App(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    owner: Account
    slug: Optional[str] = None
