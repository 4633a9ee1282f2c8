"""
Accounts own repositories and installations. They are either users,
organizations or bots.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AccountType(str, Enum):
    USER = "User"
    ORGANIZATION = "Organization"
    BOT = "Bot"


class Account(BaseModel):
    """A GitHub account

    ``id`` never changes, ``login`` is human readable and can be renamed.
    """

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    login: str
    id: int
    account_type: AccountType = Field(alias="type")

    def __str__(self) -> str:
        return self.login
