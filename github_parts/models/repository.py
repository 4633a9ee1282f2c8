from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict

from .account import Account


class Visibility(str, Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    INTERNAL = "internal"


class Repository(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    owner: Account
    description: Optional[str] = None
    visibility: Optional[Visibility] = None
    default_branch: Optional[str] = None

    def full_name(self) -> str:
        """owner/name, the usual way to reference a repository"""
        return f"{self.owner.login}/{self.name}"

    def __str__(self) -> str:
        return self.full_name()
