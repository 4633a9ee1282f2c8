"""
Typed GitHub resources

Only the fields the actions of this package need are modelled. Unknown fields
in API responses are ignored.
"""

from .account import Account, AccountType
from .check_run import CheckRun, CheckRunConclusion, CheckRunOutput, CheckRunStatus, CheckSuite
from .installation import App, Installation
from .repository import Repository, Visibility

__all__ = [
    "Account",
    "AccountType",
    "App",
    "CheckRun",
    "CheckRunConclusion",
    "CheckRunOutput",
    "CheckRunStatus",
    "CheckSuite",
    "Installation",
    "Repository",
    "Visibility",
]
