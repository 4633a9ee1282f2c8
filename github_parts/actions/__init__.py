"""
Actions that read and modify resources on GitHub as an installation
"""

from .check_runs import (
    CreateCheckRunInput,
    UpdateCheckRunInput,
    create_check_run,
    list_check_runs,
    update_check_run,
)
from .check_suites import list_check_suites
from .get_file import GetFileResult, get_file

__all__ = [
    "CreateCheckRunInput",
    "GetFileResult",
    "UpdateCheckRunInput",
    "create_check_run",
    "get_file",
    "list_check_runs",
    "list_check_suites",
    "update_check_run",
]
