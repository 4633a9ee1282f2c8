"""
Check runs and check suites

When code is pushed, GitHub starts a check suite for the commit. Apps report
the result of their work (tests, linters...) as check runs inside that suite.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class CheckRunStatus(str, Enum):
    QUEUED = "queued"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    WAITING = "waiting"
    REQUESTED = "requested"
    PENDING = "pending"


class CheckRunConclusion(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    NEUTRAL = "neutral"
    SKIPPED = "skipped"
    CANCELLED = "cancelled"
    TIMED_OUT = "timed_out"
    ACTION_REQUIRED = "action_required"
    STALE = "stale"
    STARTUP_FAILURE = "startup_failure"


class CheckRunOutput(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    title: Optional[str] = None
    # title and summary support Markdown
    summary: Optional[str] = None
    text: Optional[str] = None


class CheckSuite(BaseModel):
    """Status and conclusion of a suite are derived from its check runs"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    head_sha: Optional[str] = None
    head_branch: Optional[str] = None
    status: Optional[CheckRunStatus] = None
    conclusion: Optional[CheckRunConclusion] = None
    latest_check_runs_count: Optional[int] = None


class CheckRun(BaseModel):
    """``conclusion`` is only set once ``status`` is completed"""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    name: str
    head_sha: str
    status: CheckRunStatus
    conclusion: Optional[CheckRunConclusion] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    output: Optional[CheckRunOutput] = None
    check_suite: Optional[CheckSuite] = None
    html_url: Optional[str] = None

    def __str__(self) -> str:
        return self.name
