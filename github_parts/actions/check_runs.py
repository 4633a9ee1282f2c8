"""
Create, update and list check runs
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from ..client import GitHubClient, RequestSpec
from ..models import CheckRun, CheckRunConclusion, CheckRunOutput, CheckRunStatus


class CreateCheckRunInput(BaseModel):
    """Body of POST /repos/{owner}/{repo}/check-runs, unset fields are left out"""

    model_config = ConfigDict(frozen=True)

    name: str
    head_sha: str
    status: Optional[CheckRunStatus] = None
    conclusion: Optional[CheckRunConclusion] = None
    details_url: Optional[str] = None
    external_id: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    output: Optional[CheckRunOutput] = None


class UpdateCheckRunInput(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: Optional[str] = None
    status: Optional[CheckRunStatus] = None
    conclusion: Optional[CheckRunConclusion] = None
    details_url: Optional[str] = None
    external_id: Optional[str] = None
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    output: Optional[CheckRunOutput] = None


class _CheckRunList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total_count: int
    check_runs: List[CheckRun]


def create_check_run(
    client: GitHubClient, installation_id: int, owner: str, repo: str, check_run: CreateCheckRunInput
) -> CheckRun:
    return client.execute(
        installation_id,
        RequestSpec("POST", f"/repos/{owner}/{repo}/check-runs", body=check_run),
        CheckRun,
    )


def update_check_run(
    client: GitHubClient,
    installation_id: int,
    owner: str,
    repo: str,
    check_run_id: int,
    update: UpdateCheckRunInput,
) -> CheckRun:
    return client.execute(
        installation_id,
        RequestSpec("PATCH", f"/repos/{owner}/{repo}/check-runs/{check_run_id}", body=update),
        CheckRun,
    )


def list_check_runs(
    client: GitHubClient,
    installation_id: int,
    owner: str,
    repo: str,
    check_suite_id: int,
    per_page: int = 100,
    page: int = 1,
) -> List[CheckRun]:
    """One page of the check runs in a check suite"""
    result = client.execute(
        installation_id,
        RequestSpec(
            "GET",
            f"/repos/{owner}/{repo}/check-suites/{check_suite_id}/check-runs",
            params={"per_page": per_page, "page": page},
        ),
        _CheckRunList,
    )
    return result.check_runs
