from typing import List

from pydantic import BaseModel, ConfigDict

from ..client import GitHubClient, RequestSpec
from ..models import CheckSuite


class _CheckSuiteList(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total_count: int
    check_suites: List[CheckSuite]


def list_check_suites(
    client: GitHubClient,
    installation_id: int,
    owner: str,
    repo: str,
    head_sha: str,
    per_page: int = 100,
    page: int = 1,
) -> List[CheckSuite]:
    """One page of the check suites for a commit (SHA, branch or tag name)"""
    result = client.execute(
        installation_id,
        RequestSpec(
            "GET",
            f"/repos/{owner}/{repo}/commits/{head_sha}/check-suites",
            params={"per_page": per_page, "page": page},
        ),
        _CheckSuiteList,
    )
    return result.check_suites
