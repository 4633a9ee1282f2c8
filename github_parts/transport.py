"""
Shared HTTP bits for talking to the GitHub REST API
"""

from typing import Dict

import requests

API_VERSION = "2022-11-28"
MEDIA_TYPE = "application/vnd.github+json"


def github_headers(bearer: str, user_agent: str) -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {bearer}",
        "Accept": MEDIA_TYPE,
        "X-GitHub-Api-Version": API_VERSION,
        "User-Agent": user_agent,
    }


def error_message(response: requests.Response) -> str:
    """GitHub's ``message`` field, or the raw body when there is none"""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason or ""
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.text
