"""Shared fixtures for unit tests."""

from typing import Any, Dict, List, Optional

import pytest

from review_notifier.models.pull_request import PullRequest


def make_pull_request_payload(
    pr_id: int = 1001,
    number: int = 42,
    teams: Optional[List[str]] = None,
    body: Optional[str] = "Adds the dashboard",
) -> Dict[str, Any]:
    """Build the pull_request object of a GitHub delivery."""
    return {
        "id": pr_id,
        "number": number,
        "title": "Add dashboard",
        "body": body,
        "html_url": f"https://github.com/acme/web/pull/{number}",
        "url": f"https://api.github.com/repos/acme/web/pulls/{number}",
        "state": "open",
        "user": {
            "login": "octocat",
            "avatar_url": "https://avatars.githubusercontent.com/u/1",
        },
        "requested_teams": [{"name": team, "slug": team} for team in (teams or [])],
    }


def make_review_payload(review_id: int, state: str, login: str) -> Dict[str, Any]:
    """Build one record of the reviews endpoint."""
    return {
        "id": review_id,
        "state": state,
        "body": "",
        "user": {
            "login": login,
            "avatar_url": f"https://avatars.githubusercontent.com/{login}",
        },
    }


@pytest.fixture
def pull_request_payload():
    """Factory for pull_request payload dicts."""
    return make_pull_request_payload


@pytest.fixture
def pull_request_factory():
    """Factory for PullRequest models."""
    def _factory(**kwargs) -> PullRequest:
        return PullRequest.model_validate(make_pull_request_payload(**kwargs))
    return _factory
