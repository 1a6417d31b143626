"""Pull request and review data models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class ReviewState(str, Enum):
    """Review verdicts that are rendered."""

    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"


class GitHubUser(BaseModel):
    """Author or reviewer account."""

    login: str
    avatar_url: str


class RequestedTeam(BaseModel):
    """Team requested for review."""

    name: str
    slug: Optional[str] = None


class PullRequest(BaseModel):
    """Snapshot of a pull request as carried by one webhook delivery."""

    id: int
    number: int
    title: str
    body: Optional[str] = None
    html_url: str
    url: str  # API url, reviews live under {url}/reviews
    user: GitHubUser
    requested_teams: List[RequestedTeam] = []


class Review(BaseModel):
    """Review record returned by the pull request reviews endpoint."""

    id: int
    state: str  # 'APPROVED', 'CHANGES_REQUESTED', 'COMMENTED', ...
    user: Optional[GitHubUser] = None  # null once the reviewer account is deleted
