"""
Notification Renderer component.

Builds the message body for a pull request: a summary section with the
author's avatar, then reviewer avatars grouped by verdict.
"""

from typing import List, Optional

from review_notifier.models.message import (
    ContextBlock,
    ImageElement,
    MessageBody,
    SectionBlock,
    TextObject,
)
from review_notifier.models.pull_request import GitHubUser, PullRequest, Review, ReviewState


# Group header and verdict, in display order
REVIEW_GROUPS = (
    ("Approved", ReviewState.APPROVED),
    ("Changes Requested", ReviewState.CHANGES_REQUESTED),
)


def render_notification(pull_request: PullRequest, reviews: List[Review]) -> MessageBody:
    """
    Render a pull request and its reviews.

    Reviews are rendered in the order given, one avatar per review; a group
    with no matching reviews is left out.

    Args:
        pull_request: Pull request snapshot
        reviews: Reviews as returned by the review fetcher

    Returns:
        MessageBody ready to post or edit
    """
    blocks: List = [_summary_section(pull_request)]

    for label, state in REVIEW_GROUPS:
        group = _review_group(label, state, reviews)
        if group is not None:
            blocks.append(group)

    return MessageBody(text=_fallback_text(pull_request, reviews), blocks=blocks)


def _summary_section(pull_request: PullRequest) -> SectionBlock:
    text = f"*{pull_request.title}* [#{pull_request.number}]({pull_request.html_url})"
    if pull_request.body and pull_request.body.strip():
        text = f"{text}\n{pull_request.body.strip()}"

    return SectionBlock(
        text=TextObject(text=text),
        accessory=_avatar(pull_request.user.avatar_url, pull_request.user.login),
    )


def _review_group(label: str, state: ReviewState, reviews: List[Review]) -> Optional[ContextBlock]:
    avatars = [_avatar(user.avatar_url, user.login) for user in _reviewers(state, reviews)]
    if not avatars:
        return None

    return ContextBlock(elements=[TextObject(text=f"*{label}*"), *avatars])


def _reviewers(state: ReviewState, reviews: List[Review]) -> List[GitHubUser]:
    """Reviewers with the given verdict, skipping reviews by deleted accounts."""
    return [
        review.user
        for review in reviews
        if review.state == state.value and review.user is not None
    ]


def _avatar(url: str, login: str) -> ImageElement:
    return ImageElement(image_url=url, alt_text=login)


def _fallback_text(pull_request: PullRequest, reviews: List[Review]) -> str:
    lines = [f"{pull_request.title} #{pull_request.number} {pull_request.html_url}"]

    for label, state in REVIEW_GROUPS:
        logins = [user.login for user in _reviewers(state, reviews)]
        if logins:
            lines.append(f"{label}: {', '.join(logins)}")

    return "\n".join(lines)
