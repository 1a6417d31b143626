"""Unit tests for notification rendering."""

from review_notifier.models.message import ContextBlock, SectionBlock
from review_notifier.models.pull_request import Review
from review_notifier.services.renderer import render_notification

from conftest import make_review_payload


def review(review_id, state, login):
    return Review.model_validate(make_review_payload(review_id, state, login))


def avatars(block: ContextBlock):
    return [element.alt_text for element in block.elements[1:]]


def test_summary_only_without_reviews(pull_request_factory):
    body = render_notification(pull_request_factory(), [])

    assert len(body.blocks) == 1
    summary = body.blocks[0]
    assert isinstance(summary, SectionBlock)
    assert summary.text.text == (
        "*Add dashboard* [#42](https://github.com/acme/web/pull/42)\nAdds the dashboard"
    )
    assert summary.accessory.image_url == "https://avatars.githubusercontent.com/u/1"
    assert summary.accessory.alt_text == "octocat"


def test_summary_without_body(pull_request_factory):
    body = render_notification(pull_request_factory(body=None), [])

    assert body.blocks[0].text.text == "*Add dashboard* [#42](https://github.com/acme/web/pull/42)"


def test_groups_reviews_by_verdict(pull_request_factory):
    reviews = [
        review(1, "APPROVED", "r1"),
        review(2, "CHANGES_REQUESTED", "r2"),
        review(3, "APPROVED", "r3"),
    ]

    body = render_notification(pull_request_factory(), reviews)

    _, approved, changes = body.blocks
    assert approved.elements[0].text == "*Approved*"
    assert avatars(approved) == ["r1", "r3"]
    assert changes.elements[0].text == "*Changes Requested*"
    assert avatars(changes) == ["r2"]


def test_empty_group_is_omitted(pull_request_factory):
    body = render_notification(pull_request_factory(), [review(1, "CHANGES_REQUESTED", "r1")])

    assert len(body.blocks) == 2
    assert body.blocks[1].elements[0].text == "*Changes Requested*"


def test_other_verdicts_are_ignored(pull_request_factory):
    body = render_notification(pull_request_factory(), [
        review(1, "COMMENTED", "r1"),
        review(2, "DISMISSED", "r2"),
    ])

    assert len(body.blocks) == 1


def test_repeat_reviews_are_not_deduplicated(pull_request_factory):
    body = render_notification(pull_request_factory(), [
        review(1, "APPROVED", "r1"),
        review(2, "APPROVED", "r1"),
    ])

    assert avatars(body.blocks[1]) == ["r1", "r1"]


def test_wire_blocks_use_camel_case(pull_request_factory):
    body = render_notification(pull_request_factory(), [review(1, "APPROVED", "r1")])

    section, context = body.wire_blocks()
    assert section["type"] == "section"
    assert section["accessory"] == {
        "type": "image",
        "imageUrl": "https://avatars.githubusercontent.com/u/1",
        "altText": "octocat",
    }
    assert context["type"] == "context"
    assert context["elements"][0] == {"type": "mrkdwn", "text": "*Approved*"}
    assert context["elements"][1]["altText"] == "r1"


def test_fallback_text(pull_request_factory):
    body = render_notification(pull_request_factory(), [
        review(1, "APPROVED", "r1"),
        review(2, "APPROVED", "r3"),
    ])

    assert body.text == (
        "Add dashboard #42 https://github.com/acme/web/pull/42\n"
        "Approved: r1, r3"
    )


def test_reviews_by_deleted_accounts_are_skipped(pull_request_factory):
    ghost = Review.model_validate({"id": 2, "state": "APPROVED", "user": None})

    body = render_notification(pull_request_factory(), [review(1, "APPROVED", "r1"), ghost])

    assert avatars(body.blocks[1]) == ["r1"]
    assert body.text.endswith("Approved: r1")


def test_only_deleted_reviewers_leaves_group_out(pull_request_factory):
    ghost = Review.model_validate({"id": 1, "state": "CHANGES_REQUESTED", "user": None})

    body = render_notification(pull_request_factory(), [ghost])

    assert len(body.blocks) == 1
