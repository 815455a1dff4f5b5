"""Tests for release/classifier.py."""

from __future__ import annotations

import pytest

from changesets_gitlab.core.context import ReleaseInputs
from changesets_gitlab.release.classifier import classify
from changesets_gitlab.release.model import NoOp, Publish, Version


def test_nothing_pending_no_script_is_noop() -> None:
    assert classify(0, None) == NoOp()


def test_empty_publish_script_is_noop() -> None:
    assert classify(0, "") == NoOp()


def test_nothing_pending_with_script_publishes() -> None:
    assert classify(0, "pnpm release") == Publish(script="pnpm release")


@pytest.mark.parametrize("pending", [1, 3])
def test_pending_changesets_win_over_publish(pending: int) -> None:
    action = classify(pending, "pnpm release")

    assert isinstance(action, Version)
    assert action.has_publish_script is True


def test_version_carries_inputs() -> None:
    inputs = ReleaseInputs(
        version="pnpm bump",
        title="Release it",
        target_branch="develop",
        commit="chore: release",
    )

    action = classify(2, None, inputs)

    assert action == Version(
        script="pnpm bump",
        mr_title="Release it",
        mr_target_branch="develop",
        commit_message="chore: release",
        has_publish_script=False,
    )


def test_version_defaults_are_left_unset() -> None:
    action = classify(1, None)

    assert isinstance(action, Version)
    assert action.script is None
    assert action.mr_title is None
    assert action.mr_target_branch is None
    assert action.commit_message is None
