from __future__ import annotations

from changesets_gitlab.core.context import ReleaseInputs
from changesets_gitlab.release.model import NoOp, Publish, ReleaseAction, Version


def classify(
    pending_count: int,
    publish_script: str | None,
    inputs: ReleaseInputs | None = None,
) -> ReleaseAction:
    """Select the release action for this run.

    Pending changesets always win: a run with pending changesets proposes a
    version bump and never publishes, even when a publish script is set.
    """
    has_publish_script = bool(publish_script)

    if pending_count > 0:
        inputs = inputs or ReleaseInputs()
        return Version(
            script=inputs.version,
            mr_title=inputs.title,
            mr_target_branch=inputs.target_branch,
            commit_message=inputs.commit,
            has_publish_script=has_publish_script,
        )
    if publish_script:
        return Publish(script=publish_script)
    return NoOp()
