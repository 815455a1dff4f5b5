from __future__ import annotations

from changesets_gitlab.output.outputs import OutputSink
from changesets_gitlab.release.model import PublishOutcome

PUBLISHED_OUTPUT = "published"
PUBLISHED_PACKAGES_OUTPUT = "publishedPackages"


def report(outputs: OutputSink, outcome: PublishOutcome | None) -> None:
    """Write the job outputs; ``None`` writes the defaults (false, [])."""
    outcome = outcome or PublishOutcome()
    outputs.set_output(PUBLISHED_OUTPUT, outcome.published)
    outputs.set_output(
        PUBLISHED_PACKAGES_OUTPUT,
        [pkg.as_output() for pkg in outcome.published_packages],
    )
