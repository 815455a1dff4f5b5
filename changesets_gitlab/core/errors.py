"""Exit codes for the release command.

The CI job status is driven by these codes, so the numeric values must stay
stable:
- 0: Success (including runs that had nothing to do)
- 1: User error (bad input, invalid configuration)
- 2: Credential error (GitLab remote or registry authentication)
- 3: Publish error (publish script failed or its output was not understood)
- 4: Version error (version script, git push or merge request failed)
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Exit codes for the release command."""

    OK = 0
    USER_ERROR = 1
    CREDENTIAL_ERROR = 2
    PUBLISH_ERROR = 3
    VERSION_ERROR = 4
