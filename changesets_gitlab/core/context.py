"""Typed run configuration.

The environment of a CI job is read exactly once, at process start, into a
frozen ``ReleaseContext``. Every component receives the context explicitly;
nothing below the CLI reads ``os.environ``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "ContextError",
    "ReleaseContext",
    "ReleaseInputs",
    "DEFAULT_GITLAB_HOST",
    "DEFAULT_GITLAB_USER_EMAIL",
    "DEFAULT_REGISTRY_HOST",
    "get_input",
    "load_context",
    "parse_bool",
]

DEFAULT_GITLAB_HOST = "https://gitlab.com"
DEFAULT_GITLAB_USER_EMAIL = "gitlab[bot]@users.noreply.gitlab.com"
DEFAULT_REGISTRY_HOST = "npmjs.org"

_TRUE_VALUES = frozenset({"true", "1", "yes", "on"})
_FALSE_VALUES = frozenset({"false", "0", "no", "off"})

# Only these two spellings enable credential-step logging.
_DEBUG_CREDENTIAL_VALUES = frozenset({"true", "1"})


@dataclass(frozen=True, slots=True)
class ContextError:
    """Error when the run configuration is unusable."""

    message: str
    hint: str | None = None


def parse_bool(value: str | None, *, default: bool) -> bool:
    """Parse a boolean environment value.

    Unknown spellings fall back to ``default``.
    """
    if value is None:
        return default
    v = value.strip().lower()
    if v in _TRUE_VALUES:
        return True
    if v in _FALSE_VALUES:
        return False
    return default


def get_input(env: Mapping[str, str], name: str) -> str | None:
    """Read a job input from ``INPUT_<NAME>``.

    Spaces in the name become underscores. Empty values are treated as unset.
    """
    key = "INPUT_" + name.replace(" ", "_").upper()
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _get_env(env: Mapping[str, str], key: str) -> str | None:
    value = env.get(key)
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True, slots=True)
class ReleaseInputs:
    """User-supplied scripts and merge request parameters."""

    publish: str | None = None
    version: str | None = None
    title: str | None = None
    target_branch: str | None = None
    commit: str | None = None
    create_gitlab_releases: bool = True
    # Post hooks, run after a confirmed publish / a successful version run.
    published: str | None = None
    only_changesets: str | None = None


@dataclass(frozen=True, slots=True)
class ReleaseContext:
    """Resolved configuration for one release run."""

    cwd: Path
    ci: bool = False
    project_path: str | None = None
    gitlab_host: str = DEFAULT_GITLAB_HOST
    gitlab_user_name: str | None = None
    gitlab_user_email: str = DEFAULT_GITLAB_USER_EMAIL
    gitlab_token: str | None = None
    gitlab_token_type: str = "personal"
    home: Path | None = None
    npm_token: str | None = None
    registry_host: str = DEFAULT_REGISTRY_HOST
    debug_credentials: bool = False
    ref_name: str | None = None
    output_file: Path | None = None
    inputs: ReleaseInputs = field(default_factory=ReleaseInputs)

    @property
    def npmrc_path(self) -> Path | None:
        if self.home is None:
            return None
        return self.home / ".npmrc"

    def script_env(self) -> dict[str, str]:
        """Extra environment passed to the publish and version scripts."""
        if self.gitlab_token is None:
            return {}
        return {"GITLAB_TOKEN": self.gitlab_token}


def load_context(
    env: Mapping[str, str],
    *,
    cwd: Path,
    overrides: Mapping[str, str | None] | None = None,
) -> Result[ReleaseContext, ContextError]:
    """Build the run context from environment variables.

    Args:
        env: Environment mapping (usually ``os.environ``)
        cwd: Repository root the run operates on
        overrides: Input values given on the command line; ``None`` entries
            are ignored and keep the ``INPUT_*`` value.

    Returns:
        Ok(ReleaseContext) on success, Err(ContextError) on invalid values
    """
    given = {k: v for k, v in (overrides or {}).items() if v is not None}

    def input_value(name: str) -> str | None:
        if name in given:
            return given[name].strip() or None
        return get_input(env, name)

    raw_releases = input_value("create_gitlab_releases")
    if raw_releases is not None and raw_releases.strip().lower() not in (
        _TRUE_VALUES | _FALSE_VALUES
    ):
        return Err(
            ContextError(
                f"invalid create_gitlab_releases value: {raw_releases}",
                hint="Use true or false.",
            )
        )

    token_type = (_get_env(env, "GITLAB_TOKEN_TYPE") or "personal").lower()
    if token_type not in {"job", "personal", "oauth"}:
        return Err(
            ContextError(
                f"invalid GITLAB_TOKEN_TYPE: {token_type}",
                hint="Use job, personal or oauth.",
            )
        )

    ci_raw = _get_env(env, "CI")
    home_raw = _get_env(env, "HOME")
    output_raw = _get_env(env, "CHANGESETS_OUTPUT_FILE")
    debug_raw = _get_env(env, "DEBUG_GITLAB_CREDENTIAL") or "false"

    inputs = ReleaseInputs(
        publish=input_value("publish"),
        version=input_value("version"),
        title=input_value("title"),
        target_branch=input_value("target_branch"),
        commit=input_value("commit"),
        create_gitlab_releases=parse_bool(raw_releases, default=True),
        published=input_value("published"),
        only_changesets=input_value("only_changesets"),
    )

    return Ok(
        ReleaseContext(
            cwd=cwd,
            ci=ci_raw is not None and ci_raw.lower() not in _FALSE_VALUES,
            project_path=_get_env(env, "CI_PROJECT_PATH"),
            gitlab_host=_get_env(env, "GITLAB_HOST") or DEFAULT_GITLAB_HOST,
            gitlab_user_name=_get_env(env, "GITLAB_CI_USER_NAME"),
            gitlab_user_email=_get_env(env, "GITLAB_CI_USER_EMAIL") or DEFAULT_GITLAB_USER_EMAIL,
            gitlab_token=_get_env(env, "GITLAB_TOKEN"),
            gitlab_token_type=token_type,
            home=Path(home_raw) if home_raw else None,
            npm_token=_get_env(env, "NPM_TOKEN"),
            registry_host=_get_env(env, "NPM_REGISTRY_HOST") or DEFAULT_REGISTRY_HOST,
            debug_credentials=debug_raw in _DEBUG_CREDENTIAL_VALUES,
            ref_name=_get_env(env, "CI_COMMIT_REF_NAME"),
            output_file=Path(output_raw) if output_raw else None,
            inputs=inputs,
        )
    )
