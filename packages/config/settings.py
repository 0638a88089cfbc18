"""Run configuration assembled once at startup and passed to every stage."""
from __future__ import annotations

from typing import Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from packages.errors import ConfigurationError
from packages.messages.catalog import format_message
from packages.schema.models import QualityGateConfig

DEFAULT_API_URL = "https://api.bitbucket.org/2.0/repositories"
DEFAULT_CONVERSION_TIMEOUT = 1800.0
DEFAULT_REQUEST_TIMEOUT = 60.0

REQUIRED_ENV_VARS: Tuple[str, ...] = (
    "USER_EMAIL",
    "API_TOKEN",
    "BITBUCKET_REPO_SLUG",
    "BITBUCKET_COMMIT",
    "BITBUCKET_WORKSPACE",
    "BITBUCKET_CLONE_DIR",
    "BITBUCKET_BUILD_NUMBER",
)


class BitbucketSettings(BaseModel):
    """Identifiers and credentials provided by Bitbucket Pipelines."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    user_email: str
    api_token: str
    repo_slug: str
    commit: str
    workspace: str
    clone_dir: str
    build_number: str
    api_url: str = DEFAULT_API_URL
    pr_id: Optional[str] = None
    java_home: Optional[str] = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str]) -> "BitbucketSettings":
        """Build settings from ``environ``, naming every missing variable at once."""

        missing = [name for name in REQUIRED_ENV_VARS if not environ.get(name)]
        if missing:
            raise ConfigurationError(
                format_message("missing_required_environment_variables", ", ".join(missing)),
                missing=missing,
            )

        return cls(
            user_email=environ["USER_EMAIL"],
            api_token=environ["API_TOKEN"],
            repo_slug=environ["BITBUCKET_REPO_SLUG"],
            commit=environ["BITBUCKET_COMMIT"],
            workspace=environ["BITBUCKET_WORKSPACE"],
            clone_dir=environ["BITBUCKET_CLONE_DIR"],
            build_number=environ["BITBUCKET_BUILD_NUMBER"],
            api_url=(environ.get("BITBUCKET_API_URL") or DEFAULT_API_URL).rstrip("/"),
            pr_id=environ.get("BITBUCKET_PR_ID") or None,
            java_home=environ.get("JAVA_HOME") or None,
        )

    @property
    def auth(self) -> Tuple[str, str]:
        return (self.user_email, self.api_token)

    @property
    def commit_url(self) -> str:
        return f"{self.api_url}/{self.workspace}/{self.repo_slug}/commit/{self.commit}"

    def report_url(self, report_id: str) -> str:
        return f"{self.commit_url}/reports/{report_id}"

    def annotations_url(self, report_id: str) -> str:
        return f"{self.report_url(report_id)}/annotations"

    def build_status_url(self) -> str:
        return f"{self.commit_url}/statuses/build"

    def pipeline_url(self) -> str:
        return (
            f"https://bitbucket.org/{self.workspace}/{self.repo_slug}"
            f"/addon/pipelines/home#!/results/{self.build_number}"
        )


class RunOptions(BaseModel):
    """Options supplied on the command line."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    report: str
    tool_or_java_root_path: Optional[str] = None
    quality_gates: QualityGateConfig = Field(default_factory=dict)
    conversion_timeout: float = Field(default=DEFAULT_CONVERSION_TIMEOUT, gt=0)
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, gt=0)


__all__ = [
    "BitbucketSettings",
    "RunOptions",
    "REQUIRED_ENV_VARS",
    "DEFAULT_API_URL",
]
