"""Exception hierarchy shared by the locator, converter, extractor and uploader."""
from __future__ import annotations

from typing import Optional, Sequence


class ParasoftBitbucketError(Exception):
    """Base class for every failure the CLI reports as a fatal error line."""


class ConfigurationError(ParasoftBitbucketError):
    """A required parameter or environment variable is missing."""

    def __init__(self, message: str, missing: Sequence[str] = ()):
        super().__init__(message)
        self.missing = list(missing)


class ReportNotFoundError(ParasoftBitbucketError):
    """``pattern`` is the value given on the command line, ``resolved`` the glob actually searched."""

    def __init__(self, message: str, pattern: str, resolved: Optional[str] = None):
        super().__init__(message)
        self.pattern = pattern
        self.resolved = resolved if resolved is not None else pattern


class JavaNotFoundError(ParasoftBitbucketError):
    """Java could not be resolved from the tool root or ``JAVA_HOME``."""


class JavaRootNotFoundError(JavaNotFoundError):
    pass


class JavaExecutableNotFoundError(JavaNotFoundError):
    pass


class ConverterResourceNotFoundError(ParasoftBitbucketError):
    """The Saxon jar or the SARIF stylesheet is not installed."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class ReportProcessingError(ParasoftBitbucketError):
    """Per-report failure; the runner skips the report and keeps going."""


class ConversionFailedError(ReportProcessingError):
    def __init__(self, message: str, source: str, exit_code: Optional[int] = None):
        super().__init__(message)
        self.source = source
        self.exit_code = exit_code


class ConversionTimeoutError(ConversionFailedError):
    pass


class ParseError(ReportProcessingError):
    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class UploadError(ParasoftBitbucketError):
    """An outbound Bitbucket call failed or returned a non-2xx status."""


__all__ = [
    "ParasoftBitbucketError",
    "ConfigurationError",
    "ReportNotFoundError",
    "JavaNotFoundError",
    "JavaRootNotFoundError",
    "JavaExecutableNotFoundError",
    "ConverterResourceNotFoundError",
    "ReportProcessingError",
    "ConversionFailedError",
    "ConversionTimeoutError",
    "ParseError",
    "UploadError",
]
