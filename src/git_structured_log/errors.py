"""Exceptions raised while formatting history.

Every error is fatal to a run; the CLI reports ``fatal: <message>``.
"""


class StructuredLogError(Exception):
    """Base class for all errors reported by git-structured-log."""


class ResolutionError(StructuredLogError):
    """Repository, revision range or reference could not be resolved."""


class GitError(StructuredLogError):
    """The git collaborator failed or produced output we cannot use."""


class EncodingError(StructuredLogError):
    """A requested text field is not valid UTF-8."""


class UnsupportedFormatError(StructuredLogError):
    """A format code is intentionally unimplemented or unknown.

    Attributes:
        code: The format code exactly as requested
        reason: Human-readable explanation, with a remediation hint where
            a supported alternative exists
    """

    def __init__(self, code: str, reason: str):
        self.code = code
        self.reason = reason
        super().__init__(f"Invalid format `{code}`: {reason}")
