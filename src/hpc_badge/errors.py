"""Exception hierarchy for hpc-badge.

Provides structured error handling with specific exception types
for the different ways a coverage run can fail. Each exception carries
the exit code the command line should terminate with.
"""

from pathlib import Path
from typing import Optional, Sequence


class CoverageError(Exception):
    """Base exception for all hpc-badge errors.

    All custom exceptions inherit from this base class for easy catching.
    """

    exit_code = 1


class ToolError(CoverageError):
    """An external tool (stack, hpc) could not be run or exited non-zero.

    The tool's own return code becomes the exit code of the command.
    """

    def __init__(
        self, message: str, command: Sequence[str] = (), returncode: int = 1
    ):
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode
        if returncode < 0:
            # Killed by a signal: report it the way a shell does.
            self.exit_code = 128 - returncode
        else:
            self.exit_code = returncode or 1


class MissingArtifactError(CoverageError):
    """A file a stage depends on does not exist."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class MissingTemplateError(MissingArtifactError):
    """No overlay template at the configured location."""

    def __init__(self, path: Path, draft_path: Optional[Path] = None):
        lines = [
            "No overlay template found.",
            f"Make sure to create an overlay template at: {path}",
        ]
        if draft_path is not None:
            lines.append(
                "See also 'hpc-badge draft' as an example of overlay with "
                f"100% coverage ({draft_path})."
            )
        super().__init__("\n".join(lines), path)
        self.draft_path = draft_path


class ValidationError(CoverageError):
    """Validation errors (malformed input, unexpected report layout)."""

    pass


class ReportFormatError(ValidationError):
    """The HTML report does not hold three well-formed total percentages."""

    pass


class PackageResolutionError(CoverageError):
    """The content-addressed package identifier could not be determined."""

    pass


class ConfigurationError(CoverageError):
    """Configuration errors (invalid settings, unusable paths)."""

    pass
