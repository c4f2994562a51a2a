"""Error types."""

from typing import Optional


class CrunchError(Exception):
    """Base class for pptcrunch errors."""

    def __init__(self, message: str, details: Optional[str] = None):
        """Initialize error.

        Args:
            message: Error message
            details: Optional technical details
        """
        self.message = message
        self.details = details
        super().__init__(message)


class ToolNotFoundError(CrunchError):
    """A required external tool is missing or unusable."""

    def __init__(self, tool: str, details: Optional[str] = None):
        super().__init__(f"{tool} not found or not working", details)
        self.tool = tool


class MediaProbeError(CrunchError):
    """Error reading stream properties of a media file."""
    pass


class EncodeError(CrunchError):
    """Error running an encode."""

    def __init__(self, message: str, cmd: Optional[str] = None,
                 stderr: Optional[str] = None):
        """Initialize error.

        Args:
            message: Error message
            cmd: FFmpeg command that failed
            stderr: FFmpeg error output
        """
        details = f"Command: {cmd}\nError: {stderr}" if cmd else stderr
        super().__init__(message, details)
        self.cmd = cmd
        self.stderr = stderr


class ArchiveError(CrunchError):
    """Error reading or writing a presentation archive."""
    pass
