"""Input file expansion, classification and validation."""

import glob
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Union

from loguru import logger

from ..config import default_config as defaults

_GLOB_CHARS = set("*?[")


@dataclass
class FileBatch:
    """Input files grouped by how they are processed."""
    presentations: List[Path] = field(default_factory=list)
    videos: List[Path] = field(default_factory=list)
    unsupported: List[Path] = field(default_factory=list)

    @property
    def total(self) -> int:
        """Number of files that will be processed."""
        return len(self.presentations) + len(self.videos)


def expand_patterns(patterns: Iterable[str]) -> List[Path]:
    """Expand file names and glob patterns into existing files.

    A pattern naming an existing file is taken literally, so names that
    contain glob characters still work. Globs do not recurse.

    Args:
        patterns: File names or glob patterns

    Returns:
        Sorted, de-duplicated list of files
    """
    found = set()
    for pattern in patterns:
        expanded = os.path.expanduser(pattern)
        if Path(expanded).is_file():
            matches = [expanded]
        elif _GLOB_CHARS & set(expanded):
            matches = glob.glob(expanded)
        else:
            matches = []

        files = [Path(match) for match in matches if Path(match).is_file()]
        if not files:
            logger.warning(f"No files match {pattern}")
        found.update(files)

    return sorted(found)


def classify(paths: Iterable[Path]) -> FileBatch:
    """Split files into presentations, videos and unsupported files."""
    batch = FileBatch()
    for path in paths:
        suffix = path.suffix.lower()
        if suffix in defaults.PRESENTATION_EXTENSIONS:
            batch.presentations.append(path)
        elif suffix in defaults.VIDEO_EXTENSIONS:
            batch.videos.append(path)
        else:
            batch.unsupported.append(path)
    logger.debug(
        f"Classified inputs: {len(batch.presentations)} presentations, "
        f"{len(batch.videos)} videos, {len(batch.unsupported)} unsupported"
    )
    return batch


def validate_input_file(path: Union[str, Path],
                        extensions: Optional[Sequence[str]] = None) -> Path:
    """Validate that a file exists, is readable and has a supported type.

    Args:
        path: Path to file to validate
        extensions: Optional allowed lowercase suffixes

    Returns:
        Path object for the file

    Raises:
        FileNotFoundError: If file does not exist
        ValueError: If path is not a file or has an unsupported extension
        PermissionError: If file is not readable
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"File does not exist: {path}")

    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")

    if extensions is not None and path.suffix.lower() not in extensions:
        raise ValueError(
            f"Unsupported format '{path.suffix}'. Supported formats: {', '.join(extensions)}"
        )

    if not os.access(path, os.R_OK):
        raise PermissionError(f"File is not readable: {path}")

    return path
