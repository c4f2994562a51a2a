"""Media reference rewriting inside extracted presentation markup.

Slides and relationship parts point at media files by name, either bare or
with a ``media/``, ``../media/`` or ``ppt/media/`` prefix. When an encode
changes a media file's extension every such reference has to follow.
"""

import re
from pathlib import Path
from typing import Dict, Iterable, Iterator, Pattern

from loguru import logger

CONTENT_TYPES_FILE = "[Content_Types].xml"

MEDIA_CONTENT_TYPES = {
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "mpeg4": "video/mp4",
}

_MARKUP_SUFFIXES = (".xml", ".rels")


def _reference_pattern(name: str) -> Pattern[str]:
    # A prefix directory separator or quote may precede the name, but no
    # other name character, so media1.mov never matches inside xmedia1.mov.
    return re.compile(
        r"(?<![\w.\-])" + re.escape(name) + r"(?![\w\-]|\.\w)"
    )


def iter_markup_files(root: Path) -> Iterator[Path]:
    """Yield every XML and relationship part under an extracted archive."""
    for path in sorted(root.rglob("*")):
        if path.is_file() and path.suffix.lower() in _MARKUP_SUFFIXES:
            yield path


def rewrite_references(text: str, renames: Dict[str, str]) -> str:
    """Replace bounded occurrences of each old media name with its new name.

    Args:
        text: Markup content
        renames: Map of old file name to new file name

    Returns:
        Rewritten content
    """
    for old, new in renames.items():
        if old == new:
            continue
        text = _reference_pattern(old).sub(lambda _match: new, text)
    return text


def update_references(root: Path, renames: Dict[str, str]) -> int:
    """Rewrite media references in all markup files of an extracted archive.

    Files that cannot be read or written are logged and skipped.

    Args:
        root: Root of the extracted archive
        renames: Map of old media file name to new media file name

    Returns:
        Number of files changed
    """
    renames = {old: new for old, new in renames.items() if old != new}
    if not renames:
        return 0

    changed = 0
    for path in iter_markup_files(root):
        try:
            content = path.read_text(encoding="utf-8")
            updated = rewrite_references(content, renames)
            if updated == content:
                continue
            path.write_text(updated, encoding="utf-8")
        except (OSError, UnicodeError) as e:
            logger.warning(f"Could not update references in {path.name}: {e}")
            continue

        changed += 1
        logger.debug(f"Updated media references in {path.relative_to(root).as_posix()}")

    logger.info(f"Updated references in {changed} markup file(s)")
    return changed


def ensure_content_types(root: Path, extensions: Iterable[str]) -> bool:
    """Register default content types for media extensions.

    Args:
        root: Root of the extracted archive
        extensions: File extensions, with or without a leading dot

    Returns:
        True if the content types part was changed
    """
    path = root / CONTENT_TYPES_FILE
    if not path.is_file():
        logger.warning(f"{CONTENT_TYPES_FILE} not found, skipping content types")
        return False

    content = path.read_text(encoding="utf-8")
    additions = []
    for extension in sorted({ext.lower().lstrip(".") for ext in extensions if ext}):
        declared = re.search(
            r'<Default\s[^>]*Extension="' + re.escape(extension) + '"',
            content,
            re.IGNORECASE
        )
        if declared:
            continue
        content_type = MEDIA_CONTENT_TYPES.get(extension, "application/octet-stream")
        additions.append(f'<Default Extension="{extension}" ContentType="{content_type}"/>')

    if not additions:
        return False

    closing = content.rfind("</Types>")
    if closing < 0:
        logger.warning(f"Malformed {CONTENT_TYPES_FILE}, skipping content types")
        return False

    content = content[:closing] + "".join(additions) + content[closing:]
    path.write_text(content, encoding="utf-8")
    logger.debug(f"Registered content types: {', '.join(additions)}")
    return True
