"""Presentation archive processing.

A presentation is a ZIP archive. Videos under ``ppt/media`` are extracted,
compressed one at a time and put back when the result is smaller. Markup
references are rewritten for videos whose extension changed and the archive
is rebuilt next to the input as ``<stem>-shrunk.pptx``.
"""

import shutil
import tempfile
import zipfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from loguru import logger

from ..config import CompressionSettings, CrunchConfig
from ..config import default_config as defaults
from ..core.decision import failed_outcome, settle_outcome
from ..core.errors import ArchiveError, CrunchError
from ..core.types import CompressionOutcome, OutcomeStatus
from ..encoding import FallbackOrchestrator
from ..formatting import TerminalFormatter
from .files import validate_input_file
from .references import CONTENT_TYPES_FILE, ensure_content_types, update_references
from .video import probe_or_none


@dataclass
class ArchiveResult:
    """Result of processing one presentation.

    Attributes:
        source: Input presentation
        output: Output presentation
        original_size: Input size in bytes
        final_size: Output size in bytes, 0 if nothing was written
        outcomes: Per-video outcomes
        success: Whether the output presentation was written
        error: Error message if processing failed
    """
    source: Path
    output: Path
    original_size: int
    final_size: int = 0
    outcomes: List[CompressionOutcome] = field(default_factory=list)
    success: bool = False
    error: Optional[str] = None

    @property
    def compressed_count(self) -> int:
        return sum(1 for o in self.outcomes if o.status is OutcomeStatus.COMPRESSED)


def archive_output_path(path: Path) -> Path:
    return path.with_name(f"{path.stem}{defaults.ARCHIVE_OUTPUT_SUFFIX}.pptx")


def safe_extract(archive: zipfile.ZipFile, dest: Path) -> List[str]:
    """Extract an archive, refusing members that resolve outside ``dest``.

    Args:
        archive: Open ZIP archive
        dest: Extraction directory

    Returns:
        Member names in archive order

    Raises:
        ArchiveError: If a member would be written outside ``dest``
    """
    root = dest.resolve()
    names = []
    for info in archive.infolist():
        target = (root / info.filename).resolve()
        if target != root and root not in target.parents:
            raise ArchiveError(
                f"Archive member escapes the working directory: {info.filename}"
            )
        names.append(info.filename)

    archive.extractall(root)
    return names


def find_videos(root: Path) -> List[Path]:
    """Videos in the media folder of an extracted presentation."""
    media_dir = root / defaults.ARCHIVE_MEDIA_DIR
    if not media_dir.is_dir():
        return []
    return sorted(
        path for path in media_dir.iterdir()
        if path.is_file() and path.suffix.lower() in defaults.ARCHIVE_VIDEO_EXTENSIONS
    )


def rezip(root: Path, member_order: List[str], output: Path,
          renames: Optional[Dict[str, str]] = None) -> None:
    """Rebuild an archive from an extracted tree.

    Members keep their original order, with renamed members in the slot of
    the member they replace and ``[Content_Types].xml`` first. Files not in
    the original archive are appended in sorted order. Media is stored,
    everything else deflated.

    Args:
        root: Extracted tree
        member_order: Member names of the original archive
        output: Archive to write
        renames: Map of old member name to new member name
    """
    renames = renames or {}
    present = {
        path.relative_to(root).as_posix()
        for path in root.rglob("*") if path.is_file()
    }

    order = [renames.get(name, name) for name in member_order]
    if CONTENT_TYPES_FILE in order:
        order.remove(CONTENT_TYPES_FILE)
        order.insert(0, CONTENT_TYPES_FILE)
    order.extend(sorted(present - set(order)))

    media_prefix = defaults.ARCHIVE_MEDIA_DIR + "/"
    partial = output.with_name(output.name + ".part")
    written = set()
    try:
        with zipfile.ZipFile(partial, "w") as archive:
            for name in order:
                if name in written or name not in present:
                    continue
                written.add(name)
                compression = zipfile.ZIP_STORED if name.startswith(media_prefix) else zipfile.ZIP_DEFLATED
                archive.write(root / name, name, compress_type=compression)
        partial.replace(output)
    finally:
        partial.unlink(missing_ok=True)
    logger.debug(f"Wrote {len(written)} members to {output}")


class ArchiveProcessor:
    """Compresses the videos embedded in presentations."""

    def __init__(self, orchestrator: FallbackOrchestrator,
                 config: Optional[CrunchConfig] = None,
                 formatter: Optional[TerminalFormatter] = None):
        """Initialize processor.

        Args:
            orchestrator: Encode fallback orchestrator
            config: Optional runtime configuration
            formatter: Optional terminal formatter
        """
        self.orchestrator = orchestrator
        self.config = config or CrunchConfig()
        self.fmt = formatter or TerminalFormatter()

    def process(self, path: Path, settings: CompressionSettings) -> ArchiveResult:
        """Compress the videos of one presentation.

        The input is never modified. Errors are reported in the result.

        Args:
            path: Input presentation
            settings: Compression settings

        Returns:
            Archive result
        """
        self.fmt.print_header(f"Presentation: {path.name}")
        output = archive_output_path(path)
        result = ArchiveResult(source=path, output=output, original_size=0)

        try:
            validate_input_file(path, defaults.PRESENTATION_EXTENSIONS)
            result.original_size = path.stat().st_size
            self._process(path, output, settings, result)
        except (CrunchError, OSError, ValueError) as e:
            message = e.message if isinstance(e, CrunchError) else str(e)
            logger.error(f"Error processing {path.name}: {message}")
            result.error = message
            self.fmt.print_error(f"{path.name}: {message}")

        return result

    def _process(self, path: Path, output: Path, settings: CompressionSettings,
                 result: ArchiveResult) -> None:
        work_dir = Path(tempfile.mkdtemp(
            prefix="pptcrunch-",
            dir=str(self.config.work_dir) if self.config.work_dir else None
        ))
        logger.debug(f"Working directory: {work_dir}")
        try:
            extracted = work_dir / "extracted"
            encoded = work_dir / "encoded"
            extracted.mkdir()
            encoded.mkdir()

            try:
                with zipfile.ZipFile(path) as archive:
                    members = safe_extract(archive, extracted)
            except zipfile.BadZipFile as e:
                raise ArchiveError(f"{path.name} is not a valid presentation archive", str(e)) from e

            videos = find_videos(extracted)
            if not videos:
                self.fmt.print_warning("No videos found, copying presentation unchanged")
                shutil.copyfile(path, output)
            else:
                self.fmt.print_check(f"Found {len(videos)} video(s) to compress")
                renames = self._compress_videos(videos, encoded, settings, result)
                if renames:
                    update_references(extracted, renames)
                    ensure_content_types(extracted, {Path(new).suffix for new in renames.values()})
                media = defaults.ARCHIVE_MEDIA_DIR
                rezip(extracted, members, output, {
                    f"{media}/{old}": f"{media}/{new}" for old, new in renames.items()
                })

            result.final_size = output.stat().st_size
            result.success = True
            self.fmt.print_path("Saved:", output)
            self.fmt.print_archive_summary(output.name, result.original_size,
                                           result.final_size, result.outcomes)
        finally:
            self._cleanup(work_dir)

    def _compress_videos(self, videos: List[Path], encoded_dir: Path,
                         settings: CompressionSettings,
                         result: ArchiveResult) -> Dict[str, str]:
        """Compress each video and swap smaller results into the media folder.

        Returns:
            Map of old media file name to new media file name
        """
        renames = {}
        for index, video in enumerate(videos, 1):
            self.fmt.print_separator()
            self.fmt.print_check(f"[{index}/{len(videos)}] Compressing {video.name}")
            outcome = self._compress_video(video, encoded_dir, settings)
            result.outcomes.append(outcome)
            self.fmt.print_outcome(outcome)

            if outcome.status is not OutcomeStatus.COMPRESSED:
                continue
            target = video.with_name(outcome.final_name)
            video.unlink()
            shutil.move(str(encoded_dir / outcome.final_name), str(target))
            if target.name != video.name:
                renames[video.name] = target.name
        return renames

    def _compress_video(self, video: Path, encoded_dir: Path,
                        settings: CompressionSettings) -> CompressionOutcome:
        try:
            output = encoded_dir / self._target_name(video)
            media = probe_or_none(video, self.config)
            encode = self.orchestrator.encode(video, output, settings, media)
            if not encode.success:
                return failed_outcome(video)
            return settle_outcome(video, output, encode.used_hardware, encode.attempt.codec)
        except (CrunchError, OSError) as e:
            logger.error(f"Error compressing {video.name}: {e}")
            return failed_outcome(video, f"error: {e}")

    @staticmethod
    def _target_name(video: Path) -> str:
        """Encoded file name, avoiding other media that already use it.

        Names differing only in case count as taken.
        """
        taken = {p.name.lower() for p in video.parent.iterdir() if p.name != video.name}
        name = f"{video.stem}{defaults.OUTPUT_EXTENSION}"
        counter = 1
        while name.lower() in taken:
            name = f"{video.stem}-{counter}{defaults.OUTPUT_EXTENSION}"
            counter += 1
        return name

    def _cleanup(self, work_dir: Path) -> None:
        try:
            shutil.rmtree(work_dir)
        except OSError as e:
            logger.warning(f"Could not remove working directory {work_dir}: {e}")
            self.fmt.print_warning(f"Could not remove {work_dir}, you may need to delete it manually")
