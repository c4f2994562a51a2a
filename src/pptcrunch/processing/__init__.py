"""Per-file processing for presentations and standalone videos."""

from .archive import ArchiveProcessor, ArchiveResult, archive_output_path
from .files import FileBatch, classify, expand_patterns, validate_input_file
from .references import ensure_content_types, update_references
from .video import VideoProcessor, video_output_path

__all__ = [
    'ArchiveProcessor',
    'ArchiveResult',
    'FileBatch',
    'VideoProcessor',
    'archive_output_path',
    'classify',
    'ensure_content_types',
    'expand_patterns',
    'update_references',
    'validate_input_file',
    'video_output_path',
]
