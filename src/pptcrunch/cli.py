"""Command line interface for pptcrunch."""

import sys
from pathlib import Path
from typing import Optional, Tuple

import click
from loguru import logger

from . import __version__
from .config import CrunchConfig
from .config import default_config as defaults
from .core.errors import ToolNotFoundError
from .core.types import Codec, OutcomeStatus
from .encoding import FallbackOrchestrator
from .formatting import TerminalFormatter
from .infrastructure.ffmpeg import FFmpegRunner
from .infrastructure.hardware import HardwareManager
from .processing import ArchiveProcessor, VideoProcessor, classify, expand_patterns
from .prompts import collect_settings

_LOG_LEVELS = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]


def run(patterns: Tuple[str, ...], codec: Optional[Codec], quality: Optional[int],
        max_width: Optional[int], no_hardware: bool, assume_yes: bool,
        config: CrunchConfig) -> int:
    """Process all files matched by the patterns.

    Returns:
        Exit code: 0 if at least one file was processed successfully
    """
    fmt = TerminalFormatter()

    paths = expand_patterns(patterns)
    if not paths:
        fmt.print_error(f"No files found matching: {' '.join(patterns)}")
        return 1

    batch = classify(paths)
    if batch.total == 0:
        fmt.print_error("No supported files found (presentations: .pptx, videos: "
                        f"{' '.join(defaults.VIDEO_EXTENSIONS)})")
        return 1

    runner = FFmpegRunner(config)
    try:
        version = runner.check_available()
    except ToolNotFoundError as e:
        fmt.print_error(e.message)
        if e.details:
            logger.debug(e.details)
        return 1
    fmt.print_check(version)

    report = HardwareManager(config, runner).probe()
    fmt.print_capabilities(report)

    settings = collect_settings(
        report,
        codec=codec,
        quality=quality,
        max_width=max_width,
        no_hardware=no_hardware,
        assume_yes=assume_yes,
        formatter=fmt
    )

    orchestrator = FallbackOrchestrator(runner, report)
    archives = ArchiveProcessor(orchestrator, config, fmt)
    videos = VideoProcessor(orchestrator, config, fmt)

    succeeded = 0
    for path in batch.presentations:
        try:
            if archives.process(path, settings).success:
                succeeded += 1
        except Exception as e:
            logger.exception(f"Unexpected error processing {path}")
            fmt.print_error(f"{path.name}: {e}")

    for path in batch.videos:
        try:
            if videos.process(path, settings).status is not OutcomeStatus.FAILED:
                succeeded += 1
        except Exception as e:
            logger.exception(f"Unexpected error processing {path}")
            fmt.print_error(f"{path.name}: {e}")

    fmt.print_run_summary(succeeded, batch.total, [p.name for p in batch.unsupported])
    return 0 if succeeded > 0 else 1


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.argument('patterns', nargs=-1)
@click.option('--codec', type=click.Choice([c.value for c in Codec], case_sensitive=False),
              help='Output codec (skips the codec question)')
@click.option('--quality', type=click.IntRange(1, 3),
              help='Quality tier: 1 smallest, 2 balanced, 3 highest')
@click.option('--max-width', type=click.IntRange(min=0),
              help='Maximum output width in pixels, 0 for no limit')
@click.option('--no-hardware', is_flag=True, help='Never use hardware encoding')
@click.option('-y', '--yes', 'assume_yes', is_flag=True,
              help='Accept default answers without prompting')
@click.option('--log-level', default=defaults.LOG_LEVEL, show_default=True,
              type=click.Choice(_LOG_LEVELS, case_sensitive=False),
              help='Console log level')
@click.option('--log-file', type=click.Path(dir_okay=False, path_type=Path),
              help='Also write a debug log to this file')
@click.version_option(__version__, prog_name="pptcrunch")
def main(patterns: Tuple[str, ...], codec: Optional[str], quality: Optional[int],
         max_width: Optional[int], no_hardware: bool, assume_yes: bool,
         log_level: str, log_file: Optional[Path]) -> None:
    """Shrink videos, including videos embedded in PowerPoint presentations.

    PATTERN can be a file name or a glob such as "*.pptx" or "*.mov".
    Presentations are written as NAME-shrunk.pptx and videos as
    "NAME - Q<quality><codec>.mp4" next to the originals.
    """
    if not patterns:
        click.echo(click.get_current_context().get_help(), err=True)
        sys.exit(1)

    if len(patterns) == 1 and patterns[0].lower() == "capture":
        click.echo("Error: capture mode is not supported", err=True)
        sys.exit(1)

    try:
        config = CrunchConfig(log_level=log_level, log_file=log_file)
        config.setup_logging()
        code = run(
            patterns,
            Codec(codec.lower()) if codec else None,
            quality,
            max_width,
            no_hardware,
            assume_yes,
            config
        )
    except click.exceptions.Abort:
        raise
    except Exception as e:
        click.echo(f"Error: {str(e)}", err=True)
        sys.exit(1)
    sys.exit(code)


if __name__ == '__main__':
    main()
