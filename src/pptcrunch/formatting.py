"""Terminal formatting module."""

import os
import sys
from typing import List, Sequence

from .config import CompressionSettings
from .core.quality import tier_label
from .core.types import CapabilityReport, CompressionOutcome, OutcomeStatus


class TerminalFormatter:
    """Terminal formatting class."""

    def __init__(self):
        """Initialize terminal formatter."""
        self.has_color = self._check_color_support()

        self.bold = "\033[1m" if self.has_color else ""
        self.reset = "\033[0m" if self.has_color else ""

        self.green = "\033[32m" if self.has_color else ""
        self.yellow = "\033[33m" if self.has_color else ""
        self.blue = "\033[34m" if self.has_color else ""
        self.cyan = "\033[36m" if self.has_color else ""
        self.red = "\033[31m" if self.has_color else ""

        self.bold_green = f"{self.bold}{self.green}"
        self.bold_yellow = f"{self.bold}{self.yellow}"
        self.bold_blue = f"{self.bold}{self.blue}"
        self.bold_cyan = f"{self.bold}{self.cyan}"
        self.bold_red = f"{self.bold}{self.red}"

    def _check_color_support(self) -> bool:
        """Check if terminal supports colors.

        Returns:
            True if terminal supports colors
        """
        if not sys.stdout.isatty():
            return False

        if os.environ.get("NO_COLOR"):
            return False

        term = os.environ.get("TERM", "").lower()
        if term in ["dumb", "unknown"]:
            return False

        return True

    def print_check(self, message: str) -> None:
        """Print a completed step with a green checkmark.

        Args:
            message: Step description
        """
        print(f"{self.bold_green}✓{self.reset} {self.bold}{message}{self.reset}", file=sys.stderr)

    def print_warning(self, message: str) -> None:
        """Print a warning in yellow.

        Args:
            message: Warning text
        """
        print(f"{self.bold_yellow}⚠{self.reset} {self.bold}{message}{self.reset}", file=sys.stderr)

    def print_error(self, message: str) -> None:
        """Print an error in red.

        Args:
            message: Error text
        """
        print(f"{self.bold_red}✗{self.reset} {self.bold}{message}{self.reset}", file=sys.stderr)

    def print_success(self, message: str) -> None:
        """Print a success line in green.

        Args:
            message: Result text
        """
        print(f"{self.green}✓{self.reset} {self.green}{message}{self.reset}", file=sys.stderr)

    def print_header(self, title: str) -> None:
        """Print a section header.

        Args:
            title: Header title
        """
        print()
        print(f"{self.bold_blue}{'=' * 60}{self.reset}")
        print(f"{self.bold_blue}{title:^60}{self.reset}")
        print(f"{self.bold_blue}{'=' * 60}{self.reset}")

    def print_separator(self) -> None:
        """Print a separator line."""
        print(f"{self.blue}{'-' * 40}{self.reset}")

    def print_path(self, label: str, path: object) -> None:
        """Print a labelled file path with highlighting.

        Args:
            label: Text shown before the path
            path: Path to show
        """
        print(f"{label} {self.bold_cyan}{path}{self.reset}")

    @staticmethod
    def format_size(size: float) -> str:
        """Format file size for display.

        Args:
            size: Size in bytes

        Returns:
            Formatted size string
        """
        suffixes = ['B', 'KB', 'MB', 'GB', 'TB']
        scale = 0
        negative = size < 0
        size = abs(size)

        while size >= 1024 and scale < len(suffixes) - 1:
            size /= 1024
            scale += 1

        return f"{'-' if negative else ''}{size:.2f} {suffixes[scale]}"

    def print_capabilities(self, report: CapabilityReport) -> None:
        """Print the hardware detection result.

        Args:
            report: Capability report from the hardware probe
        """
        if not report.hardware_available:
            if report.gpu_model:
                self.print_warning(f"{report.gpu_model} found but no usable hardware encoder")
            else:
                self.print_warning("No hardware encoder detected, using CPU encoding")
            return

        name = report.gpu_model or report.accel.label
        self.print_check(f"Hardware encoder: {name} ({report.accel.label})")
        if report.generation:
            print(f"  Generation: {report.generation}")
        if report.driver_version:
            suffix = "" if report.driver_advanced_features else " (basic features only)"
            print(f"  Driver: {report.driver_version}{suffix}")
        h265 = "H.265"
        if report.profile is not None and report.profile.h265_10bit:
            h265 = "H.265 (10-bit)"
        codecs = [label for label, ok in (("H.264", report.supports_h264),
                                          (h265, report.supports_h265)) if ok]
        print(f"  Codecs: {', '.join(codecs)}")

    def print_settings(self, settings: CompressionSettings) -> None:
        """Print the chosen compression settings.

        Args:
            settings: Settings collected from the user
        """
        self.print_separator()
        print(f"Encoding: {'GPU with CPU fallback' if settings.use_hardware else 'CPU'}")
        print(f"Codec:    {settings.codec.display_name}")
        print(f"Quality:  {tier_label(settings.quality_tier)}")
        print(f"Width:    {settings.describe_width()}")
        self.print_separator()

    def print_outcome(self, outcome: CompressionOutcome) -> None:
        """Print the result of one video.

        Args:
            outcome: Compression outcome
        """
        if outcome.status is OutcomeStatus.COMPRESSED:
            percent = outcome.saved_bytes / outcome.original_size * 100 if outcome.original_size else 0.0
            self.print_success(
                f"{outcome.source_name} -> {outcome.final_name}: "
                f"{self.format_size(outcome.original_size)} -> {self.format_size(outcome.final_size)} "
                f"({percent:.1f}% saved, {outcome.method})"
            )
        elif outcome.status is OutcomeStatus.KEPT_ORIGINAL:
            self.print_warning(
                f"{outcome.source_name}: compressed file was not smaller, keeping original "
                f"({self.format_size(outcome.original_size)})"
            )
        else:
            self.print_error(f"{outcome.source_name}: {outcome.reason}")

    def print_archive_summary(self, name: str, original_size: int, final_size: int,
                              outcomes: Sequence[CompressionOutcome]) -> None:
        """Print per-video results and the archive size comparison.

        Args:
            name: Output archive name
            original_size: Input archive size in bytes
            final_size: Output archive size in bytes
            outcomes: Per-video outcomes
        """
        self.print_header(f"Summary: {name}")
        for outcome in outcomes:
            print(f"  {outcome.source_name:<30} {self.format_size(outcome.original_size):>12} "
                  f"-> {self.format_size(outcome.final_size):>12}  {outcome.method}")
        self.print_separator()
        saved = original_size - final_size
        percent = saved / original_size * 100 if original_size else 0.0
        print(f"Original presentation:   {self.format_size(original_size)}")
        print(f"Compressed presentation: {self.format_size(final_size)}")
        print(f"Space saved:             {self.format_size(saved)} ({percent:.1f}%)")

    def print_run_summary(self, succeeded: int, total: int, unsupported: List[str]) -> None:
        """Print the totals for the whole run.

        Args:
            succeeded: Files processed successfully
            total: Supported files found
            unsupported: Names of skipped files
        """
        self.print_header("Done")
        print(f"Processing complete: {succeeded}/{total} files processed successfully")
        if unsupported:
            self.print_warning(f"Skipped {len(unsupported)} unsupported file(s):")
            for name in unsupported:
                print(f"  {name}")
