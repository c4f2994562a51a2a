"""Video compression for PowerPoint presentations and standalone videos."""

__version__ = "0.1.0"
