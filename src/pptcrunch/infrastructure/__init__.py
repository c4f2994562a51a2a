"""External tool boundaries: hardware detection and FFmpeg."""
