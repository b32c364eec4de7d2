"""Video loop practice: session persistence and playback loop control."""

__version__ = "0.1.0"
