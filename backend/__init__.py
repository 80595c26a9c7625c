"""VidScrub: session-based video cleanup backend."""

__version__ = "0.1.0"
