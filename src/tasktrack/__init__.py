"""TaskTrack - multi-user task tracking with audit trail and live updates."""

__version__ = "0.1.0"
