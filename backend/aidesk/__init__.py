"""AI Desk local session and credential backend."""

__version__ = "0.1.0"
