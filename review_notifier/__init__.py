"""Review Notifier: GitHub pull request reviews mirrored into chat rooms."""

__version__ = "0.1.0"
