"""jAPI Comments - hosted comment service API."""

__version__ = "1.0.0"
