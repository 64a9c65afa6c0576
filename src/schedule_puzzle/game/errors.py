from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a round configuration cannot be used to start a round."""
