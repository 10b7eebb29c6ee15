from __future__ import annotations


class ConfigurationError(ValueError):
    """Raised when a topology or simulation parameter is malformed."""
