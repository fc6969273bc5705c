from __future__ import annotations


class ConfigurationError(ValueError):
    """Deployment or integration mistake: bad secret, key options or key source."""


class InvalidParamsError(ValueError):
    """The caller broke the confirmation contract (no token key in the params)."""
