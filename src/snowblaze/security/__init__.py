"""Security helpers for snowblaze."""

from .dsns import DSNConfig, parse_dsn
from .redaction import redact_params, redact_settings

__all__ = ["DSNConfig", "parse_dsn", "redact_params", "redact_settings"]
