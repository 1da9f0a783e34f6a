"""CLI helpers for ABVOTE.

URL sanitization for safe display, OSC-8 terminal hyperlinks when supported,
stderr message emitters with emoji→ASCII fallbacks, and result unwrapping.
"""

from .db_url import sanitize_url
from .hyperlinks import hyperlink
from .messages import error, info, success, warn
from .results import unwrap

__all__ = ["sanitize_url", "hyperlink", "warn", "success", "error", "info", "unwrap"]
