"""Small HTTP-related constants shared across chatbridge.

This module is intentionally tiny to avoid circular imports and drift.
"""

from __future__ import annotations

# Status codes reported as retryable on APIError. Used for metadata only.
RETRYABLE_STATUS_CODES: frozenset[int] = frozenset({408, 409, 429, 500, 502, 503, 504})

# Request timeout for image downloads when the caller sets no deadline.
DEFAULT_IMAGE_FETCH_TIMEOUT_S: float = 30.0
