"""Cross-cutting helpers: telemetry, time and ids.

Used by domain, application, and infrastructure. No business logic.
"""

from app.shared.utils import (
    elapsed_seconds,
    ensure_utc,
    generate_cuid,
    utc_now,
)

__all__ = [
    "generate_cuid",
    "utc_now",
    "ensure_utc",
    "elapsed_seconds",
]
