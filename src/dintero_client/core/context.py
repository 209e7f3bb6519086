"""Per-request context shared between the executor loop and its log records."""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .logging.filters import new_correlation_id


@dataclass
class RequestContext:
    """Context of one logical request (all of its attempts).

    Attributes:
        method: HTTP method (GET, POST, etc.)
        url: Absolute request URL
        request_id: Correlation id of the request
        attempts: Attempts sent so far
        started_at: ``time.monotonic()`` when the request started

    Example:
        >>> ctx = RequestContext('GET', 'https://api.test.dintero.com/v1/accounts/T1')
        >>> ctx.attempts += 1
    """

    method: str
    url: str
    request_id: str = field(default_factory=new_correlation_id)
    attempts: int = 0
    started_at: float = field(default_factory=time.monotonic)

    def elapsed_ms(self, now: Optional[float] = None) -> float:
        """Milliseconds since the request started."""
        now = time.monotonic() if now is None else now
        return round((now - self.started_at) * 1000, 2)

    def log_fields(self, **extra: Any) -> Dict[str, Any]:
        """Structured fields for executor log records."""
        fields: Dict[str, Any] = {
            "request_id": self.request_id,
            "method": self.method,
            "url": self.url,
            "attempt": self.attempts,
        }
        fields.update(extra)
        return fields
