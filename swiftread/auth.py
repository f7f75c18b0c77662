from __future__ import annotations

import hmac
from typing import Optional


class AdminGate:
    """Password check for the statistics view.

    An empty password means the admin view is switched off.
    """

    def __init__(self, password: Optional[str]) -> None:
        self._password = password or ""

    @property
    def enabled(self) -> bool:
        return bool(self._password)

    def check(self, candidate: Optional[str]) -> bool:
        if not self.enabled or not isinstance(candidate, str) or not candidate:
            return False
        return hmac.compare_digest(candidate.encode("utf-8"), self._password.encode("utf-8"))
