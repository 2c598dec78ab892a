import logging
import secrets
import threading
import time
from typing import Callable, Dict, Optional

from . import config

log = logging.getLogger(__name__)
audit = logging.getLogger("csrf.audit")


class CSRFError(Exception):
    status_code = 400
    detail = "CSRF check failed"

    def __init__(self, token: Optional[str] = None):
        super().__init__(self.detail)
        self.token = token


class InvalidToken(CSRFError):
    """Token was never issued, is malformed, or has already been swept."""
    status_code = 403
    detail = "Invalid CSRF token"


class SessionExpired(CSRFError):
    """Token exists but has been idle for the whole window."""
    status_code = 401
    detail = "Session expired"


def generate_token() -> str:
    return str(secrets.randbits(64))


def _short(token: Optional[str]) -> str:
    if not token:
        return "<empty>"
    return token[:4] + "..."


class TokenStore:
    """In-memory CSRF token store with sliding expiry.

    Maps each issued token to its last-activity time. A single lock guards
    the whole mapping; it is held only for the dictionary work itself, never
    while generating tokens or logging.
    """

    def __init__(self, ttl: float = None, clock: Callable[[], float] = time.monotonic):
        ttl = config.CSRF_TTL if ttl is None else ttl
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl!r}")
        self.ttl = float(ttl)
        self._clock = clock
        self._tokens: Dict[str, float] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)

    def issue(self) -> str:
        while True:
            token = generate_token()
            with self._lock:
                if token not in self._tokens:
                    self._tokens[token] = self._clock()
                    break
            log.warning("token collision, regenerating")
        log.debug("issued csrf token %s", _short(token))
        return token

    def validate(self, token: Optional[str]) -> None:
        """Check ``token`` and extend its life by a full window.

        Raises InvalidToken when the token is unknown (including None or
        empty) and SessionExpired when it is known but idle for ``ttl``
        seconds or more. Expired records stay in place for the sweep.
        """
        err = None
        with self._lock:
            last = self._tokens.get(token) if token else None
            if last is None:
                err = InvalidToken(token)
            else:
                now = self._clock()
                if now - last >= self.ttl:
                    err = SessionExpired(token)
                else:
                    self._tokens[token] = now
        if err is not None:
            audit.info("reject token=%s reason=%s", _short(token), err.detail)
            raise err

    def sweep(self) -> int:
        """Drop every token idle for ``ttl`` seconds or more; return the count."""
        with self._lock:
            now = self._clock()
            stale = [t for t, last in self._tokens.items() if now - last >= self.ttl]
            for t in stale:
                del self._tokens[t]
        return len(stale)
