import time

from cashcast.exceptions import ForecastTimeoutError


class Deadline:
    """Monotonic-clock deadline shared by the stages of one forecast request."""

    def __init__(self, timeout: float | None) -> None:
        self.timeout = timeout
        self._expires_at = None if timeout is None else time.monotonic() + timeout

    @classmethod
    def never(cls) -> "Deadline":
        return cls(None)

    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def check(self, stage: str = "forecast") -> None:
        """Raise ForecastTimeoutError once the deadline has passed."""
        if self.expired:
            raise ForecastTimeoutError(f"Deadline exceeded during {stage}", timeout=self.timeout)
