"""Room code generation with collision checks against live rooms."""

from __future__ import annotations

from collections.abc import Callable
import secrets

from rendezvous.core.logging_config import get_logger
from rendezvous.rooms.registry import CodeAllocationError

DEFAULT_CODE_LENGTH = 5
DEFAULT_MAX_ATTEMPTS = 10000
_RANDOM_BYTES = 20

logger = get_logger(__name__)


class CodeGenerator:
    """Produce short uppercase hex room codes."""

    def __init__(
        self,
        code_length: int = DEFAULT_CODE_LENGTH,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> None:
        if not 1 <= code_length <= _RANDOM_BYTES * 2:
            raise ValueError(f"code_length must be between 1 and {_RANDOM_BYTES * 2}")
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.code_length = code_length
        self.max_attempts = max_attempts

    def generate(self) -> str:
        """Return one candidate code; uniqueness is not checked."""
        return secrets.token_bytes(_RANDOM_BYTES).hex()[: self.code_length].upper()

    def allocate(self, is_occupied: Callable[[str], bool]) -> str:
        """Return a code for which ``is_occupied`` is false at the instant of the check.

        The code is not reserved. A concurrent join can claim it before the
        caller does; that caller then observes ``joined`` or ``full`` instead
        of ``created``.
        """
        for attempt in range(1, self.max_attempts + 1):
            code = self.generate()
            if not is_occupied(code):
                if attempt > 1:
                    logger.debug("Allocated room code %s after %d attempts", code, attempt)
                return code
        raise CodeAllocationError(
            f"no free room code after {self.max_attempts} attempts"
        )


__all__ = [
    "CodeGenerator",
    "DEFAULT_CODE_LENGTH",
    "DEFAULT_MAX_ATTEMPTS",
]
