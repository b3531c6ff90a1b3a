"""Outcome dataclass returned by operations that can be refused."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Outcome:
    """Result of a user action: success flag plus a message for the operator."""

    ok: bool
    message: str = ""

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, message: str = "") -> "Outcome":
        return cls(True, message)

    @classmethod
    def fail(cls, message: str) -> "Outcome":
        return cls(False, message)
