from dataclasses import dataclass
from typing import Literal

StatusKind = Literal["error", "success", "info"]


@dataclass
class StatusMessage:
    """Latest user-facing status of the client."""

    kind: StatusKind = "info"
    message: str = ""
    tx: str | None = None

    @classmethod
    def info(cls, message: str, tx: str | None = None) -> "StatusMessage":
        return cls("info", message, tx)

    @classmethod
    def success(cls, message: str, tx: str | None = None) -> "StatusMessage":
        return cls("success", message, tx)

    @classmethod
    def error(cls, message: str, tx: str | None = None) -> "StatusMessage":
        return cls("error", message, tx)
