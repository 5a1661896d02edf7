from dataclasses import dataclass


@dataclass
class Collection:
    """
    One deployed collection as seen by callers.

    `next_token_id` starts at 1 and only grows, so the total supply is
    always one less than it.
    """

    address: str
    name: str
    symbol: str
    owner: str
    next_token_id: int = 1
    base_uri: str = ""
    frozen: bool = False

    def total_supply(self) -> int:
        """Number of tokens minted so far."""
        return self.next_token_id - 1

    def exists(self, token_id: int) -> bool:
        """Check whether a token ID has been minted."""
        return 1 <= token_id < self.next_token_id

    def token_uri(self, token_id: int) -> str:
        """Concatenate the base URI with the decimal token ID."""
        return f"{self.base_uri}{token_id}"


@dataclass
class Token:
    """A minted token and its current holder."""

    token_id: int
    owner: str
    approved: str | None = None
