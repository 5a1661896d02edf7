from dataclasses import dataclass, field
from typing import Any


@dataclass
class RegistryEvent:
    """
    A notification emitted by a registry mutation.

    Events are for external observers only; nothing in the registry
    reads them back to make decisions.
    """

    name: str
    args: dict[str, Any] = field(default_factory=dict)
    log_index: int = 0


@dataclass
class Receipt:
    """Outcome of a committed registry mutation."""

    tx_hash: str
    block_number: int
    contract_address: str
    method: str
    sender: str
    status: int = 1
    events: list[RegistryEvent] = field(default_factory=list)

    def find_event(self, name: str) -> RegistryEvent | None:
        """Return the first event with the given name, if any."""
        for event in self.events:
            if event.name == name:
                return event
        return None
