"""
Account signer for client actions.

Stands in for a wallet: it knows the acting address and asks an approval
callback before every action. A declined action never reaches the
service.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from typing import Any

from nexusnft.client.errors import UserCancelledError
from nexusnft.services.addresses import normalize_address

logger = logging.getLogger(__name__)

ApprovalCallback = Callable[[str, dict[str, Any]], bool | Awaitable[bool]]


def approve_all(_action: str, _params: dict[str, Any]) -> bool:
    """Approval callback that accepts every action."""
    return True


class Signer:
    """
    The account on whose behalf the client acts.

    Usage:
        signer = Signer("0xabc...", approve=prompt_user)
        await signer.authorize("mint", {"contract": address})
    """

    def __init__(self, address: str, approve: ApprovalCallback = approve_all):
        self.address = normalize_address(address, "signer")
        self._approve = approve

    async def authorize(self, action: str, params: dict[str, Any]) -> None:
        """
        Ask for approval of an action.

        Raises:
            UserCancelledError: If the callback declines
        """
        decision = self._approve(action, params)
        if inspect.isawaitable(decision):
            decision = await decision
        if not decision:
            logger.info("Signer %s declined %s", self.address, action)
            raise UserCancelledError(action)
