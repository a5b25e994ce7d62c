"""
Ownership ledger for Mood NFT tokens.

The registry only depends on the small ``OwnershipAuthority`` capability
(``owner_of``, ``is_authorized``, ``register_mint``). The HTTP delegation
endpoints additionally need a ``DelegationLedger``. ``OwnershipLedger`` is
the in-memory implementation, with ERC-721 style balances, per-token
approvals, operators and transfers.
"""

import logging
from typing import Protocol, runtime_checkable

from .errors import MoodNFTError, NotAuthorized, UnknownToken

logger = logging.getLogger(__name__)


class OwnershipAuthority(Protocol):
    """What the token registry needs from an ownership ledger."""

    def owner_of(self, token_id: int) -> str:
        """Owner of a token, raises UnknownToken if it was never registered."""
        ...

    def is_authorized(self, identity: str, token_id: int) -> bool: ...

    def register_mint(self, identity: str, token_id: int) -> None: ...


@runtime_checkable
class DelegationLedger(OwnershipAuthority, Protocol):
    """A ledger that also supports approvals, operators and transfers."""

    def approve(self, caller: str, approved: str | None, token_id: int) -> None: ...

    def set_approval_for_all(
        self, caller: str, operator: str, approved: bool
    ) -> None: ...

    def transfer(
        self, caller: str, from_owner: str, to: str, token_id: int
    ) -> None: ...


class OwnershipLedger:
    """
    In-memory ledger tracking owners, balances and delegations.

    An identity is authorized over a token when it owns it, is the token's
    approved address, or is an operator approved for all of the owner's
    tokens. The ledger performs no I/O; callers that share it between
    concurrent tasks serialize access themselves.
    """

    def __init__(self) -> None:
        self._owners: dict[int, str] = {}
        self._balances: dict[str, int] = {}
        self._token_approvals: dict[int, str] = {}
        self._operators: dict[str, set[str]] = {}

    def owner_of(self, token_id: int) -> str:
        try:
            return self._owners[token_id]
        except KeyError:
            raise UnknownToken(token_id) from None

    def exists(self, token_id: int) -> bool:
        return token_id in self._owners

    def balance_of(self, identity: str) -> int:
        return self._balances.get(identity, 0)

    def register_mint(self, identity: str, token_id: int) -> None:
        """Record ``identity`` as the owner of a freshly minted token."""
        if token_id in self._owners:
            raise MoodNFTError(f"Token {token_id} already exists")
        self._owners[token_id] = identity
        self._balances[identity] = self.balance_of(identity) + 1

    def get_approved(self, token_id: int) -> str | None:
        self.owner_of(token_id)
        return self._token_approvals.get(token_id)

    def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return operator in self._operators.get(owner, ())

    def is_authorized(self, identity: str, token_id: int) -> bool:
        owner = self._owners.get(token_id)
        if owner is None:
            return False
        return (
            identity == owner
            or self._token_approvals.get(token_id) == identity
            or self.is_approved_for_all(owner, identity)
        )

    def approve(self, caller: str, approved: str | None, token_id: int) -> None:
        """
        Approve ``approved`` to control a single token, or clear with None.

        Raises:
            UnknownToken: If the token was never minted
            NotAuthorized: If ``caller`` is neither the owner nor an operator
        """
        owner = self.owner_of(token_id)
        if caller != owner and not self.is_approved_for_all(owner, caller):
            logger.warning("Rejected approval of token %d by %s", token_id, caller)
            raise NotAuthorized(token_id, caller)
        if approved is None:
            self._token_approvals.pop(token_id, None)
        else:
            self._token_approvals[token_id] = approved

    def set_approval_for_all(self, caller: str, operator: str, approved: bool) -> None:
        operators = self._operators.setdefault(caller, set())
        if approved:
            operators.add(operator)
        else:
            operators.discard(operator)

    def transfer(self, caller: str, from_owner: str, to: str, token_id: int) -> None:
        """
        Move a token from ``from_owner`` to ``to``.

        Raises:
            UnknownToken: If the token was never minted
            NotAuthorized: If ``caller`` lacks authority or ``from_owner`` is
                not the current owner
        """
        owner = self.owner_of(token_id)
        if owner != from_owner or not self.is_authorized(caller, token_id):
            logger.warning("Rejected transfer of token %d by %s", token_id, caller)
            raise NotAuthorized(token_id, caller)

        self._token_approvals.pop(token_id, None)
        self._balances[owner] -= 1
        self._balances[to] = self.balance_of(to) + 1
        self._owners[token_id] = to
        logger.info("Transferred token %d from %s to %s", token_id, owner, to)
