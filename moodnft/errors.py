"""
Errors raised by the token registry and ownership ledger.

Every failure aborts the triggering call without changing any state.
"""


class MoodNFTError(Exception):
    """Base class for all Mood NFT errors."""


class NotAuthorized(MoodNFTError):
    """The caller has no authority over the token."""

    def __init__(self, token_id: int, caller: str) -> None:
        self.token_id = token_id
        self.caller = caller
        super().__init__(f"{caller!r} is not authorized for token {token_id}")


class UnknownToken(MoodNFTError):
    """The token id was never minted."""

    def __init__(self, token_id: int) -> None:
        self.token_id = token_id
        super().__init__(f"Token {token_id} does not exist")


class SubscriberLagged(MoodNFTError):
    """A stream subscriber fell behind the retained event buffer."""

    def __init__(self, missed: int) -> None:
        self.missed = missed
        super().__init__(f"Subscriber fell behind and missed {missed} events")
