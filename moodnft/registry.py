"""
Token registry for the Mood NFT service.

This module owns the token counter and each token's mood. Ownership is
delegated to an ``OwnershipAuthority``; the registry never stores owners
itself. All state changes happen under a single asyncio condition, which also
wakes up subscribers of the event stream.
"""

import asyncio
import logging
import time
from collections import deque
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from . import metadata
from .errors import NotAuthorized, SubscriberLagged, UnknownToken
from .ledger import OwnershipAuthority, OwnershipLedger
from .models import ImageSet, Mood, TokenEvent, TokenState

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_NAME = "Mood NFT"
DEFAULT_TOKEN_SYMBOL = "MN"
DEFAULT_EVENT_BUFFER = 1024


class TokenRegistry:
    """
    In-memory registry of minted tokens and their moods.

    Ids are assigned sequentially from 0 and never reused. Every token starts
    HAPPY and only ``flip_mood`` changes it afterwards. Operations either
    complete fully or raise before touching any state.

    Args:
        image_set: Happy and sad image URIs shared by every token
        ledger: Ownership ledger holding no tokens yet, since ids are handed
            out from 0. A fresh OwnershipLedger when omitted.
        name: Collection name used in every metadata document
        symbol: Collection symbol
        event_buffer: Number of recent events kept for stream subscribers

    Raises:
        ValueError: If the ledger already holds token 0
    """

    def __init__(
        self,
        image_set: ImageSet,
        ledger: OwnershipAuthority | None = None,
        name: str = DEFAULT_TOKEN_NAME,
        symbol: str = DEFAULT_TOKEN_SYMBOL,
        event_buffer: int = DEFAULT_EVENT_BUFFER,
    ) -> None:
        if ledger is None:
            ledger = OwnershipLedger()
        elif _holds_token(ledger, 0):
            raise ValueError("ledger already holds minted tokens")
        if event_buffer < 1:
            raise ValueError("event_buffer must be at least 1")

        self._image_set = image_set
        self._ledger = ledger
        self._name = name
        self._symbol = symbol
        self._token_counter = 0
        self._moods: dict[int, Mood] = {}
        # Only the most recent events are kept; _published counts all of them
        self._events: deque[TokenEvent] = deque(maxlen=event_buffer)
        self._published = 0
        self._condition = asyncio.Condition()

    @property
    def name(self) -> str:
        return self._name

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def image_set(self) -> ImageSet:
        return self._image_set

    @property
    def ledger(self) -> OwnershipAuthority:
        return self._ledger

    @property
    def total_minted(self) -> int:
        return self._token_counter

    async def mint(self, caller: str) -> int:
        """
        Mint a new HAPPY token owned by ``caller``.

        Args:
            caller: Identity that will own the token

        Returns:
            The id assigned to the new token
        """
        async with self._condition:
            token_id = self._token_counter
            self._ledger.register_mint(caller, token_id)
            self._moods[token_id] = Mood.HAPPY
            self._token_counter += 1
            self._publish("mint", token_id, Mood.HAPPY, caller)

        logger.info("Minted token %d for %s", token_id, caller)
        return token_id

    async def flip_mood(self, token_id: int, caller: str) -> Mood:
        """
        Toggle a token's mood between HAPPY and SAD.

        Args:
            token_id: The token to flip
            caller: Identity requesting the flip

        Returns:
            The token's new mood

        Raises:
            NotAuthorized: If ``caller`` is not the owner, approved address or
                an approved operator, or the token was never minted
        """
        async with self._condition:
            if token_id not in self._moods or not self._ledger.is_authorized(
                caller, token_id
            ):
                logger.warning("Rejected mood flip of token %d by %s", token_id, caller)
                raise NotAuthorized(token_id, caller)

            new_mood = self._moods[token_id].flipped()
            self._moods[token_id] = new_mood
            self._publish("flip", token_id, new_mood, self._ledger.owner_of(token_id))

        logger.info("Flipped token %d to %s", token_id, new_mood.value)
        return new_mood

    async def mood_of(self, token_id: int) -> Mood:
        """
        Get a token's current mood.

        Raises:
            UnknownToken: If the token was never minted
        """
        async with self._condition:
            return self._mood(token_id)

    async def state_of(self, token_id: int) -> TokenState:
        async with self._condition:
            mood = self._mood(token_id)
            return TokenState(
                token_id=token_id, mood=mood, owner=self._ledger.owner_of(token_id)
            )

    async def token_uri(self, token_id: int) -> str:
        """
        Render the metadata data URI for a token's current mood.

        Raises:
            UnknownToken: If the token was never minted
        """
        async with self._condition:
            mood = self._mood(token_id)
        return metadata.token_uri(mood, self._image_set, self._name)

    @asynccontextmanager
    async def stream(self) -> AsyncGenerator[AsyncGenerator[TokenEvent, None], None]:
        """
        Stream token events to a subscriber.

        This context manager yields an async generator producing every
        ``TokenEvent`` published after the subscription started, in order.
        Only the last ``event_buffer`` events are retained, so a subscriber
        that falls further behind gets ``SubscriberLagged`` instead of a
        silent gap.

        Yields:
            An async generator of TokenEvent objects
        """
        async with self._condition:
            start = self._published

        async def event_generator() -> AsyncGenerator[TokenEvent, None]:
            seen = start
            try:
                while True:
                    async with self._condition:
                        await self._condition.wait_for(lambda: self._published > seen)
                        oldest = self._published - len(self._events)
                        if seen < oldest:
                            logger.warning(
                                "Stream subscriber missed %d events", oldest - seen
                            )
                            raise SubscriberLagged(oldest - seen)
                        pending = list(self._events)[seen - oldest :]
                        seen = self._published

                    # Yield outside the lock so slow consumers don't block writers
                    for event in pending:
                        yield event

            except (asyncio.CancelledError, GeneratorExit):
                return

        yield event_generator()

    def _mood(self, token_id: int) -> Mood:
        try:
            return self._moods[token_id]
        except KeyError:
            raise UnknownToken(token_id) from None

    def _publish(self, kind: str, token_id: int, mood: Mood, owner: str) -> None:
        # Caller must hold self._condition
        self._events.append(
            TokenEvent(
                kind=kind,
                token_id=token_id,
                mood=mood,
                owner=owner,
                timestamp=time.time(),
            )
        )
        self._published += 1
        self._condition.notify_all()


def _holds_token(ledger: OwnershipAuthority, token_id: int) -> bool:
    try:
        ledger.owner_of(token_id)
    except UnknownToken:
        return False
    return True
