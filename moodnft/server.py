"""
FastAPI server for the Mood NFT service.

This module implements the HTTP API endpoints for minting tokens, flipping
their moods and rendering their metadata, plus a Server-Sent Events stream
of mint and flip events. Callers identify themselves with a plain identity
string in the request body.
"""

import asyncio
import json
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from .deploy import deploy
from .errors import NotAuthorized, UnknownToken
from .ledger import DelegationLedger
from .models import TokenState
from .registry import TokenRegistry


# API Request/Response Schemas
class CallerRequest(BaseModel):
    """Payload for requests made on behalf of an identity."""

    caller: str = Field(..., min_length=1, description="Identity of the caller")


class ApproveRequest(CallerRequest):
    approved: str | None = Field(
        ..., description="Identity to approve, or null to clear the approval"
    )


class TransferRequest(CallerRequest):
    from_owner: str = Field(..., description="Current owner of the token")
    to: str = Field(..., min_length=1, description="New owner of the token")


class OperatorRequest(CallerRequest):
    operator: str = Field(..., min_length=1, description="Operator identity")
    approved: bool = Field(..., description="Grant or revoke the operator")


class CollectionResponse(BaseModel):
    name: str
    symbol: str
    total_minted: int


class TokenURIResponse(BaseModel):
    """Response model for the metadata endpoint."""

    token_id: int = Field(..., description="The token id")
    uri: str = Field(..., description="Base64 JSON data URI of the metadata")


def create_app(registry: TokenRegistry) -> FastAPI:
    """
    Create a FastAPI application with the given token registry.

    Args:
        registry: The TokenRegistry instance to use for the application

    Returns:
        Configured FastAPI application
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Lifespan context manager for FastAPI application."""
        yield

    app = FastAPI(
        title="Mood NFT",
        description="Collectibles that reflect their owner's mood",
        version="0.1.0",
        lifespan=lifespan,
    )

    def _delegation_ledger() -> DelegationLedger:
        """The registry ledger, if it supports approvals and transfers."""
        ledger = registry.ledger
        if not isinstance(ledger, DelegationLedger):
            raise HTTPException(
                status_code=501, detail="Ledger does not support delegation"
            )
        return ledger

    @app.get("/")
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "moodnft"}

    @app.get("/collection")
    async def get_collection() -> CollectionResponse:
        return CollectionResponse(
            name=registry.name,
            symbol=registry.symbol,
            total_minted=registry.total_minted,
        )

    @app.post("/tokens", status_code=201)
    async def mint(request: CallerRequest) -> TokenState:
        """
        Mint a new token owned by the caller.

        Returns:
            The new token, always HAPPY
        """
        token_id = await registry.mint(request.caller)
        return await registry.state_of(token_id)

    @app.get("/tokens/{token_id}")
    async def get_token(token_id: int) -> TokenState:
        try:
            return await registry.state_of(token_id)
        except UnknownToken as e:
            raise HTTPException(status_code=404, detail=str(e))

    @app.post("/tokens/{token_id}/flip")
    async def flip_mood(token_id: int, request: CallerRequest) -> TokenState:
        """
        Toggle the token's mood.

        Returns:
            The token with its new mood
        """
        try:
            await registry.flip_mood(token_id, request.caller)
        except NotAuthorized as e:
            raise HTTPException(status_code=403, detail=str(e))
        return await registry.state_of(token_id)

    @app.get("/tokens/{token_id}/uri")
    async def token_uri(token_id: int) -> TokenURIResponse:
        try:
            uri = await registry.token_uri(token_id)
        except UnknownToken as e:
            raise HTTPException(status_code=404, detail=str(e))
        return TokenURIResponse(token_id=token_id, uri=uri)

    @app.post("/tokens/{token_id}/approve")
    async def approve(token_id: int, request: ApproveRequest) -> dict[str, str | None]:
        try:
            _delegation_ledger().approve(request.caller, request.approved, token_id)
        except UnknownToken as e:
            raise HTTPException(status_code=404, detail=str(e))
        except NotAuthorized as e:
            raise HTTPException(status_code=403, detail=str(e))
        return {"approved": request.approved}

    @app.post("/tokens/{token_id}/transfer")
    async def transfer(token_id: int, request: TransferRequest) -> TokenState:
        try:
            _delegation_ledger().transfer(
                request.caller, request.from_owner, request.to, token_id
            )
        except UnknownToken as e:
            raise HTTPException(status_code=404, detail=str(e))
        except NotAuthorized as e:
            raise HTTPException(status_code=403, detail=str(e))
        return await registry.state_of(token_id)

    @app.put("/operators")
    async def set_operator(request: OperatorRequest) -> dict[str, bool]:
        _delegation_ledger().set_approval_for_all(
            request.caller, request.operator, request.approved
        )
        return {"approved": request.approved}

    @app.get("/events/stream")
    async def stream_events() -> StreamingResponse:
        """
        Stream mint and flip events via Server-Sent Events.

        A ``ready`` event is sent once the subscription is in place; each
        later ``mint`` or ``flip`` event carries a TokenEvent as JSON.

        Returns:
            StreamingResponse with text/event-stream content type
        """

        async def event_generator() -> AsyncGenerator[str, None]:
            """Generate SSE events for token events."""
            try:
                async with registry.stream() as event_stream:
                    # Subscribed: every event from here on reaches the client
                    ready = json.dumps({"total_minted": registry.total_minted})
                    yield f"event: ready\ndata: {ready}\n\n"
                    async for event in event_stream:
                        yield f"event: {event.kind}\ndata: {event.model_dump_json()}\n\n"
            except asyncio.CancelledError:
                # Client disconnected
                pass
            except Exception as e:
                error_data = json.dumps({"error": str(e)})
                yield f"event: error\ndata: {error_data}\n\n"

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Headers": "*",
            },
        )

    return app


# Default app instance using the bundled images
app = create_app(deploy())


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    uvicorn.run(
        "moodnft.server:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info",
    )


if __name__ == "__main__":
    main()
