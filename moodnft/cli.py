"""
Command-line interface tools for the Mood NFT service.
"""

import asyncio
import json
from collections.abc import Coroutine
from datetime import datetime
from pathlib import Path
from typing import Any

import httpx
import typer
from httpx_sse import ServerSentEvent, aconnect_sse
from pydantic import ValidationError

from .deploy import read_svg
from .metadata import decode_data_uri, svg_to_image_uri
from .models import TokenEvent, TokenState

DEFAULT_BASE_URL = "http://localhost:8000"

app = typer.Typer(help="Mood NFT CLI tools")


# MARK: - Commands


@app.command()
def mint(
    caller: str = typer.Argument(..., help="Identity that will own the token"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Mood NFT service"
    ),
) -> None:
    """Mint a new token."""

    async def _mint() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.post(f"{base_url}/tokens", json={"caller": caller})
            response.raise_for_status()
            token = TokenState.model_validate(response.json())
            print(f"Minted token {token.token_id} ({token.mood.value})")

    _run_with_error_handling(_mint(), base_url)


@app.command()
def flip(
    token_id: int = typer.Argument(..., help="The token to flip"),
    caller: str = typer.Argument(..., help="Identity requesting the flip"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Mood NFT service"
    ),
) -> None:
    """Flip a token's mood."""

    async def _flip() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{base_url}/tokens/{token_id}/flip", json={"caller": caller}
            )
            response.raise_for_status()
            token = TokenState.model_validate(response.json())
            print(f"Token {token.token_id} is now {token.mood.value}")

    _run_with_error_handling(_flip(), base_url)


@app.command()
def uri(
    token_id: int = typer.Argument(..., help="The token to render"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Mood NFT service"
    ),
    decode: bool = typer.Option(
        False, "--decode", "-d", help="Print the decoded JSON metadata"
    ),
) -> None:
    """Get a token's metadata URI."""

    async def _uri() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{base_url}/tokens/{token_id}/uri")
            response.raise_for_status()
            token_uri = response.json()["uri"]

            if decode:
                print(decode_data_uri(token_uri))
            else:
                print(token_uri)

    _run_with_error_handling(_uri(), base_url)


@app.command()
def stream(
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Mood NFT service"
    ),
) -> None:
    """Stream mint and flip events in real-time."""

    async def _stream() -> None:
        print(f"Streaming from {base_url}/events/stream... (Ctrl+C to stop)")

        async with httpx.AsyncClient(timeout=None) as client:
            async with aconnect_sse(
                client, "GET", f"{base_url}/events/stream"
            ) as event_source:
                async for sse in event_source.aiter_sse():
                    _handle_sse_event(sse)

    _run_with_error_handling(_stream(), base_url)


@app.command("svg-uri")
def svg_uri(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="SVG file"),
) -> None:
    """Encode an SVG file as an image data URI."""
    print(svg_to_image_uri(read_svg(path)))


# MARK: - Private Helpers


def _format_event(event: TokenEvent) -> str:
    """Format an event with optional timestamp."""
    line = f"{event.kind} #{event.token_id} {event.mood.value} ({event.owner})"
    if not event.timestamp:
        return line

    dt = datetime.fromtimestamp(event.timestamp)
    return f"{dt.strftime('%H:%M:%S')} > {line}"


def _handle_sse_event(sse: ServerSentEvent) -> None:
    """Handle a single SSE event."""
    try:
        if sse.event == "ready":
            return

        if sse.event == "error":
            error_data = json.loads(sse.data)
            print(f"Server error: {error_data.get('error', 'Unknown error')}")
            return

        event = TokenEvent.model_validate_json(sse.data)
        print(_format_event(event))

    except ValidationError as e:
        # First error only, the full report spans several lines
        reason = e.errors()[0]["msg"]
        print(f"Warning: Could not parse SSE data: {sse.data} - {reason}")
    except ValueError as e:
        print(f"Warning: Could not parse SSE data: {sse.data} - {e}")


def _run_with_error_handling(coro: Coroutine[Any, Any, Any], base_url: str) -> None:
    """Run an async coroutine with standardized error handling."""
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nStopped")
        raise typer.Exit(0)
    except httpx.ConnectError:
        print(f"Error: Could not connect to {base_url}")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        detail = _error_detail(e.response)
        print(f"Error: HTTP {e.response.status_code}{detail}")
        raise typer.Exit(1)
    except Exception as e:
        error_msg = str(e) if str(e) else f"Unknown error of type {type(e).__name__}"
        print(f"Error: {error_msg}")
        raise typer.Exit(1)


def _error_detail(response: httpx.Response) -> str:
    try:
        detail = response.json().get("detail")
    except ValueError:
        return ""
    return f" - {detail}" if isinstance(detail, str) else ""


def main() -> None:
    """Entry point for the moodnft console script."""
    app()


if __name__ == "__main__":
    main()
