"""
Tests for the offline CLI commands and output helpers.
"""

from httpx_sse import ServerSentEvent
from typer.testing import CliRunner

from moodnft.cli import _format_event, _handle_sse_event, app
from moodnft.metadata import svg_to_image_uri
from moodnft.models import Mood, TokenEvent

runner = CliRunner()


class TestCLI:
    """Test suite for commands that need no running server."""

    def test_svg_uri(self, tmp_path):
        svg = tmp_path / "face.svg"
        svg.write_bytes(b"<svg>face</svg>\n")

        result = runner.invoke(app, ["svg-uri", str(svg)])
        assert result.exit_code == 0
        assert result.stdout.strip() == svg_to_image_uri("<svg>face</svg>\n")

    def test_svg_uri_missing_file(self, tmp_path):
        result = runner.invoke(app, ["svg-uri", str(tmp_path / "missing.svg")])
        assert result.exit_code != 0

    def test_mint_without_server(self):
        """Test that connection failures exit with status 1."""
        result = runner.invoke(app, ["mint", "alice", "--url", "http://127.0.0.1:9"])
        assert result.exit_code == 1
        assert "Error" in result.stdout

    def test_format_event(self):
        event = TokenEvent(kind="flip", token_id=3, mood=Mood.SAD, owner="alice")
        assert _format_event(event) == "flip #3 SAD (alice)"

        event = event.model_copy(update={"timestamp": 1_700_000_000.0})
        assert _format_event(event).endswith("> flip #3 SAD (alice)")

    def test_handle_sse_event(self, capsys):
        _handle_sse_event(ServerSentEvent(event="ready", data='{"total_minted": 0}'))
        _handle_sse_event(
            ServerSentEvent(
                event="mint",
                data='{"kind": "mint", "token_id": 0, "mood": "HAPPY", "owner": "bob"}',
            )
        )
        _handle_sse_event(ServerSentEvent(event="mint", data="not json"))
        _handle_sse_event(ServerSentEvent(event="flip", data='{"kind": "flip"}'))

        # Each malformed event produces exactly one warning line
        lines = capsys.readouterr().out.splitlines()
        assert lines[0] == "mint #0 HAPPY (bob)"
        assert lines[1].startswith("Warning: Could not parse SSE data: not json - ")
        assert lines[2].startswith('Warning: Could not parse SSE data: {"kind": "flip"} - ')
        assert len(lines) == 3
