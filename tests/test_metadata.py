"""
Tests for metadata encoding.

The encoded output is part of the external format, so these tests compare
against golden strings rather than only round-tripping.
"""

import json

import pytest

from moodnft.metadata import (
    JSON_URI_PREFIX,
    SVG_URI_PREFIX,
    decode_data_uri,
    render_metadata,
    svg_to_image_uri,
    token_uri,
)
from moodnft.models import ImageSet, Mood

HAPPY_URI = "data:image/svg+xml;base64,aGFwcHk="
SAD_URI = "data:image/svg+xml;base64,c2Fk"

GOLDEN_HAPPY = (
    "data:application/json;base64,"
    "eyJuYW1lIjogIk1vb2QgTkZUIiwgImRlc2NyaXB0aW9uIjogIkFuIE5GVCB0aGF0IHJlZmxlY3Rz"
    "IHRoZSBvd25lcnMgbW9vZC4iLCAiYXR0cmlidXRlcyI6IFt7InRyYWl0X3R5cGUiOiAibW9vZG5l"
    "c3MiLCAidmFsdWUiOiAxMDB9XSwgImltYWdlIjogImRhdGE6aW1hZ2Uvc3ZnK3htbDtiYXNlNjQs"
    "YUdGd2NIaz0ifQ=="
)


class TestTokenURI:
    """Test suite for token metadata URIs."""

    def setup_method(self):
        self.images = ImageSet(happy_image_uri=HAPPY_URI, sad_image_uri=SAD_URI)

    def test_golden_happy(self):
        """Test the exact bytes produced for a HAPPY token."""
        assert token_uri(Mood.HAPPY, self.images, "Mood NFT") == GOLDEN_HAPPY

    def test_exact_template(self):
        """Test field order, spacing and fixed literals of the payload."""
        assert render_metadata(Mood.SAD, self.images, "Mood NFT") == (
            '{"name": "Mood NFT", '
            '"description": "An NFT that reflects the owners mood.", '
            '"attributes": [{"trait_type": "moodness", "value": 100}], '
            '"image": "data:image/svg+xml;base64,c2Fk"}'
        )

    def test_image_follows_mood(self):
        """Test that the embedded image is selected by mood."""
        happy = json.loads(decode_data_uri(token_uri(Mood.HAPPY, self.images, "x")))
        sad = json.loads(decode_data_uri(token_uri(Mood.SAD, self.images, "x")))

        assert happy["image"] == HAPPY_URI
        assert sad["image"] == SAD_URI
        assert list(sad) == ["name", "description", "attributes", "image"]
        assert sad["attributes"] == [{"trait_type": "moodness", "value": 100}]

    def test_empty_strings(self):
        """Test that empty names and images are still encodable."""
        images = ImageSet(happy_image_uri="", sad_image_uri="")
        assert token_uri(Mood.HAPPY, images, "") == (
            JSON_URI_PREFIX
            + "eyJuYW1lIjogIiIsICJkZXNjcmlwdGlvbiI6ICJBbiBORlQgdGhhdCByZWZsZWN0cyB0aGUg"
            "b3duZXJzIG1vb2QuIiwgImF0dHJpYnV0ZXMiOiBbeyJ0cmFpdF90eXBlIjogIm1vb2RuZXNz"
            "IiwgInZhbHVlIjogMTAwfV0sICJpbWFnZSI6ICIifQ=="
        )

    def test_name_is_not_escaped(self):
        """Test that the name is inserted verbatim, not JSON-escaped."""
        doc = render_metadata(Mood.HAPPY, self.images, "Café")
        assert doc.startswith('{"name": "Café", ')


class TestSvgToImageURI:
    """Test suite for SVG image encoding."""

    def test_encodes_bytes_exactly(self):
        assert svg_to_image_uri("<svg>hi</svg>") == SVG_URI_PREFIX + "PHN2Zz5oaTwvc3ZnPg=="

    def test_trailing_newline_changes_output(self):
        assert svg_to_image_uri("<svg>hi</svg>\n") == SVG_URI_PREFIX + "PHN2Zz5oaTwvc3ZnPgo="
        assert svg_to_image_uri("<svg>hi</svg>\n") != svg_to_image_uri("<svg>hi</svg>")

    def test_deterministic(self):
        svg = '<svg xmlns="http://www.w3.org/2000/svg"><circle r="1"/></svg>'
        assert svg_to_image_uri(svg) == svg_to_image_uri(svg)
        assert svg_to_image_uri(svg).startswith("data:image/svg+xml;base64,")

    def test_empty(self):
        assert svg_to_image_uri("") == SVG_URI_PREFIX


class TestDecodeDataURI:
    def test_decodes_svg(self):
        uri = svg_to_image_uri("<svg/>")
        assert decode_data_uri(uri, SVG_URI_PREFIX) == "<svg/>"

    def test_wrong_prefix(self):
        with pytest.raises(ValueError):
            decode_data_uri(svg_to_image_uri("<svg/>"))
