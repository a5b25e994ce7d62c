"""
Metadata encoding for Mood NFT tokens.

Token metadata is delivered as a ``data:application/json;base64,`` URI whose
payload is a fixed JSON template. The template is filled in literally rather
than built with ``json.dumps`` because field order, spacing and the fixed
literals are part of the external format and must match byte for byte.
"""

import base64

from .models import ImageSet, Mood

JSON_URI_PREFIX = "data:application/json;base64,"
SVG_URI_PREFIX = "data:image/svg+xml;base64,"

DESCRIPTION = "An NFT that reflects the owners mood."
ATTRIBUTES = '[{"trait_type": "moodness", "value": 100}]'

_TEMPLATE = (
    '{{"name": "{name}", "description": "{description}", '
    '"attributes": {attributes}, "image": "{image}"}}'
)


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


def render_metadata(mood: Mood, image_set: ImageSet, token_name: str) -> str:
    """
    Render the raw JSON metadata for a token in the given mood.

    Args:
        mood: The token's current mood, selects the embedded image
        image_set: The collection's happy and sad image URIs
        token_name: Display name used verbatim in the ``name`` field

    Returns:
        The JSON document as text (not encoded)
    """
    return _TEMPLATE.format(
        name=token_name,
        description=DESCRIPTION,
        attributes=ATTRIBUTES,
        image=image_set.for_mood(mood),
    )


def token_uri(mood: Mood, image_set: ImageSet, token_name: str) -> str:
    """Encode a token's metadata document as a base64 JSON data URI."""
    return JSON_URI_PREFIX + _b64(render_metadata(mood, image_set, token_name))


def svg_to_image_uri(svg_text: str) -> str:
    """
    Encode SVG source as a base64 image data URI.

    The text is encoded exactly as given, so any difference in the input
    (including a trailing newline) changes the result.
    """
    return SVG_URI_PREFIX + _b64(svg_text)


def decode_data_uri(uri: str, prefix: str = JSON_URI_PREFIX) -> str:
    """
    Decode a base64 data URI produced by this module back to text.

    Raises:
        ValueError: If the URI does not start with ``prefix`` or the payload
            is not valid base64
    """
    if not uri.startswith(prefix):
        raise ValueError(f"URI does not start with {prefix!r}")
    return base64.b64decode(uri[len(prefix) :], validate=True).decode("utf-8")
