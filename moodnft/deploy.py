"""
Deployment helpers for the Mood NFT service.

Reads the happy and sad SVG images, encodes them as image data URIs and
constructs a ready-to-use ``TokenRegistry``. When no paths are given, the
SVGs bundled in ``moodnft/images`` are used.
"""

import logging
from importlib import resources
from pathlib import Path

from .ledger import OwnershipAuthority
from .metadata import svg_to_image_uri
from .models import ImageSet
from .registry import DEFAULT_TOKEN_NAME, DEFAULT_TOKEN_SYMBOL, TokenRegistry

logger = logging.getLogger(__name__)


def read_svg(path: str | Path) -> str:
    """Read SVG source exactly as stored on disk."""
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def load_image_set(happy_svg: str | Path, sad_svg: str | Path) -> ImageSet:
    return ImageSet(
        happy_image_uri=svg_to_image_uri(read_svg(happy_svg)),
        sad_image_uri=svg_to_image_uri(read_svg(sad_svg)),
    )


def bundled_image_set() -> ImageSet:
    """Build the image set from the SVGs shipped with the package."""
    images = resources.files("moodnft") / "images"
    return ImageSet(
        happy_image_uri=svg_to_image_uri(
            (images / "happy.svg").read_bytes().decode("utf-8")
        ),
        sad_image_uri=svg_to_image_uri(
            (images / "sad.svg").read_bytes().decode("utf-8")
        ),
    )


def deploy(
    happy_svg: str | Path | None = None,
    sad_svg: str | Path | None = None,
    name: str = DEFAULT_TOKEN_NAME,
    symbol: str = DEFAULT_TOKEN_SYMBOL,
    ledger: OwnershipAuthority | None = None,
) -> TokenRegistry:
    """
    Create a token registry configured with the given images.

    Args:
        happy_svg: Path to the HAPPY image, bundled image when omitted
        sad_svg: Path to the SAD image, bundled image when omitted
        name: Collection name used in every metadata document
        symbol: Collection symbol
        ledger: Ownership ledger holding no tokens yet, a fresh in-memory
            one when omitted

    Returns:
        A new TokenRegistry with no tokens minted
    """
    if (happy_svg is None) != (sad_svg is None):
        raise ValueError("happy_svg and sad_svg must be given together")

    if happy_svg is None:
        image_set = bundled_image_set()
    else:
        image_set = load_image_set(happy_svg, sad_svg)

    logger.info("Deploying %s (%s)", name, symbol)
    return TokenRegistry(image_set, ledger=ledger, name=name, symbol=symbol)
