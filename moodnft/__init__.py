"""
Mood NFT - on-chain style collectibles that reflect their owner's mood.

This package provides a token registry where every token carries a HAPPY or
SAD mood, an encoder that renders each token's metadata as a base64 data URI
with an embedded SVG image, and an HTTP service and CLI around them.
"""

__version__ = "0.1.0"
