"""Identity extraction for the acting user."""

from .extractor import IdentityExtractor, extract_identity

__all__ = [
    "IdentityExtractor",
    "extract_identity",
]
