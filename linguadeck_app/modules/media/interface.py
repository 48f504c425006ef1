# File: linguadeck_app/modules/media/interface.py
"""
Media Interface
================
Public API for other modules to interact with media functionality.
"""

from typing import Iterable, Optional

from .logics.media_rewriter import prefix_media_url, rewrite_media_references, sanitize_caption
from .schemas import MediaFallbackReport, PackageCleanupReport
from .services.media_base_service import MediaBaseService
from .services.media_cleanup_service import MediaCleanupService, normalize_media_fallbacks


class MediaInterface:
    """Public interface for media module operations."""

    @staticmethod
    def resolve_media_base(owner_id, deck_name: Optional[str], cards: Iterable) -> str:
        return MediaBaseService().resolve_media_base(owner_id, deck_name, cards)

    @staticmethod
    def rewrite_card_texts(front_text: Optional[str], back_text: Optional[str],
                           media_base: str, request_host: str) -> tuple:
        """Return ``(front, back)`` with image sources rewritten; the back is sanitized first."""
        return (
            rewrite_media_references(front_text, media_base, request_host),
            rewrite_media_references(sanitize_caption(back_text), media_base, request_host),
        )

    @staticmethod
    def prefix_media_url(url: Optional[str], request_host: str) -> Optional[str]:
        return prefix_media_url(url, request_host)

    @staticmethod
    def cleanup_deck_media(owner_id, deck) -> list:
        return MediaCleanupService().cleanup_deck_media(owner_id, deck)

    @staticmethod
    def cleanup_orphan_packages(owner_id) -> PackageCleanupReport:
        return MediaCleanupService().cleanup_orphan_packages(owner_id)

    @staticmethod
    def normalize_media_fallbacks() -> MediaFallbackReport:
        return normalize_media_fallbacks()
