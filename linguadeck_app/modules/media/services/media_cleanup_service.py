# File: linguadeck_app/modules/media/services/media_cleanup_service.py
# Mục đích: Dọn dẹp thư mục gói APKG không còn được tham chiếu và chuẩn hoá fallback media.

import logging
import os
import re
import shutil
from typing import Iterable, Optional, Set

from sqlalchemy import or_

from linguadeck_app.models import Card, Deck, db
from linguadeck_app.modules.ordering.interface import extract_video_timestamp_key
from linguadeck_app.utils.db_session import safe_commit

from ..config import MediaModuleDefaultConfig
from ..schemas import MediaFallbackReport, PackageCleanupReport
from .media_base_service import MediaBaseService

logger = logging.getLogger(__name__)

REFERENCE_COLUMNS = (Card.front_text, Card.back_text, Card.front_audio_url, Card.back_audio_url)


class MediaCleanupService:
    """Best-effort maintenance of extracted media packages."""

    def __init__(self, media_bases: Optional[MediaBaseService] = None):
        self.media_bases = media_bases or MediaBaseService()

    def _package_regex(self, owner_id):
        return re.compile(re.escape(self.media_bases.package_url(owner_id, '')) + r'([^/]+)/')

    def find_package_bases(self, owner_id, cards: Iterable[Card]) -> Set[str]:
        """Package directory names referenced by ``cards``."""
        pattern = self._package_regex(owner_id)
        bases = set()
        for card in cards:
            for value in (card.front_text, card.back_text, card.front_audio_url, card.back_audio_url):
                for match in pattern.finditer(str(value or '')):
                    base = match.group(1).strip()
                    if base:
                        bases.add(base)
        return bases

    def _reference_filter(self, owner_id, base_name: str):
        like = f"%{self.media_bases.package_url(owner_id, base_name)}/%"
        return or_(*[column.like(like) for column in REFERENCE_COLUMNS])

    def count_references(self, owner_id, base_name: str, exclude_deck_id: Optional[int] = None,
                         owned_only: bool = False) -> int:
        query = Card.query.filter(self._reference_filter(owner_id, base_name))
        if exclude_deck_id is not None:
            query = query.filter(Card.deck_id != exclude_deck_id)
        if owned_only:
            query = query.join(Deck, Deck.id == Card.deck_id).filter(Deck.owner_id == owner_id)
        return query.count()

    def _remove_package(self, owner_id, base_name: str) -> bool:
        path = os.path.join(self.media_bases.owner_root(owner_id), base_name)
        if not os.path.isdir(path):
            return False
        shutil.rmtree(path)
        logger.info("Removed media package directory %s", path)
        return True

    def cleanup_deck_media(self, owner_id, deck: Deck) -> list:
        """
        Remove the package directories referenced only by ``deck``.

        Must run before the deck's cards are deleted. Never raises; failures
        are logged.
        """
        removed = []
        if owner_id is None:
            return removed
        try:
            bases = self.find_package_bases(owner_id, deck.cards.all())
        except Exception as exc:
            logger.warning("Could not scan media packages of deck %s: %s", deck.id, exc)
            return removed

        for base_name in sorted(bases):
            try:
                refs = self.count_references(owner_id, base_name, exclude_deck_id=deck.id)
                if refs:
                    logger.info("Keeping media package %s (%d references in other decks)", base_name, refs)
                    continue
                if self._remove_package(owner_id, base_name):
                    removed.append(self.media_bases.package_url(owner_id, base_name))
            except Exception as exc:
                logger.warning("Media cleanup failed for package %s: %s", base_name, exc)
        return removed

    def cleanup_orphan_packages(self, owner_id) -> PackageCleanupReport:
        """Remove every package directory of ``owner_id`` that no owned card references."""
        report = PackageCleanupReport()
        root = self.media_bases.owner_root(owner_id)
        if not os.path.isdir(root):
            return report

        base_names = sorted(entry.name for entry in os.scandir(root) if entry.is_dir())
        for base_name in base_names:
            try:
                refs = self.count_references(owner_id, base_name, owned_only=True)
                if refs:
                    report.kept.append({'base': base_name, 'refs': refs})
                    continue
                self._remove_package(owner_id, base_name)
                report.removed.append(self.media_bases.package_url(owner_id, base_name))
            except Exception as exc:
                logger.warning("Orphan cleanup failed for package %s: %s", base_name, exc)
                report.errors.append({'base': base_name, 'error': str(exc)})
        return report


def normalize_media_fallbacks() -> MediaFallbackReport:
    """
    Global media normalization over every card:

    1. clear the front audio of cards that have a front video;
    2. use the back audio as front audio when the front has neither;
    3. backfill ``video_order_key`` from video filenames;
    4. replace the legacy missing-translation placeholder on dialogue decks
       with the front text.
    """
    report = MediaFallbackReport()

    report.front_audio_cleared = Card.query.filter(
        Card.front_video_url.isnot(None),
        Card.front_audio_url.isnot(None),
    ).update({Card.front_audio_url: None}, synchronize_session=False)

    report.front_audio_filled = Card.query.filter(
        Card.front_audio_url.is_(None),
        Card.front_video_url.is_(None),
        Card.back_audio_url.isnot(None),
    ).update({Card.front_audio_url: Card.back_audio_url}, synchronize_session=False)
    safe_commit(db.session)

    missing_keys = Card.query.filter(
        Card.video_order_key.is_(None),
        or_(Card.front_video_url.isnot(None), Card.back_video_url.isnot(None)),
    ).all()
    for card in missing_keys:
        key = extract_video_timestamp_key(card.front_video_url or card.back_video_url or '')
        if key is not None:
            card.video_order_key = key
            report.video_keys_backfilled += 1

    placeholder = MediaModuleDefaultConfig.MISSING_TRANSLATION_PLACEHOLDER
    dialogue_deck_ids = [
        deck.id for deck in Deck.query.all()
        if deck.deck_tags.is_dialogue or '→' in (deck.name or '')
    ]
    if dialogue_deck_ids:
        report.placeholders_replaced = Card.query.filter(
            Card.deck_id.in_(dialogue_deck_ids),
            Card.back_text == placeholder,
        ).update({Card.back_text: Card.front_text}, synchronize_session=False)

    safe_commit(db.session)
    logger.info("Media fallback normalization finished: %s", report.to_dict())
    return report
