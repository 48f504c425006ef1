# File: linguadeck_app/modules/media/services/media_base_service.py
# Mục đích: Xác định thư mục media của gói APKG đã giải nén cho một deck.

import logging
import os
import re
from typing import Iterable, List, Optional

from flask import current_app, has_app_context

from linguadeck_app.utils.fallback import Candidate, first_labelled_match

from ..config import MediaModuleDefaultConfig

logger = logging.getLogger(__name__)

REFERENCE_FIELDS = ('front_audio_url', 'back_audio_url', 'front_text', 'back_text')


class MediaBaseService:
    """
    Locates the extracted media folder of a deck, as a URL path of the form
    ``/uploads/apkg/<owner>/<base>/extract/media``.
    """

    def __init__(self, upload_folder: Optional[str] = None, apkg_subdir: Optional[str] = None,
                 media_subdir: Optional[str] = None):
        config = current_app.config if has_app_context() else {}
        self.upload_folder = upload_folder or config.get('UPLOAD_FOLDER', '')
        self.apkg_subdir = (apkg_subdir or config.get('APKG_UPLOAD_SUBDIR')
                            or MediaModuleDefaultConfig.APKG_UPLOAD_SUBDIR).strip('/')
        self.media_subdir = (media_subdir or config.get('APKG_MEDIA_SUBDIR')
                             or MediaModuleDefaultConfig.APKG_MEDIA_SUBDIR).strip('/')

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    def owner_root(self, owner_id) -> str:
        """Filesystem directory holding every extracted package of ``owner_id``."""
        return os.path.join(self.upload_folder, self.apkg_subdir, str(owner_id))

    def package_url(self, owner_id, base_name: str) -> str:
        return f"{MediaModuleDefaultConfig.UPLOADS_URL_PREFIX}/{self.apkg_subdir}/{owner_id}/{base_name}"

    def media_base_url(self, owner_id, base_name: str) -> str:
        return f"{self.package_url(owner_id, base_name)}/{self.media_subdir}"

    def media_dir(self, owner_id, base_name: str) -> str:
        return os.path.join(self.owner_root(owner_id), base_name, *self.media_subdir.split('/'))

    def media_base_regex(self, owner_id):
        """Pattern capturing ``<base>`` in ``/uploads/apkg/<owner>/<base>/extract/media``."""
        return re.compile(
            re.escape(f"{MediaModuleDefaultConfig.UPLOADS_URL_PREFIX}/{self.apkg_subdir}/{owner_id}/")
            + r'([^/]+)/' + re.escape(self.media_subdir)
        )

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------
    def _from_stored_references(self, owner_id, cards: Iterable) -> Optional[str]:
        pattern = self.media_base_regex(owner_id)
        for card in cards:
            for field_name in REFERENCE_FIELDS:
                value = getattr(card, field_name, None)
                match = pattern.search(str(value or ''))
                if match:
                    return self.media_base_url(owner_id, match.group(1))
        return None

    def _from_deck_name(self, owner_id, deck_name: Optional[str]) -> Optional[str]:
        name = (deck_name or '').strip()
        if not name or '/' in name or name in ('.', '..'):
            return None
        if not os.path.isdir(self.media_dir(owner_id, name)):
            return None
        return self.media_base_url(owner_id, name)

    def _from_latest_package(self, owner_id) -> Optional[str]:
        root = self.owner_root(owner_id)
        if not os.path.isdir(root):
            return None
        try:
            entries = [entry for entry in os.scandir(root) if entry.is_dir()]
            entries.sort(key=lambda entry: entry.stat().st_mtime, reverse=True)
        except OSError as exc:
            logger.warning("Could not scan media packages in %s: %s", root, exc)
            return None
        for entry in entries:
            if os.path.isdir(self.media_dir(owner_id, entry.name)):
                return self.media_base_url(owner_id, entry.name)
        return None

    def candidates(self, owner_id, deck_name: Optional[str], cards: Iterable) -> List[Candidate]:
        cards = list(cards)
        return [
            Candidate('stored_reference', lambda: self._from_stored_references(owner_id, cards)),
            Candidate('deck_name', lambda: self._from_deck_name(owner_id, deck_name)),
            Candidate('latest_package', lambda: self._from_latest_package(owner_id)),
        ]

    def resolve_media_base(self, owner_id, deck_name: Optional[str], cards: Iterable) -> str:
        """Return the media base URL path for a deck, or an empty string."""
        if owner_id is None:
            return ''
        label, media_base = first_labelled_match(self.candidates(owner_id, deck_name, cards))
        if media_base:
            logger.debug("Media base for deck %r resolved via %s: %s", deck_name, label, media_base)
        return media_base or ''
