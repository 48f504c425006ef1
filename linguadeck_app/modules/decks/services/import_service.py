# File: linguadeck_app/modules/decks/services/import_service.py
# Mục đích: Nhập hội thoại thành deck riêng của người dùng (đã materialize thẻ).

import logging
from typing import List, Optional

from flask import current_app, has_app_context
from sqlalchemy.exc import SQLAlchemyError

from linguadeck_app.models import db
from linguadeck_app.modules.dialogues.config import DialogueModuleDefaultConfig
from linguadeck_app.modules.dialogues.interface import DialogueSourceRepository, get_source_repository
from linguadeck_app.utils.db_session import safe_commit

from ..config import DecksModuleDefaultConfig
from ..exceptions import (
    DialogueKeyRequiredError,
    DialoguesNotFoundError,
    DialogueSourceNotFoundError,
    TargetLanguageRequiredError,
    TranslationNotFoundError,
)
from ..logics.dialogue_cards import compose_dialogue_cards
from ..logics.target_spec import TargetSpec, build_deck_name, normalize_lang_code
from ..schemas import ImportResult
from .compositor import load_dialogue_script
from .deck_store import DeckStore

logger = logging.getLogger(__name__)


def _default_source_language() -> str:
    if has_app_context():
        configured = current_app.config.get('DIALOGUE_SOURCE_LANGUAGE')
        if configured:
            return configured.lower()
    return DialogueModuleDefaultConfig.SOURCE_LANGUAGE


class DialogueImportService:
    """Creates user-owned dialogue decks with persisted cards."""

    def __init__(self, repository: Optional[DialogueSourceRepository] = None):
        self.repository = repository or get_source_repository()

    @staticmethod
    def resolve_target(target_language=None, include_all: bool = False) -> TargetSpec:
        if include_all:
            return TargetSpec.all_languages()
        target = TargetSpec.parse_override(target_language)
        if target is None or not target.is_single:
            raise TargetLanguageRequiredError()
        return target

    def import_dialogue(self, owner_id: int, dialogue_key: str, source_language: Optional[str] = None,
                        target_language: Optional[str] = None, include_all: bool = False) -> ImportResult:
        """
        Import one dialogue as a deck owned by ``owner_id``.

        An owned deck with the same name is reused and its cards rebuilt.

        Raises:
            DialogueKeyRequiredError: ``dialogue_key`` is empty.
            TargetLanguageRequiredError: no usable target and not ``include_all``.
            DialogueSourceNotFoundError: the source script is missing or empty.
            TranslationNotFoundError: the target (or, in ALL mode, every translation) has no lines.
        """
        dialogue_key = (dialogue_key or '').strip()
        if not dialogue_key:
            raise DialogueKeyRequiredError()
        source_language = normalize_lang_code(source_language) or _default_source_language()
        target = self.resolve_target(target_language, include_all)

        script = load_dialogue_script(self.repository, dialogue_key, source_language, target)
        if not script.source_lines:
            raise DialogueSourceNotFoundError(source_language, dialogue_key)
        if not script.translations:
            raise TranslationNotFoundError(dialogue_key, target.language)

        return self._store(owner_id, script, target, reuse_existing=True)

    def import_all(self, owner_id: int, source_language: Optional[str] = None,
                   target_language: Optional[str] = None, include_all: bool = False) -> List[ImportResult]:
        """
        Import every dialogue of ``source_language``.

        Dialogues already imported under the same deck name and dialogues
        without source lines are skipped. A missing translation falls back
        to the source line on the back.
        """
        source_language = normalize_lang_code(source_language) or _default_source_language()
        target = self.resolve_target(target_language, include_all)

        keys = self.repository.list_dialogue_keys(source_language)
        if not keys:
            raise DialoguesNotFoundError(source_language)

        results = []
        for dialogue_key in keys:
            name = build_deck_name(dialogue_key, source_language, target.label)
            if DeckStore.find_owned_deck_by_name(owner_id, name) is not None:
                continue
            script = load_dialogue_script(self.repository, dialogue_key, source_language, target)
            if not script.source_lines:
                continue
            results.append(self._store(owner_id, script, target, reuse_existing=False))
        return results

    def _store(self, owner_id: int, script, target: TargetSpec, reuse_existing: bool) -> ImportResult:
        name = build_deck_name(script.dialogue_key, script.source_language, target.label)
        deck = DeckStore.find_owned_deck_by_name(owner_id, name) if reuse_existing else None
        reused = deck is not None
        rows = compose_dialogue_cards(script, target, self.repository.resolve_audio_url)
        try:
            if deck is None:
                deck = DeckStore.create_dialogue_deck(
                    name=name,
                    dialogue_key=script.dialogue_key,
                    source_language=script.source_language,
                    description=DecksModuleDefaultConfig.IMPORTED_DECK_DESCRIPTION.format(key=script.dialogue_key),
                    owner_id=owner_id,
                )
            else:
                DeckStore.touch(deck)
            created = DeckStore.replace_cards(deck, (row.to_card_kwargs(deck.id) for row in rows))
            safe_commit(db.session)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Import of dialogue %s failed for user %s", script.dialogue_key, owner_id)
            raise

        logger.info("User %s imported dialogue %s into deck %s (%d cards, reused=%s)",
                    owner_id, script.dialogue_key, deck.id, created, reused)
        return ImportResult(
            deck_id=deck.id,
            name=name,
            dialogue_key=script.dialogue_key,
            created_cards=created,
            reused=reused,
        )
