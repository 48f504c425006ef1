# File: linguadeck_app/modules/decks/services/normalize_service.py
# Mục đích: Ghi (materialize) thẻ của deck hội thoại từ file nguồn, thay thế toàn bộ thẻ cũ.

import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from linguadeck_app.models import Deck, db
from linguadeck_app.modules.dialogues.interface import DialogueSourceRepository, get_source_repository
from linguadeck_app.utils.db_session import safe_commit

from ..exceptions import DialogueSourceNotFoundError, NormalizeUnsupportedError
from ..logics.dialogue_cards import compose_dialogue_cards
from ..logics.target_spec import TargetSpec, is_dialogue_deck
from ..schemas import NormalizeResult
from .compositor import load_dialogue_script, resolve_deck_dialogue
from .deck_store import DeckStore

logger = logging.getLogger(__name__)


class NormalizeService:
    """Delete-then-recreate of a dialogue deck's cards, one commit per deck."""

    def __init__(self, repository: Optional[DialogueSourceRepository] = None):
        self.repository = repository or get_source_repository()

    def normalize(self, deck: Deck, override: Optional[TargetSpec] = None) -> NormalizeResult:
        """
        Rebuild the cards of ``deck`` from its dialogue files.

        Raises:
            NormalizeUnsupportedError: ``deck`` is not a dialogue deck.
            DialogueKeyUnresolvedError: the dialogue of ``deck`` is unknown.
            DialogueSourceNotFoundError: the source script is missing or empty.
        """
        if not is_dialogue_deck(deck):
            raise NormalizeUnsupportedError(deck.id)

        dialogue_key = resolve_deck_dialogue(deck, self.repository)
        source_language = deck.source_language
        target = TargetSpec.effective(deck.name, override)

        script = load_dialogue_script(self.repository, dialogue_key, source_language, target)
        if not script.source_lines:
            raise DialogueSourceNotFoundError(source_language, dialogue_key)

        rows = compose_dialogue_cards(script, target, self.repository.resolve_audio_url)
        try:
            created = DeckStore.replace_cards(deck, (row.to_card_kwargs(deck.id) for row in rows))
            DeckStore.touch(deck)
            safe_commit(db.session)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Normalize failed for deck %s", deck.id)
            raise

        logger.info("Deck %s rebuilt from %s/%s: %d cards (target=%s)",
                    deck.id, source_language, dialogue_key, created, target.label)
        return NormalizeResult(
            deck_id=deck.id,
            dialogue_key=dialogue_key,
            source_language=source_language,
            target=target.label,
            cards_rebuilt=created,
        )
