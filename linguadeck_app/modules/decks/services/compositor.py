# File: linguadeck_app/modules/decks/services/compositor.py
# Mục đích: Dựng danh sách thẻ của một deck (tổng hợp từ file hội thoại hoặc đọc từ DB) theo thứ tự hiển thị.

import logging
from typing import List, Optional, Tuple

from linguadeck_app.modules.dialogues.interface import DialogueScriptDTO, DialogueSourceRepository, get_source_repository
from linguadeck_app.modules.media.interface import MediaInterface
from linguadeck_app.modules.ordering.interface import arrange_cards

from ..exceptions import DialogueKeyUnresolvedError
from ..logics.dialogue_cards import compose_dialogue_cards
from ..logics.target_spec import TargetSpec, is_dialogue_deck, resolve_dialogue_key
from ..schemas import CardView
from .deck_store import DeckStore

logger = logging.getLogger(__name__)


def resolve_deck_dialogue(deck, repository: DialogueSourceRepository) -> str:
    """Dialogue key of ``deck`` or :class:`DialogueKeyUnresolvedError`."""
    key = resolve_dialogue_key(deck, repository.list_dialogue_keys(deck.source_language))
    if not key:
        raise DialogueKeyUnresolvedError(deck.id)
    return key


def load_dialogue_script(repository: DialogueSourceRepository, dialogue_key: str,
                         source_language: str, target: TargetSpec) -> DialogueScriptDTO:
    """Source lines plus the translations ``target`` needs."""
    if target.include_all:
        languages = [
            language for language in repository.list_available_languages(dialogue_key)
            if language != source_language
        ]
    elif target.is_single:
        languages = [target.language]
    else:
        languages = []
    return repository.load_script(dialogue_key, source_language, languages)


class CardViewCompositor:
    """
    Produces the ordered card list of a deck.

    Dialogue decks are synthesized from the dialogue library unless they have
    been materialized and no target override is requested; every other deck
    is read from the card table with its media references rewritten.
    """

    def __init__(self, repository: Optional[DialogueSourceRepository] = None):
        self.repository = repository or get_source_repository()

    def get_cards(self, deck, override: Optional[TargetSpec] = None,
                  request_host: str = '', owner_id: Optional[int] = None) -> List[CardView]:
        if is_dialogue_deck(deck) and (override is not None or DeckStore.count_cards(deck.id) == 0):
            return self._arrange(self.synthesize(deck, override), media_base='')

        media_base, views = self._persisted_views(deck, request_host, owner_id)
        return self._arrange(views, media_base)

    def synthesize(self, deck, override: Optional[TargetSpec] = None) -> List[CardView]:
        """One virtual card per source line; an empty source gives an empty list."""
        dialogue_key = resolve_deck_dialogue(deck, self.repository)
        source_language = deck.source_language
        target = TargetSpec.effective(deck.name, override)

        script = load_dialogue_script(self.repository, dialogue_key, source_language, target)
        if not script.source_lines:
            logger.info("Dialogue %s/%s has no source lines", source_language, dialogue_key)
            return []

        rows = compose_dialogue_cards(script, target, self.repository.resolve_audio_url)
        return [row.to_view(deck.id) for row in rows]

    def _persisted_views(self, deck, request_host: str, owner_id: Optional[int]) -> Tuple[str, List[CardView]]:
        cards = DeckStore.list_cards_ordered(deck.id)
        owner = deck.owner_id if deck.owner_id is not None else owner_id
        media_base = MediaInterface.resolve_media_base(owner, deck.name, cards) if cards else ''
        sanitize = not is_dialogue_deck(deck)

        views = []
        for card in cards:
            view = CardView.from_card(card)
            if sanitize:
                view.front_text, view.back_text = MediaInterface.rewrite_card_texts(
                    card.front_text, card.back_text, media_base, request_host
                )
            for field_name in ('front_audio_url', 'back_audio_url', 'front_video_url', 'back_video_url'):
                setattr(view, field_name, MediaInterface.prefix_media_url(getattr(card, field_name), request_host))
            views.append(view)
        return media_base, views

    @staticmethod
    def _arrange(views: List[CardView], media_base: str) -> List[CardView]:
        ordered = []
        for view, key in arrange_cards(views, media_base):
            view.ordering = key
            ordered.append(view)
        return ordered
