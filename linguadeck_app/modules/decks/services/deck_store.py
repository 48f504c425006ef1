# File: linguadeck_app/modules/decks/services/deck_store.py
# Mục đích: Truy vấn và ghi Deck/Card; mọi thao tác đều trả về hàng ORM.

import logging
from typing import Iterable, List, Optional

from sqlalchemy import func, or_

from linguadeck_app.core.error_handlers import AuthorizationError, NotFoundError
from linguadeck_app.models import Card, Deck, DeckTags, db

logger = logging.getLogger(__name__)

# Sorts cards without a video key after every keyed card
MAX_ORDER_KEY = 9223372036854775807


class DeckStore:
    """Parameterized access to the deck and card tables."""

    # ------------------------------------------------------------------
    # Decks
    # ------------------------------------------------------------------
    @staticmethod
    def get_deck(deck_id: int) -> Deck:
        deck = db.session.get(Deck, deck_id)
        if deck is None:
            raise NotFoundError('Deck not found', resource='deck')
        return deck

    @staticmethod
    def get_accessible_deck(deck_id: int, user_id: int) -> Deck:
        """Readable decks: global ones and those owned by ``user_id``."""
        deck = DeckStore.get_deck(deck_id)
        if deck.owner_id is not None and deck.owner_id != user_id:
            raise AuthorizationError('Deck does not belong to the user')
        return deck

    @staticmethod
    def get_owned_deck(deck_id: int, user_id: int) -> Deck:
        """Writable decks: only those owned by ``user_id``; global decks are read-only."""
        deck = DeckStore.get_deck(deck_id)
        if deck.owner_id is None:
            raise AuthorizationError('Global decks cannot be modified by users')
        if deck.owner_id != user_id:
            raise AuthorizationError('Deck does not belong to the user')
        return deck

    @staticmethod
    def list_visible_decks(user_id: int) -> List[Deck]:
        return (
            Deck.query
            .filter(or_(Deck.owner_id == user_id, Deck.owner_id.is_(None)))
            .order_by(Deck.updated_at.desc(), Deck.id.desc())
            .all()
        )

    @staticmethod
    def list_global_decks() -> List[Deck]:
        return Deck.query.filter(Deck.owner_id.is_(None)).order_by(Deck.id).all()

    @staticmethod
    def find_owned_deck_by_name(owner_id: int, name: str) -> Optional[Deck]:
        return (
            Deck.query
            .filter(Deck.owner_id == owner_id, Deck.name == name)
            .order_by(Deck.id)
            .first()
        )

    @staticmethod
    def create_dialogue_deck(name: str, dialogue_key: str, source_language: str,
                             description: Optional[str] = None, owner_id: Optional[int] = None) -> Deck:
        """Global deck when ``owner_id`` is None; only global decks carry the ``global`` tag."""
        deck = Deck(
            owner_id=owner_id,
            name=name,
            description=description,
            language=source_language,
            tags=DeckTags.dialogue(dialogue_key, is_global=owner_id is None).to_storage(),
        )
        db.session.add(deck)
        db.session.flush()
        return deck

    @staticmethod
    def rename_deck(deck: Deck, name: str) -> None:
        deck.name = name

    @staticmethod
    def retag_dialogue_deck(deck: Deck, dialogue_key: str) -> None:
        deck.tags = DeckTags.dialogue(dialogue_key, is_global=deck.is_global).to_storage()

    @staticmethod
    def touch(deck: Deck) -> None:
        deck.updated_at = func.now()

    @staticmethod
    def delete_deck(deck: Deck) -> None:
        """Delete the deck's cards, then the deck."""
        DeckStore.delete_cards(deck.id)
        db.session.delete(deck)

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------
    @staticmethod
    def list_cards_ordered(deck_id: int) -> List[Card]:
        """Cards by video key (missing keys last), then id."""
        return (
            Card.query
            .filter(Card.deck_id == deck_id)
            .order_by(func.coalesce(Card.video_order_key, MAX_ORDER_KEY).asc(), Card.id.asc())
            .all()
        )

    @staticmethod
    def count_cards(deck_id: int) -> int:
        return Card.query.filter(Card.deck_id == deck_id).count()

    @staticmethod
    def delete_cards(deck_id: int) -> int:
        return Card.query.filter(Card.deck_id == deck_id).delete(synchronize_session='fetch')

    @staticmethod
    def replace_cards(deck: Deck, rows: Iterable[dict]) -> int:
        """Delete every card of ``deck`` and insert ``rows`` (column mappings)."""
        DeckStore.delete_cards(deck.id)
        created = 0
        for row in rows:
            db.session.add(Card(**row))
            created += 1
        return created
