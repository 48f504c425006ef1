"""Deck and card models."""

from __future__ import annotations

import datetime
import json
from dataclasses import dataclass
from typing import Any, Optional

from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from ..db_instance import db

DIALOGUE_KIND = 'dialogue'
GLOBAL_SCOPE = 'global'

DEFAULT_EASE_FACTOR = 2.5


@dataclass(frozen=True)
class DeckTags:
    """Typed view over the ``tags`` column of a deck.

    Stored tags come in three historical shapes: a JSON list
    ``["dialogue", <key>, "global"]``, the same list serialized as a string,
    or a mapping ``{"kind", "dialogueKey", "scope"}``.
    """

    kind: Optional[str] = None
    dialogue_key: Optional[str] = None
    scope: Optional[str] = None

    @property
    def is_dialogue(self) -> bool:
        return self.kind == DIALOGUE_KIND

    @property
    def is_global(self) -> bool:
        return self.scope == GLOBAL_SCOPE

    @classmethod
    def parse(cls, value: Any) -> 'DeckTags':
        if value is None or value == '':
            return cls()
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return cls()
        if isinstance(value, dict):
            kind = value.get('kind')
            key = value.get('dialogueKey') or value.get('dialogue_key')
            return cls(
                kind=str(kind) if kind else None,
                dialogue_key=str(key) if key else None,
                scope=value.get('scope') or None,
            )
        if isinstance(value, (list, tuple)):
            items = [str(item) for item in value if item is not None]
            kind = DIALOGUE_KIND if DIALOGUE_KIND in items else None
            key = None
            if kind and len(items) > 1 and items[1] not in (DIALOGUE_KIND, GLOBAL_SCOPE):
                key = items[1]
            scope = GLOBAL_SCOPE if GLOBAL_SCOPE in items else None
            return cls(kind=kind, dialogue_key=key, scope=scope)
        return cls()

    @classmethod
    def dialogue(cls, dialogue_key: str, is_global: bool = True) -> 'DeckTags':
        return cls(kind=DIALOGUE_KIND, dialogue_key=dialogue_key, scope=GLOBAL_SCOPE if is_global else None)

    def to_storage(self) -> list[str]:
        """Serialize to the legacy list shape."""
        result: list[str] = []
        if self.kind:
            result.append(self.kind)
        if self.dialogue_key:
            result.append(self.dialogue_key)
        if self.scope:
            result.append(self.scope)
        return result


class Deck(db.Model):
    """A flashcard deck. ``owner_id`` is NULL for global decks."""

    __tablename__ = 'decks'

    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('users.user_id'), nullable=True, index=True)
    name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    language = db.Column(db.String(16), nullable=True)
    tags = db.Column(JSON, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    cards = db.relationship('Card', backref='deck', lazy='dynamic', passive_deletes=True)

    @property
    def deck_tags(self) -> DeckTags:
        return DeckTags.parse(self.tags)

    @property
    def is_global(self) -> bool:
        return self.owner_id is None

    @property
    def source_language(self) -> str:
        return (self.language or 'en').strip().lower()

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'owner_id': self.owner_id,
            'name': self.name,
            'description': self.description,
            'language': self.language,
            'tags': self.deck_tags.to_storage() if self.deck_tags.kind else (self.tags or []),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Deck {self.id}: {self.name}>"


class Card(db.Model):
    """A persisted flashcard. Scheduling columns are opaque to the dialogue engine."""

    __tablename__ = 'cards'
    __table_args__ = (
        db.Index('idx_cards_video_order', 'deck_id', 'video_order_key'),
    )

    id = db.Column(db.Integer, primary_key=True)
    deck_id = db.Column(db.Integer, db.ForeignKey('decks.id', ondelete='CASCADE'), nullable=False, index=True)
    front_text = db.Column(db.Text, nullable=False, default='')
    back_text = db.Column(db.Text, nullable=False, default='')
    front_audio_url = db.Column(db.String(1024))
    front_video_url = db.Column(db.String(1024))
    back_audio_url = db.Column(db.String(1024))
    back_video_url = db.Column(db.String(1024))
    hint = db.Column(db.Text)
    notes = db.Column(db.Text)

    ease_factor = db.Column(db.Float, default=DEFAULT_EASE_FACTOR, nullable=False)
    interval_days = db.Column(db.Integer, default=0, nullable=False)
    repetitions = db.Column(db.Integer, default=0, nullable=False)
    due_date = db.Column(db.Date, default=datetime.date.today)
    last_reviewed = db.Column(db.DateTime(timezone=True), nullable=True)

    video_order_key = db.Column(db.BigInteger, nullable=True)
    created_at = db.Column(db.DateTime(timezone=True), server_default=func.now())
    updated_at = db.Column(db.DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Card {self.id} deck={self.deck_id}>"
