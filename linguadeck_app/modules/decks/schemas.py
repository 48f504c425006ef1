# File: linguadeck_app/modules/decks/schemas.py
"""DTOs for decks module."""

import datetime
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Union

from linguadeck_app.models.deck import DEFAULT_EASE_FACTOR
from linguadeck_app.modules.ordering.interface import OrderingKey


def _iso(value) -> Optional[str]:
    if isinstance(value, (datetime.date, datetime.datetime)):
        return value.isoformat()
    return value


@dataclass
class CardView:
    """
    One card as returned to clients. Persisted cards keep their integer id;
    synthesized cards use ``v_<deck_id>_<line_index>``.
    """
    id: Union[int, str]
    deck_id: int
    front_text: str
    back_text: str
    front_audio_url: Optional[str] = None
    front_video_url: Optional[str] = None
    back_audio_url: Optional[str] = None
    back_video_url: Optional[str] = None
    hint: Optional[str] = None
    notes: Optional[str] = None
    ease_factor: Optional[float] = None
    interval_days: Optional[int] = None
    repetitions: Optional[int] = None
    due_date: Optional[datetime.date] = None
    last_reviewed: Optional[datetime.datetime] = None
    video_order_key: Optional[int] = None
    ordering: Optional[OrderingKey] = None

    @property
    def is_virtual(self) -> bool:
        return isinstance(self.id, str)

    @classmethod
    def from_card(cls, card) -> 'CardView':
        return cls(
            id=card.id,
            deck_id=card.deck_id,
            front_text=card.front_text or '',
            back_text=card.back_text or '',
            front_audio_url=card.front_audio_url,
            front_video_url=card.front_video_url,
            back_audio_url=card.back_audio_url,
            back_video_url=card.back_video_url,
            hint=card.hint,
            notes=card.notes,
            ease_factor=card.ease_factor,
            interval_days=card.interval_days,
            repetitions=card.repetitions,
            due_date=card.due_date,
            last_reviewed=card.last_reviewed,
            video_order_key=card.video_order_key,
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'deck_id': self.deck_id,
            'front_text': self.front_text,
            'back_text': self.back_text,
            'front_audio_url': self.front_audio_url,
            'front_video_url': self.front_video_url,
            'back_audio_url': self.back_audio_url,
            'back_video_url': self.back_video_url,
            'hint': self.hint,
            'notes': self.notes,
            'video_order_key': self.video_order_key,
        }
        if not self.is_virtual:
            data.update({
                'ease_factor': self.ease_factor,
                'interval_days': self.interval_days,
                'repetitions': self.repetitions,
                'due_date': _iso(self.due_date),
                'last_reviewed': _iso(self.last_reviewed),
            })
        if self.ordering is not None:
            data['ordering'] = self.ordering.to_dict()
            data['display_index'] = self.ordering.display_index
        return data


@dataclass
class DialogueCardFields:
    """Text and audio of one dialogue line, shared by synthesized and materialized cards."""
    line_index: int
    front_text: str
    back_text: str
    front_audio_url: Optional[str] = None
    back_audio_url: Optional[str] = None

    def to_view(self, deck_id: int) -> CardView:
        return CardView(
            id=f"v_{deck_id}_{self.line_index}",
            deck_id=deck_id,
            front_text=self.front_text,
            back_text=self.back_text,
            front_audio_url=self.front_audio_url,
            back_audio_url=self.back_audio_url,
        )

    def to_card_kwargs(self, deck_id: int) -> Dict[str, Any]:
        """Column values for a fresh card with default scheduling."""
        return {
            'deck_id': deck_id,
            'front_text': self.front_text,
            'back_text': self.back_text,
            'front_audio_url': self.front_audio_url,
            'back_audio_url': self.back_audio_url,
            'ease_factor': DEFAULT_EASE_FACTOR,
            'interval_days': 0,
            'repetitions': 0,
            'due_date': datetime.date.today(),
            'last_reviewed': None,
        }


@dataclass
class SyncResultDTO:
    """Outcome of one deck inside a SyncAll batch."""
    item_id: int
    status: str  # 'ok', 'skipped', 'error'
    detail: Optional[Any] = None

    def to_dict(self) -> dict:
        return {'item_id': self.item_id, 'status': self.status, 'detail': self.detail}


@dataclass
class ReconcileReport:
    """Mutations performed by one reconcile pass."""
    created: List[str] = field(default_factory=list)  # dialogue keys
    renamed: List[Dict[str, Any]] = field(default_factory=list)  # {'deck_id', 'old', 'new'}
    deleted: List[int] = field(default_factory=list)  # deck ids whose key vanished
    duplicates_removed: List[int] = field(default_factory=list)
    retagged: List[int] = field(default_factory=list)  # untagged decks matched by name
    errors: List[Dict[str, Any]] = field(default_factory=list)  # {'dialogue_key', 'error'}

    @property
    def mutation_count(self) -> int:
        return (len(self.created) + len(self.renamed) + len(self.deleted)
                + len(self.duplicates_removed) + len(self.retagged))

    def to_dict(self) -> dict:
        data = asdict(self)
        data['mutations'] = self.mutation_count
        return data


@dataclass
class NormalizeResult:
    """Outcome of materializing one dialogue deck."""
    deck_id: int
    dialogue_key: str
    source_language: str
    target: Optional[str]  # language code, 'ALL' or None
    cards_rebuilt: int

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ImportResult:
    """A user-owned dialogue deck created (or refreshed) by an import."""
    deck_id: int
    name: str
    dialogue_key: str
    created_cards: int
    reused: bool = False

    def to_dict(self) -> dict:
        return asdict(self)
