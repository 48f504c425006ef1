"""Database models package for LinguaDeck."""

from ..db_instance import db

from .deck import Card, Deck, DeckTags
from .user import User

__all__ = [
    'db',
    'Card',
    'Deck',
    'DeckTags',
    'User',
]
