import warnings

import pytest
from sqlalchemy.exc import SAWarning

from linguadeck_app import db
from linguadeck_app.models import Card, Deck, DeckTags
from linguadeck_app.modules.decks.exceptions import (
    DialogueKeyUnresolvedError,
    DialogueSourceNotFoundError,
    NormalizeUnsupportedError,
)
from linguadeck_app.modules.decks.logics.target_spec import TargetSpec
from linguadeck_app.modules.decks.services.normalize_service import NormalizeService


def card_contents(deck_id):
    cards = Card.query.filter_by(deck_id=deck_id).order_by(Card.id).all()
    return [
        (card.front_text, card.back_text, card.front_audio_url, card.back_audio_url)
        for card in cards
    ]


@pytest.fixture
def deck(app, library, user):
    library.write_script('en', 'cafe', ['Hi', 'Bye'])
    library.write_script('pt', 'cafe', ['Oi', 'Tchau'])
    library.write_script('es', 'cafe', ['Hola', 'Adiós'])
    library.add_audio('en', 'cafe', 0)
    library.add_audio('es', 'cafe', 1, 'wav')
    deck = Deck(owner_id=user.user_id, name='Cafe (en → pt)', language='en',
                tags=DeckTags.dialogue('cafe', is_global=False).to_storage())
    db.session.add(deck)
    db.session.commit()
    return deck


class TestNormalize:
    def test_rebuilds_from_source(self, deck):
        result = NormalizeService().normalize(deck)

        assert result.to_dict() == {
            'deck_id': deck.id,
            'dialogue_key': 'cafe',
            'source_language': 'en',
            'target': 'pt',
            'cards_rebuilt': 2,
        }
        assert card_contents(deck.id) == [
            ('Hi', 'Oi', '/audio/dialogues/en/cafe/line_0.mp3', '/audio/dialogues/en/cafe/line_0.mp3'),
            ('Bye', 'Tchau', None, None),
        ]

    def test_running_twice_gives_the_same_cards(self, deck):
        NormalizeService().normalize(deck)
        first = card_contents(deck.id)
        NormalizeService().normalize(deck)
        assert card_contents(deck.id) == first
        assert Card.query.filter_by(deck_id=deck.id).count() == 2

    def test_loaded_cards_leave_the_session(self, deck):
        NormalizeService().normalize(deck)
        loaded = Card.query.filter_by(deck_id=deck.id).all()

        with warnings.catch_warnings():
            warnings.simplefilter('error', SAWarning)
            NormalizeService().normalize(deck)

        assert all(card not in db.session for card in loaded)
        assert [text for text, *_ in card_contents(deck.id)] == ['Hi', 'Bye']

    def test_scheduling_is_reset(self, deck):
        NormalizeService().normalize(deck)
        card = Card.query.filter_by(deck_id=deck.id).first()
        card.repetitions = 7
        card.interval_days = 30
        db.session.commit()

        NormalizeService().normalize(deck)

        for card in Card.query.filter_by(deck_id=deck.id):
            assert (card.repetitions, card.interval_days, card.ease_factor) == (0, 0, 2.5)
            assert card.last_reviewed is None

    def test_override_target(self, deck):
        result = NormalizeService().normalize(deck, TargetSpec.single('es'))
        assert result.target == 'es'
        assert [row[1] for row in card_contents(deck.id)] == ['Hola', 'Adiós']
        assert card_contents(deck.id)[1][3] == '/audio/dialogues/es/cafe/line_1.wav'
        # the stored name keeps its own target
        assert deck.name == 'Cafe (en → pt)'

    def test_all_languages(self, deck):
        result = NormalizeService().normalize(deck, TargetSpec.all_languages())
        assert result.target == 'ALL'
        assert card_contents(deck.id)[0][1] == 'ES: Hola\nPT: Oi'


class TestNormalizeErrors:
    def test_regular_deck_unsupported(self, app, user):
        deck = Deck(owner_id=user.user_id, name='Vocabulary', language='en')
        db.session.add(deck)
        db.session.commit()
        with pytest.raises(NormalizeUnsupportedError) as excinfo:
            NormalizeService().normalize(deck)
        assert excinfo.value.status_code == 400

    def test_unknown_dialogue(self, app, user):
        deck = Deck(owner_id=user.user_id, name='Airport (en → pt)', language='en')
        db.session.add(deck)
        db.session.commit()
        with pytest.raises(DialogueKeyUnresolvedError):
            NormalizeService().normalize(deck)

    def test_missing_source_keeps_existing_cards(self, deck, library):
        NormalizeService().normalize(deck)
        library.write_script('en', 'cafe', '# nothing left\n')

        with pytest.raises(DialogueSourceNotFoundError) as excinfo:
            NormalizeService().normalize(deck)

        assert excinfo.value.reason == 'missing_source:en/cafe.txt'
        assert excinfo.value.status_code == 404
        assert Card.query.filter_by(deck_id=deck.id).count() == 2
