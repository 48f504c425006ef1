import pytest

from linguadeck_app import db
from linguadeck_app.models import Card, Deck, User

API = '/api/flashcards'


def login(client, user_id):
    with client.session_transaction() as session:
        session['_user_id'] = str(user_id)
        session['_fresh'] = True


@pytest.fixture
def seeded(app, library, user):
    library.write_script('en', 'cafe', ['Hi', 'Bye'])
    library.write_script('pt', 'cafe', ['Oi', 'Tchau'])
    library.write_script('es', 'cafe', ['Hola', 'Adiós'])

    other = User(username='other', email='other@example.com')
    other.set_password('password123')
    db.session.add(other)
    db.session.flush()

    uid = user.user_id
    package = library.add_package(uid, 'friends')
    media = f'/uploads/apkg/{uid}/friends/extract/media'

    own = Deck(owner_id=uid, name='Friends', language='en')
    foreign = Deck(owner_id=other.user_id, name='Secret', language='en')
    db.session.add_all([own, foreign])
    db.session.flush()
    db.session.add_all([
        Card(deck_id=own.id, front_text='S01E02 b', back_text='b', front_audio_url=f'{media}/b.mp3'),
        Card(deck_id=own.id, front_text='S01E01 a', back_text='<img src="a.jpg">'),
    ])
    db.session.commit()
    return {
        'user_id': uid,
        'own_id': own.id,
        'foreign_id': foreign.id,
        'package': package,
        'media': media,
    }


def global_dialogue_deck(client):
    decks = client.get(f'{API}/decks').get_json()['decks']
    return next(deck for deck in decks if deck['owner_id'] is None)


class TestAuthentication:
    @pytest.mark.parametrize('method, path', [
        ('get', '/decks'),
        ('get', '/decks/1/cards'),
        ('post', '/decks/1/normalize'),
        ('post', '/decks/sync-all'),
        ('delete', '/decks/1'),
        ('post', '/uploads/apkg/cleanup'),
        ('post', '/import/dialogue'),
        ('post', '/import/all'),
    ])
    def test_requires_login(self, client, method, path):
        response = getattr(client, method)(f'{API}{path}')
        assert response.status_code == 401
        assert response.get_json()['code'] == 'UNAUTHENTICATED'


class TestListDecks:
    def test_lists_own_and_global_decks(self, client, seeded):
        login(client, seeded['user_id'])
        response = client.get(f'{API}/decks')

        assert response.status_code == 200
        payload = response.get_json()
        assert payload['success'] is True
        names = {deck['name'] for deck in payload['decks']}
        assert names == {'Friends', 'Cafe (en → pt)'}
        assert all(deck['display_name'] == deck['name'] for deck in payload['decks'])

    def test_display_name_follows_header(self, client, seeded):
        login(client, seeded['user_id'])
        response = client.get(f'{API}/decks', headers={'X-Target-Lang': 'es'})
        display = {deck['name']: deck['display_name'] for deck in response.get_json()['decks']}
        assert display == {'Friends': 'Friends', 'Cafe (en → pt)': 'Cafe (EN → ES)'}


class TestDeckCards:
    def test_dialogue_cards(self, client, seeded):
        login(client, seeded['user_id'])
        deck = global_dialogue_deck(client)

        response = client.get(f'{API}/decks/{deck["id"]}/cards')

        assert response.status_code == 200
        cards = response.get_json()['cards']
        assert [(card['front_text'], card['back_text']) for card in cards] == [('Hi', 'Oi'), ('Bye', 'Tchau')]
        assert cards[0]['id'] == f'v_{deck["id"]}_0'

    def test_query_override(self, client, seeded):
        login(client, seeded['user_id'])
        deck = global_dialogue_deck(client)
        cards = client.get(f'{API}/decks/{deck["id"]}/cards?targetLang=ALL').get_json()['cards']
        assert cards[0]['back_text'] == 'ES: Hola\nPT: Oi'

    def test_imported_cards_are_ordered_and_absolute(self, client, seeded):
        login(client, seeded['user_id'])
        cards = client.get(f'{API}/decks/{seeded["own_id"]}/cards').get_json()['cards']

        assert [card['front_text'] for card in cards] == ['S01E01 a', 'S01E02 b']
        assert cards[0]['back_text'] == f'<img src="http://localhost{seeded["media"]}/a.jpg">'
        assert cards[1]['front_audio_url'] == f'http://localhost{seeded["media"]}/b.mp3'
        assert cards[0]['ordering']['season_episode_order'] == 1001
        assert [card['display_index'] for card in cards] == [0, 0]

    def test_foreign_deck_forbidden(self, client, seeded):
        login(client, seeded['user_id'])
        response = client.get(f'{API}/decks/{seeded["foreign_id"]}/cards')
        assert response.status_code == 403

    def test_missing_deck(self, client, seeded):
        login(client, seeded['user_id'])
        response = client.get(f'{API}/decks/9999/cards')
        assert response.status_code == 404
        assert response.get_json()['code'] == 'NOT_FOUND'

    def test_unresolved_dialogue(self, client, seeded):
        deck = Deck(owner_id=seeded['user_id'], name='Airport (en → pt)', language='en')
        db.session.add(deck)
        db.session.commit()
        login(client, seeded['user_id'])

        response = client.get(f'{API}/decks/{deck.id}/cards')

        assert response.status_code == 400
        assert response.get_json()['code'] == 'DIALOGUE_KEY_UNRESOLVED'


class TestNormalizeAndSync:
    def test_normalize_dialogue_deck(self, client, seeded):
        login(client, seeded['user_id'])
        deck = global_dialogue_deck(client)

        response = client.post(f'{API}/decks/{deck["id"]}/normalize', headers={'X-Target-Lang': 'es'})

        assert response.status_code == 200
        payload = response.get_json()
        assert payload['cards_rebuilt'] == 2
        assert payload['target'] == 'es'
        assert Card.query.filter_by(deck_id=deck['id']).count() == 2

    def test_normalize_regular_deck(self, client, seeded):
        login(client, seeded['user_id'])
        response = client.post(f'{API}/decks/{seeded["own_id"]}/normalize')
        assert response.status_code == 400
        assert response.get_json()['code'] == 'DECK_NORMALIZE_UNSUPPORTED'

    def test_sync_all(self, client, seeded):
        login(client, seeded['user_id'])
        response = client.post(f'{API}/decks/sync-all')

        assert response.status_code == 200
        payload = response.get_json()
        assert payload['synced'] == 1
        assert payload['results'][0]['status'] == 'ok'
        assert payload['results'][0]['detail'] == {'cards_rebuilt': 2, 'target': 'pt'}


class TestDeleteAndCleanup:
    def test_delete_own_deck_removes_its_media(self, client, seeded):
        login(client, seeded['user_id'])
        response = client.delete(f'{API}/decks/{seeded["own_id"]}')

        assert response.status_code == 200
        payload = response.get_json()
        assert payload['deck_id'] == seeded['own_id']
        assert payload['removed_media'] == [f'/uploads/apkg/{seeded["user_id"]}/friends']
        assert db.session.get(Deck, seeded['own_id']) is None
        assert Card.query.filter_by(deck_id=seeded['own_id']).count() == 0
        assert not seeded['package'].exists()

    def test_global_and_foreign_decks_cannot_be_deleted(self, client, seeded):
        login(client, seeded['user_id'])
        deck = global_dialogue_deck(client)
        assert client.delete(f'{API}/decks/{deck["id"]}').status_code == 403
        assert client.delete(f'{API}/decks/{seeded["foreign_id"]}').status_code == 403

    def test_cleanup_orphan_packages(self, client, seeded, library):
        orphan = library.add_package(seeded['user_id'], 'orphan')
        login(client, seeded['user_id'])

        response = client.post(f'{API}/uploads/apkg/cleanup')

        assert response.status_code == 200
        payload = response.get_json()
        assert payload['removed'] == [f'/uploads/apkg/{seeded["user_id"]}/orphan']
        assert payload['kept'] == [{'base': 'friends', 'refs': 1}]
        assert not orphan.exists()
        assert seeded['package'].exists()


class TestImportDialogue:
    def test_import_creates_owned_deck(self, client, seeded):
        login(client, seeded['user_id'])
        response = client.post(f'{API}/import/dialogue', json={'dialogueKey': 'cafe', 'targetLang': 'es'})

        assert response.status_code == 201
        payload = response.get_json()
        assert payload['deck']['name'] == 'Cafe (en → es)'
        assert payload['created_cards'] == 2
        deck = db.session.get(Deck, payload['deck']['id'])
        assert deck.owner_id == seeded['user_id']

        cards = client.get(f"{API}/decks/{deck.id}/cards").get_json()['cards']
        assert [card['back_text'] for card in cards] == ['Hola', 'Adiós']
        assert all(isinstance(card['id'], int) for card in cards)

    @pytest.mark.parametrize('body, code', [
        ({'targetLang': 'pt'}, 'DIALOGUE_KEY_REQUIRED'),
        ({'dialogueKey': 'cafe'}, 'TARGET_LANG_REQUIRED'),
    ])
    def test_bad_request(self, client, seeded, body, code):
        login(client, seeded['user_id'])
        response = client.post(f'{API}/import/dialogue', json=body)
        assert response.status_code == 400
        assert response.get_json()['code'] == code

    def test_missing_dialogue(self, client, seeded):
        login(client, seeded['user_id'])
        response = client.post(f'{API}/import/dialogue', json={'dialogueKey': 'ghost', 'targetLang': 'pt'})
        assert response.status_code == 404
        assert response.get_json()['code'] == 'DIALOGUE_FILE_NOT_FOUND'

    def test_import_all(self, client, seeded):
        login(client, seeded['user_id'])
        response = client.post(f'{API}/import/all', json={'includeAllTranslations': True})

        assert response.status_code == 201
        decks = response.get_json()['decks']
        assert [deck['name'] for deck in decks] == ['Cafe (en → ALL)']
        assert decks[0]['created_cards'] == 2

        again = client.post(f'{API}/import/all', json={'includeAllTranslations': True})
        assert again.get_json()['decks'] == []
