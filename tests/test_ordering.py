from linguadeck_app.modules.ordering.interface import (
    OrderingKey,
    arrange_cards,
    compare_ordering_keys,
    extract_media_base,
    extract_ordering_key,
    extract_video_timestamp_key,
)
from linguadeck_app.modules.ordering.logics.patterns import SCENE_TOKEN_RULES, classify
from linguadeck_app.modules.ordering.schemas import UNORDERED, SceneOnly, SeasonEpisode


def _ordered_texts(cards, media_base=None):
    return [card['front_text'] for card, _key in arrange_cards(cards, media_base)]


class TestVideoTimestampKey:
    def test_range_start_in_milliseconds(self):
        assert extract_video_timestamp_key('0.01.23.450-0.01.25.900_clip.mp4') == 83450

    def test_single_timestamp(self):
        assert extract_video_timestamp_key('/media/1.00.00.000.mp4') == 3600000

    def test_underscored_clock(self):
        assert extract_video_timestamp_key('00_01_23.mp4') == 83000

    def test_falls_back_to_long_number(self):
        assert extract_video_timestamp_key('clip_123456.mp4') == 123456

    def test_nothing_usable(self):
        assert extract_video_timestamp_key('intro.mp4') is None
        assert extract_video_timestamp_key('') is None


class TestExtractOrderingKey:
    def test_season_episode_token(self):
        key = extract_ordering_key({'front_text': 'Friends S01E02 - The Sonogram'})
        assert (key.season_number, key.episode_number) == (1, 2)
        assert key.season_episode_composite == 1002
        assert key.group_key == 'S1E2'

    def test_separate_season_and_episode_words(self):
        key = extract_ordering_key({'front_text': 'Season 2', 'notes': 'Episode 3'})
        assert key.season_episode_composite == 2003

    def test_dialogue_index_from_virtual_id(self):
        key = extract_ordering_key({'id': 'v_7_4', 'front_text': 'Hi'})
        assert key.dialogue_local_index == 4
        assert key.season_episode_composite is None

    def test_dialogue_index_from_line_audio(self):
        key = extract_ordering_key({'front_audio_url': '/audio/dialogues/en/cafe/line_12.mp3'})
        assert key.dialogue_local_index == 12

    def test_stored_video_key_is_used_without_video(self):
        key = extract_ordering_key({'front_text': 'x', 'video_order_key': 5000})
        assert key.video_timestamp_key == 5000

    def test_scene_token_beats_dialogue_index(self):
        key = extract_ordering_key({
            'id': 'v_1_9',
            'front_video_url': '/media/scene_3.mp4',
        })
        assert key.scene_order == 3
        assert key.dialogue_local_index == 9

    def test_episode_label_from_package_name(self):
        card = {'front_audio_url': 'http://localhost/uploads/apkg/1/friends_s01/extract/media/a.mp3'}
        assert extract_media_base(card) == '/uploads/apkg/1/friends_s01/extract/media'
        assert extract_ordering_key(card).episode_label == 'friends_s01'

    def test_hint_is_the_episode_label(self):
        key = extract_ordering_key({'hint': 'Pilot', 'front_text': 'x'})
        assert key.episode_label == 'Pilot'

    def test_objects_are_accepted(self):
        class Row:
            id = 3
            front_text = 'S02E01'
            back_text = ''

        key = extract_ordering_key(Row(), media_base='')
        assert key.season_episode_composite == 2001

    def test_to_dict_names(self):
        data = extract_ordering_key({'front_text': 'S01E01'}, arrival_index=5).to_dict()
        assert data['season_episode_order'] == 1001
        assert data['orig_index'] == 5
        assert data['display_index'] is None


class TestComparator:
    def test_missing_composite_sorts_last(self):
        with_episode = OrderingKey(original_arrival_index=1, season_episode_composite=1001)
        without = OrderingKey(original_arrival_index=0)
        assert compare_ordering_keys(with_episode, without) < 0
        assert compare_ordering_keys(without, with_episode) > 0

    def test_same_episode_uses_video_key(self):
        early = OrderingKey(original_arrival_index=1, season_episode_composite=1001, video_timestamp_key=100)
        late = OrderingKey(original_arrival_index=0, season_episode_composite=1001, video_timestamp_key=200)
        assert compare_ordering_keys(early, late) < 0

    def test_scene_compared_only_when_both_present(self):
        a = OrderingKey(original_arrival_index=1, season_episode_composite=1001, scene_order=5)
        b = OrderingKey(original_arrival_index=0, season_episode_composite=1001)
        assert compare_ordering_keys(a, b) > 0

    def test_arrival_order_breaks_ties(self):
        a = OrderingKey(original_arrival_index=0)
        b = OrderingKey(original_arrival_index=1)
        assert compare_ordering_keys(a, b) < 0
        assert compare_ordering_keys(a, a) == 0


class TestArrangeCards:
    def test_episodes_in_order(self):
        cards = [
            {'front_text': 'S01E02 second'},
            {'front_text': 'S01E01 first'},
        ]
        assert _ordered_texts(cards) == ['S01E01 first', 'S01E02 second']

    def test_video_timestamps_within_an_episode(self):
        cards = [
            {'front_text': 'S01E01 b', 'front_video_url': '/m/0.00.20.000-0.00.21.000.mp4'},
            {'front_text': 'S01E01 a', 'front_video_url': '/m/0.00.10.000-0.00.11.000.mp4'},
            {'front_text': 'loose'},
        ]
        assert _ordered_texts(cards) == ['S01E01 a', 'S01E01 b', 'loose']

    def test_plain_cards_keep_arrival_order(self):
        cards = [{'front_text': word} for word in ('gato', 'cão', 'rato')]
        assert _ordered_texts(cards) == ['gato', 'cão', 'rato']

    def test_dialogue_lines_follow_line_index(self):
        cards = [
            {'id': 'v_7_2', 'front_text': 'c'},
            {'id': 'v_7_0', 'front_text': 'a'},
            {'id': 'v_7_1', 'front_text': 'b'},
        ]
        assert _ordered_texts(cards) == ['a', 'b', 'c']

    def test_display_index_restarts_per_episode(self):
        cards = [
            {'front_text': 'S01E02 x'},
            {'front_text': 'S01E01 y', 'front_video_url': '/m/0.00.20.000.mp4'},
            {'front_text': 'S01E01 z', 'front_video_url': '/m/0.00.10.000.mp4'},
        ]
        arranged = arrange_cards(cards)
        assert [card['front_text'] for card, _ in arranged] == ['S01E01 z', 'S01E01 y', 'S01E02 x']
        assert [key.display_index for _, key in arranged] == [0, 1, 0]

    def test_arrival_index_is_position_in_input(self):
        arranged = arrange_cards([{'front_text': 'S01E02'}, {'front_text': 'S01E01'}])
        assert [key.original_arrival_index for _, key in arranged] == [1, 0]


def test_classify_returns_tagged_variants():
    assert classify(SCENE_TOKEN_RULES, 'scene_12') == SceneOnly(12)
    assert classify(SCENE_TOKEN_RULES, 'intro') is UNORDERED
    assert SeasonEpisode(None, 4).composite is None
