"""
Ordering heuristic for card lists.

``extract_ordering_key`` is pure: it only looks at the card's text fields,
its media URLs and the media base of its deck. ``arrange_cards`` sorts a list
with :func:`compare_ordering_keys` and assigns a zero-based display index
that restarts at every episode boundary.
"""

import functools
import re
from collections.abc import Mapping
from typing import Any, List, Optional, Sequence, Tuple

from ..schemas import OrderingKey, SceneOnly, SeasonEpisode
from .patterns import (
    CHAPTER_TOKEN_RULE,
    DIALOGUE_ID_RULE,
    DIALOGUE_URL_RULES,
    EPISODE_TOKEN_RULE,
    EPISODE_URL_SEGMENT_RULE,
    LINE_NUMBER_REGEX,
    PACKAGE_NAME_REGEX,
    SCENE_NUMBER_REGEX,
    SCENE_TOKEN_RULES,
    SEASON_EPISODE_TEXT_RULES,
    SEASON_EPISODE_URL_RULES,
    SEASON_RULES,
    SHORT_NUMBER_REGEX,
    VIDEO_NUMBER_REGEX,
    VIDEO_TIMESTAMP_RULES,
    last_number,
    match_first,
    strip_extension,
)

AUDIO_FIRST = ('front_audio_url', 'back_audio_url', 'front_video_url', 'back_video_url')
VIDEO_FIRST = ('front_video_url', 'back_video_url', 'front_audio_url', 'back_audio_url')

_HOST_REGEX = re.compile(r'^https?://[^/]+', re.I)


def _field(card: Any, name: str) -> str:
    value = card.get(name) if isinstance(card, Mapping) else getattr(card, name, None)
    return '' if value is None else str(value)


def _basename(url: str) -> str:
    return (url or '').split('/')[-1]


def _joined(card: Any, names: Sequence[str]) -> str:
    return ' '.join(_field(card, name) for name in names)


def extract_media_base(card: Any) -> str:
    """Directory of the first media URL on the card, host stripped."""
    for name in VIDEO_FIRST:
        url = _field(card, name).strip()
        if not url:
            continue
        relative = _HOST_REGEX.sub('', url)
        return re.sub(r'/[^/]+$', '', relative)
    return ''


def _episode_label(card: Any, media_base: str) -> str:
    hint = _field(card, 'hint').strip()
    if hint:
        return hint
    match = PACKAGE_NAME_REGEX.search(media_base or '')
    return match.group(1) if match else ''


def _dialogue_index(card: Any) -> Optional[int]:
    hit = match_first([DIALOGUE_ID_RULE], _field(card, 'id'))
    if isinstance(hit, SceneOnly):
        return hit.n

    hit = match_first(DIALOGUE_URL_RULES, _joined(card, AUDIO_FIRST))
    if isinstance(hit, SceneOnly):
        return hit.n

    for name in AUDIO_FIRST:
        number = last_number(LINE_NUMBER_REGEX, strip_extension(_basename(_field(card, name))))
        if number is not None:
            return number
    return None


def _season_episode(card: Any, media_base: str, sources_text: str) -> Tuple[Optional[int], Optional[int]]:
    hit = match_first(SEASON_EPISODE_TEXT_RULES, sources_text)
    if isinstance(hit, SeasonEpisode):
        return hit.season, hit.episode

    episode_hit = match_first([EPISODE_TOKEN_RULE], sources_text)
    episode = episode_hit.episode if isinstance(episode_hit, SeasonEpisode) else None

    if episode is not None:
        for rule in SEASON_RULES:
            season = match_first([rule], sources_text)
            if season is not None:
                return season, episode

    # Mùa suy ra từ đường dẫn gói media (vd: .../Friends (Season 1)/extract/media) hoặc từ hint
    season_from_path = match_first(SEASON_RULES, media_base)
    season_from_hint = match_first(SEASON_RULES, _field(card, 'hint'))
    if episode is not None:
        if season_from_path is not None:
            return season_from_path, episode
        if season_from_hint is not None:
            return season_from_hint, episode

    url_text = _joined(card, VIDEO_FIRST)
    hit = match_first(SEASON_EPISODE_URL_RULES, url_text)
    if isinstance(hit, SeasonEpisode):
        return hit.season, hit.episode

    hit = match_first([EPISODE_URL_SEGMENT_RULE], url_text)
    if isinstance(hit, SeasonEpisode):
        season = season_from_path if season_from_path is not None else season_from_hint
        return season, hit.episode
    return None, None


def _episode_order(card: Any, sources_text: str, dialogue_index: Optional[int]) -> Optional[int]:
    hit = match_first(SEASON_EPISODE_TEXT_RULES[:1], sources_text)
    if isinstance(hit, SeasonEpisode):
        return hit.composite

    for rule in (EPISODE_TOKEN_RULE, CHAPTER_TOKEN_RULE):
        hit = match_first([rule], sources_text)
        if isinstance(hit, SeasonEpisode):
            return hit.episode

    for name in AUDIO_FIRST:
        match = SHORT_NUMBER_REGEX.search(_basename(_field(card, name)))
        if match:
            return int(match.group(0))
    return dialogue_index


def _scene_order(card: Any, episode_label: str, dialogue_index: Optional[int]) -> Optional[int]:
    candidates: List[int] = []
    for name in VIDEO_FIRST:
        base = strip_extension(_basename(_field(card, name)).strip())
        if not base:
            continue
        hit = match_first(SCENE_TOKEN_RULES, base)
        if isinstance(hit, SceneOnly):
            candidates.append(hit.n)
            continue
        number = last_number(SCENE_NUMBER_REGEX, base)
        if number is not None:
            candidates.append(number)

    hint_text = ' '.join([_field(card, 'hint'), _field(card, 'notes'), episode_label])
    for rule in SCENE_TOKEN_RULES:
        hit = match_first([rule], hint_text)
        if isinstance(hit, SceneOnly):
            candidates.append(hit.n)

    if candidates:
        return min(candidates)
    return dialogue_index


def extract_video_timestamp_key(filename: str) -> Optional[int]:
    """Milliseconds encoded in a clip filename, else its last long number."""
    base = strip_extension(_basename(filename))
    if not base:
        return None
    millis = match_first(VIDEO_TIMESTAMP_RULES, base)
    if millis is not None:
        return millis
    return last_number(VIDEO_NUMBER_REGEX, base)


def _video_key(card: Any) -> Optional[int]:
    video = _field(card, 'front_video_url') or _field(card, 'back_video_url')
    key = extract_video_timestamp_key(video) if video else None
    if key is not None:
        return key
    stored = card.get('video_order_key') if isinstance(card, Mapping) else getattr(card, 'video_order_key', None)
    return int(stored) if stored is not None else None


def extract_ordering_key(card: Any, media_base: Optional[str] = None, arrival_index: int = 0) -> OrderingKey:
    """
    Build the :class:`OrderingKey` of one card.

    ``card`` may be an ORM row, a card view or a plain mapping with the Card
    column names. When ``media_base`` is not given it is derived from the
    card's own media URLs.
    """
    if media_base is None:
        media_base = extract_media_base(card)

    episode_label = _episode_label(card, media_base)
    dialogue_index = _dialogue_index(card)
    sources_text = ' '.join([episode_label, _field(card, 'notes'), _field(card, 'front_text'), _field(card, 'back_text')])

    season, episode = _season_episode(card, media_base, sources_text)
    composite = season * 1000 + episode if season is not None and episode is not None else None

    return OrderingKey(
        original_arrival_index=arrival_index,
        season_number=season,
        episode_number=episode,
        season_episode_composite=composite,
        video_timestamp_key=_video_key(card),
        scene_order=_scene_order(card, episode_label, dialogue_index),
        dialogue_local_index=dialogue_index,
        episode_label=episode_label,
        episode_order=_episode_order(card, sources_text, dialogue_index),
    )


def _compare_missing_last(a: Optional[int], b: Optional[int]) -> int:
    if a is None and b is None:
        return 0
    if a is None:
        return 1
    if b is None:
        return -1
    return (a > b) - (a < b)


def _compare_present(a: Optional[int], b: Optional[int]) -> int:
    if a is None or b is None:
        return 0
    return (a > b) - (a < b)


def compare_ordering_keys(a: OrderingKey, b: OrderingKey) -> int:
    result = _compare_missing_last(a.season_episode_composite, b.season_episode_composite)
    if result:
        return result

    # Cùng tập: theo mốc thời gian video, rồi cảnh, rồi chỉ số lời thoại
    if a.season_episode_composite is not None and b.season_episode_composite is not None:
        for result in (
            _compare_missing_last(a.video_timestamp_key, b.video_timestamp_key),
            _compare_present(a.scene_order, b.scene_order),
            _compare_present(a.dialogue_local_index, b.dialogue_local_index),
        ):
            if result:
                return result

    result = _compare_missing_last(a.episode_order, b.episode_order)
    if result:
        return result
    return a.original_arrival_index - b.original_arrival_index


ordering_sort_key = functools.cmp_to_key(compare_ordering_keys)


def assign_display_indexes(keys: Sequence[OrderingKey]) -> None:
    """Zero-based counter that restarts whenever the group key changes."""
    last_group = None
    counter = 0
    for key in keys:
        group = key.group_key
        if group != last_group:
            last_group = group
            counter = 0
        key.display_index = counter
        counter += 1


def arrange_cards(cards: Sequence[Any], media_base: Optional[str] = None) -> List[Tuple[Any, OrderingKey]]:
    """Return ``(card, key)`` pairs in display order with display indexes set."""
    keyed = [
        (card, extract_ordering_key(card, media_base, arrival_index=index))
        for index, card in enumerate(cards)
    ]
    keyed.sort(key=lambda pair: ordering_sort_key(pair[1]))
    assign_display_indexes([key for _card, key in keyed])
    return keyed
