"""
Naming conventions recognised by the ordering heuristic.

Each table is an ordered list of :class:`PatternRule`; the first rule whose
pattern matches and whose extractor returns a value wins. Extractors return
one of the tagged variants from ``..schemas`` (or plain milliseconds for the
video timestamp table).
"""

import re
from typing import Any, Callable, Iterable, NamedTuple, Optional, Pattern

from ..schemas import OrderingMatch, SceneOnly, SeasonEpisode, UNORDERED


class PatternRule(NamedTuple):
    pattern: Pattern
    extract: Callable[['re.Match'], Any]


def _season_episode(match) -> SeasonEpisode:
    return SeasonEpisode(int(match.group(1)), int(match.group(2)))


def _episode_only(match) -> SeasonEpisode:
    return SeasonEpisode(None, int(match.group(1)))


def _position(match) -> SceneOnly:
    return SceneOnly(int(match.group(1)))


def _timestamp_ms(match) -> int:
    hours, minutes, seconds = (int(match.group(i) or 0) for i in (1, 2, 3))
    millis = int(match.group(4) or 0)
    return hours * 3600000 + minutes * 60000 + seconds * 1000 + millis


# S01E02 / 1x02 / T1E02 (Temporada/Episódio)
SEASON_EPISODE_TEXT_RULES = [
    PatternRule(re.compile(r'S(\d+)\s*E(\d+)', re.I), _season_episode),
    PatternRule(re.compile(r'(\d{1,2})x(\d{1,2})', re.I), _season_episode),
    PatternRule(re.compile(r'T(\d{1,2})\s*E(\d{1,3})', re.I), _season_episode),
]

SEASON_EPISODE_URL_RULES = [
    PatternRule(re.compile(r'S(\d{1,2})\s*E(\d{1,3})', re.I), _season_episode),
    PatternRule(re.compile(r'(\d{1,2})x(\d{1,2})', re.I), _season_episode),
    PatternRule(re.compile(r'T(\d{1,2})\s*E(\d{1,3})', re.I), _season_episode),
]

# "Season 2" / "Temporada 2", combined with a separate episode token
SEASON_RULES = [
    PatternRule(re.compile(r'Season\s*(\d+)', re.I), lambda m: int(m.group(1))),
    PatternRule(re.compile(r'Temporada\s*(\d+)', re.I), lambda m: int(m.group(1))),
]

EPISODE_TOKEN_RULE = PatternRule(
    re.compile(r'\b(?:Ep|Episódio|Episode)\s*[:#-]?\s*(\d{1,3})', re.I), _episode_only
)

# E03 / Episode03 as a path or filename segment
EPISODE_URL_SEGMENT_RULE = PatternRule(
    re.compile(r'(?:^|[/_\-])E(?:pisode)?\s*(\d{1,3})(?=[/_\-.\s]|$)', re.I), _episode_only
)

CHAPTER_TOKEN_RULE = PatternRule(
    re.compile(r'\bCap(?:ítulo)?\s*[:#-]?\s*(\d{1,3})', re.I), _episode_only
)

SCENE_TOKEN_RULES = [
    PatternRule(re.compile(r'\b(?:scene|cena)[_\s-]?(\d{1,3})\b', re.I), _position),
    PatternRule(re.compile(r'\bsc[_\s-]?(\d{1,3})\b', re.I), _position),
    PatternRule(re.compile(r'\bclip[_\s-]?(\d{1,3})\b', re.I), _position),
]

DIALOGUE_ID_RULE = PatternRule(re.compile(r'^v_\d+_(\d+)$'), _position)

DIALOGUE_URL_RULES = [
    PatternRule(re.compile(r'(?:^|[\\/._-])line[_-]?(\d{1,6})(?=[\\/._-]|\b)', re.I), _position),
    PatternRule(re.compile(r'(?:^|[\\/._-])dialogue[_-]?(\d{1,6})(?=[\\/._-]|\b)', re.I), _position),
]

# 0.01.23.450-0.01.25.900 (range start) / 0.01.23.450 / 00_01_23[_450]
VIDEO_TIMESTAMP_RULES = [
    PatternRule(re.compile(r'(\d+)\.(\d{2})\.(\d{2})\.(\d{3})-(\d+)\.(\d{2})\.(\d{2})\.(\d{3})'), _timestamp_ms),
    PatternRule(re.compile(r'(\d+)\.(\d{2})\.(\d{2})\.(\d{3})'), _timestamp_ms),
    PatternRule(re.compile(r'^(\d{1,2})[_-](\d{1,2})[_-](\d{1,2})(?:[_-](\d{1,6}))?$'), _timestamp_ms),
]

EXTENSION_REGEX = re.compile(r'\.[a-z0-9]+$', re.I)
VIDEO_NUMBER_REGEX = re.compile(r'\d{3,12}')
SCENE_NUMBER_REGEX = re.compile(r'\d{1,4}')
LINE_NUMBER_REGEX = re.compile(r'\d{1,6}')
SHORT_NUMBER_REGEX = re.compile(r'\d{1,3}')
PACKAGE_NAME_REGEX = re.compile(r'/uploads/apkg/[^/]+/([^/]+)/extract/media', re.I)


def match_first(rules: Iterable[PatternRule], text: str) -> Optional[Any]:
    """Apply ``rules`` in order to ``text``; return the first extracted value."""
    if not text:
        return None
    for rule in rules:
        match = rule.pattern.search(text)
        if not match:
            continue
        try:
            value = rule.extract(match)
        except (TypeError, ValueError):
            continue
        if value is not None:
            return value
    return None


def classify(rules: Iterable[PatternRule], text: str) -> OrderingMatch:
    """Like :func:`match_first` but returns :data:`UNORDERED` on a miss."""
    value = match_first(rules, text)
    return UNORDERED if value is None else value


def strip_extension(filename: str) -> str:
    return EXTENSION_REGEX.sub('', filename or '')


def last_number(regex: Pattern, text: str) -> Optional[int]:
    numbers = regex.findall(text or '')
    return int(numbers[-1]) if numbers else None
