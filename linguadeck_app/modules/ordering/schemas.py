# File: linguadeck_app/modules/ordering/schemas.py
"""Value types produced by the ordering heuristic."""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class SeasonEpisode:
    """A season/episode hit. ``season`` is ``None`` for episode-only hits."""
    season: Optional[int]
    episode: int

    @property
    def composite(self) -> Optional[int]:
        if self.season is None:
            return None
        return self.season * 1000 + self.episode


@dataclass(frozen=True)
class SceneOnly:
    """A position inside an episode (scene, clip or line number)."""
    n: int


@dataclass(frozen=True)
class Unordered:
    """No ordering information."""


UNORDERED = Unordered()

OrderingMatch = Union[SeasonEpisode, SceneOnly, Unordered]


@dataclass
class OrderingKey:
    """Everything the comparator needs about one card."""
    original_arrival_index: int
    season_number: Optional[int] = None
    episode_number: Optional[int] = None
    season_episode_composite: Optional[int] = None
    video_timestamp_key: Optional[int] = None
    scene_order: Optional[int] = None
    dialogue_local_index: Optional[int] = None
    episode_label: str = ''
    episode_order: Optional[int] = None
    display_index: Optional[int] = None

    @property
    def group_key(self) -> str:
        """Key whose change restarts display numbering."""
        if self.season_number is not None and self.episode_number is not None:
            return f"S{self.season_number}E{self.episode_number}"
        if self.episode_label:
            return f"L:{self.episode_label.strip()}"
        if self.episode_order is not None:
            return f"EO:{self.episode_order}"
        return '__none__'

    def to_dict(self) -> dict:
        return {
            'season_number': self.season_number,
            'episode_number': self.episode_number,
            'season_episode_order': self.season_episode_composite,
            'video_order_key': self.video_timestamp_key,
            'scene_order': self.scene_order,
            'dialogue_index': self.dialogue_local_index,
            'episode_label': self.episode_label,
            'episode_order': self.episode_order,
            'orig_index': self.original_arrival_index,
            'display_index': self.display_index,
        }
