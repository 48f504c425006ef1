# File: linguadeck_app/modules/media/schemas.py
"""DTOs for media module."""

from dataclasses import asdict, dataclass, field
from typing import Dict, List


@dataclass
class PackageCleanupReport:
    """Outcome of an orphan package sweep."""
    removed: List[str] = field(default_factory=list)
    kept: List[Dict] = field(default_factory=list)  # {'base', 'refs'}
    errors: List[Dict] = field(default_factory=list)  # {'base', 'error'}

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class MediaFallbackReport:
    """Row counts touched by the media fallback normalization."""
    front_audio_cleared: int = 0
    front_audio_filled: int = 0
    video_keys_backfilled: int = 0
    placeholders_replaced: int = 0

    def to_dict(self) -> dict:
        return asdict(self)
