# File: linguadeck_app/modules/dialogues/schemas.py
"""DTOs for the dialogues module."""

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class DialogueScriptDTO:
    """All lines known for one dialogue key, by language."""
    dialogue_key: str
    source_language: str
    source_lines: List[str] = field(default_factory=list)
    translations: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def line_count(self) -> int:
        return len(self.source_lines)
