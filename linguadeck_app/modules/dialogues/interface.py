# File: linguadeck_app/modules/dialogues/interface.py
"""Public entry points of the dialogues module for other modules."""

from .logics.script_parser import dialogue_key_to_title
from .schemas import DialogueScriptDTO
from .services.source_repository import DialogueSourceRepository


def get_source_repository(config=None) -> DialogueSourceRepository:
    """Repository bound to the current app configuration."""
    return DialogueSourceRepository.from_config(config)


__all__ = ['DialogueScriptDTO', 'DialogueSourceRepository', 'dialogue_key_to_title', 'get_source_repository']
