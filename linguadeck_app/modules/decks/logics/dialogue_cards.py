"""Builds the per-line card fields of a dialogue for a given target."""

from typing import Callable, List, Optional

from linguadeck_app.modules.dialogues.interface import DialogueScriptDTO

from ..schemas import DialogueCardFields
from .target_spec import TargetSpec

AudioResolver = Callable[[str, str, int], Optional[str]]


def _line_at(lines: List[str], index: int) -> str:
    return lines[index] if index < len(lines) and lines[index] else ''


def compose_dialogue_cards(
    script: DialogueScriptDTO,
    target: TargetSpec,
    resolve_audio: AudioResolver,
) -> List[DialogueCardFields]:
    """
    One entry per source line.

    - ALL: the back joins ``"<LANG>: <line>"`` for every language with
      content at that index (alphabetical), else repeats the source line.
    - Single target: the target line when non-empty, else the source line;
      back audio comes from the target language.
    - No target: the back repeats the source line.
    """
    key = script.dialogue_key
    languages = sorted(script.translations)
    cards = []
    for index, source_line in enumerate(script.source_lines):
        back_audio_url = None
        if target.include_all:
            parts = [
                f"{language.upper()}: {_line_at(script.translations[language], index)}"
                for language in languages
                if _line_at(script.translations[language], index)
            ]
            back_text = '\n'.join(parts) if parts else source_line
        elif target.is_single:
            back_text = _line_at(script.translations.get(target.language, []), index) or source_line
            back_audio_url = resolve_audio(target.language, key, index)
        else:
            back_text = source_line

        cards.append(DialogueCardFields(
            line_index=index,
            front_text=source_line,
            back_text=back_text,
            front_audio_url=resolve_audio(script.source_language, key, index),
            back_audio_url=back_audio_url,
        ))
    return cards
