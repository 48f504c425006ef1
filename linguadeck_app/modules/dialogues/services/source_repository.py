# File: linguadeck_app/modules/dialogues/services/source_repository.py
# Mục đích: Truy cập thư viện kịch bản hội thoại (file .txt theo ngôn ngữ) và cây audio theo dòng.

import logging
import os
from typing import Iterable, List, Optional

from flask import current_app, has_app_context

from linguadeck_app.utils.fallback import Candidate, first_labelled_match

from ..config import DialogueModuleDefaultConfig
from ..logics.script_parser import DialogueScriptParser
from ..schemas import DialogueScriptDTO

logger = logging.getLogger(__name__)


def _is_safe_segment(value: str) -> bool:
    return bool(value) and '/' not in value and '\\' not in value and value not in ('.', '..')


class DialogueSourceRepository:
    """
    Filesystem-backed dialogue library.

    Layout::

        <dialogues_dir>/<lang>/<key>.txt
        <audio_dir>/<lang>/<key>/line_<index>.<ext>

    Absence of a file is never an error at this layer: lookups return empty
    results.
    """

    def __init__(
        self,
        dialogues_dir: str,
        audio_dir: str,
        audio_url_prefix: str = DialogueModuleDefaultConfig.AUDIO_URL_PREFIX,
        multi_language_source: str = DialogueModuleDefaultConfig.SOURCE_LANGUAGE,
        fallback_audio_language: str = DialogueModuleDefaultConfig.FALLBACK_AUDIO_LANGUAGE,
        audio_extensions: Iterable[str] = DialogueModuleDefaultConfig.AUDIO_EXTENSIONS,
    ):
        self.dialogues_dir = dialogues_dir
        self.audio_dir = audio_dir
        self.audio_url_prefix = '/' + str(audio_url_prefix or '').strip('/')
        self.multi_language_source = (multi_language_source or 'en').lower()
        self.fallback_audio_language = (fallback_audio_language or '').lower() or None
        self.audio_extensions = tuple(audio_extensions)

    @classmethod
    def from_config(cls, config=None) -> 'DialogueSourceRepository':
        """Build a repository from a Flask config mapping (defaults to ``current_app.config``)."""
        if config is None:
            if has_app_context():
                config = current_app.config
            else:
                from linguadeck_app.config import Config
                config = {key: getattr(Config, key) for key in dir(Config) if key.isupper()}
        return cls(
            dialogues_dir=config['DIALOGUES_DIR'],
            audio_dir=config['DIALOGUE_AUDIO_DIR'],
            audio_url_prefix=config.get('DIALOGUE_AUDIO_URL_PREFIX', DialogueModuleDefaultConfig.AUDIO_URL_PREFIX),
            multi_language_source=config.get('DIALOGUE_SOURCE_LANGUAGE', DialogueModuleDefaultConfig.SOURCE_LANGUAGE),
            fallback_audio_language=config.get(
                'DIALOGUE_FALLBACK_AUDIO_LANGUAGE', DialogueModuleDefaultConfig.FALLBACK_AUDIO_LANGUAGE
            ),
            audio_extensions=config.get('DIALOGUE_AUDIO_EXTENSIONS', DialogueModuleDefaultConfig.AUDIO_EXTENSIONS),
        )

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------
    def _script_path(self, language: str, dialogue_key: str) -> Optional[str]:
        if not (_is_safe_segment(language) and _is_safe_segment(dialogue_key)):
            return None
        return os.path.join(
            self.dialogues_dir, language, f"{dialogue_key}{DialogueModuleDefaultConfig.SCRIPT_EXTENSION}"
        )

    @staticmethod
    def _read_text(path: Optional[str]) -> Optional[str]:
        if not path or not os.path.isfile(path):
            return None
        try:
            with open(path, 'r', encoding='utf-8') as handle:
                return handle.read()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read dialogue script %s: %s", path, exc)
            return None

    # ------------------------------------------------------------------
    # Keys and lines
    # ------------------------------------------------------------------
    def list_dialogue_keys(self, language: str) -> List[str]:
        """Return the dialogue keys that have a script for ``language``."""
        language = (language or '').lower()
        if not _is_safe_segment(language):
            return []
        lang_dir = os.path.join(self.dialogues_dir, language)
        if not os.path.isdir(lang_dir):
            return []
        suffix = DialogueModuleDefaultConfig.SCRIPT_EXTENSION
        try:
            names = os.listdir(lang_dir)
        except OSError as exc:
            logger.warning("Could not list dialogue directory %s: %s", lang_dir, exc)
            return []
        return sorted(name[:-len(suffix)] for name in names if name.endswith(suffix))

    def read_lines(self, language: str, dialogue_key: str) -> List[str]:
        """
        Return the ordered lines of ``dialogue_key`` in ``language``.

        A translation prefers its labelled entries inside the multi-language
        source script (keeps line indexes aligned) and falls back to its own
        simple file. The source language prefers the labelled ``text`` entries
        and falls back to a simple parse of the same file.
        """
        language = (language or '').lower()
        direct_content = self._read_text(self._script_path(language, dialogue_key))
        multi_content = self._read_text(self._script_path(self.multi_language_source, dialogue_key))

        if direct_content is None and multi_content is None:
            return []

        if multi_content is not None:
            labelled = DialogueScriptParser.parse_labelled(multi_content, language, self.multi_language_source)
            if labelled:
                return labelled

        if direct_content is not None:
            return DialogueScriptParser.parse_simple(direct_content, DialogueModuleDefaultConfig.COMMENT_PREFIX)
        return []

    def list_available_languages(self, dialogue_key: str) -> List[str]:
        """Languages that mention ``dialogue_key``: own script files plus labels in the multi-language script."""
        found = set()
        if os.path.isdir(self.dialogues_dir):
            try:
                entries = os.listdir(self.dialogues_dir)
            except OSError as exc:
                logger.warning("Could not list dialogues root %s: %s", self.dialogues_dir, exc)
                entries = []
            for entry in entries:
                path = self._script_path(entry, dialogue_key)
                if path and os.path.isfile(path):
                    found.add(entry.lower())

        multi_content = self._read_text(self._script_path(self.multi_language_source, dialogue_key))
        if multi_content is not None:
            found.update(DialogueScriptParser.labelled_languages(multi_content))
        return sorted(found)

    def translation_availability(self, dialogue_key: str, source_language: str) -> List[str]:
        """Languages other than ``source_language`` with at least one non-empty line."""
        source_language = (source_language or '').lower()
        available = []
        for language in self.list_available_languages(dialogue_key):
            if language == source_language:
                continue
            if any(line for line in self.read_lines(language, dialogue_key)):
                available.append(language)
        return available

    def load_script(
        self,
        dialogue_key: str,
        source_language: str,
        target_languages: Iterable[str] = (),
    ) -> DialogueScriptDTO:
        """Read the source lines plus the non-empty translations of ``target_languages``."""
        source_language = (source_language or '').lower()
        script = DialogueScriptDTO(
            dialogue_key=dialogue_key,
            source_language=source_language,
            source_lines=self.read_lines(source_language, dialogue_key),
        )
        for language in target_languages:
            if not language or language == source_language:
                continue
            lines = self.read_lines(language, dialogue_key)
            if any(lines):
                script.translations[language] = lines
        return script

    # ------------------------------------------------------------------
    # Audio
    # ------------------------------------------------------------------
    def _audio_candidate(self, language: str, dialogue_key: str, index: int, extension: str) -> Candidate:
        def produce() -> Optional[str]:
            if not (_is_safe_segment(language) and _is_safe_segment(dialogue_key)):
                return None
            filename = DialogueModuleDefaultConfig.LINE_AUDIO_NAME.format(index=index, ext=extension)
            if not os.path.isfile(os.path.join(self.audio_dir, language, dialogue_key, filename)):
                return None
            return f"{self.audio_url_prefix}/{language}/{dialogue_key}/{filename}"

        return Candidate(label=f"{language}:{extension}", produce=produce)

    def audio_candidates(self, language: str, dialogue_key: str, index: int) -> List[Candidate]:
        """Ordered audio lookups: requested language first, then the fallback language."""
        language = (language or '').lower()
        languages = [language]
        if self.fallback_audio_language and self.fallback_audio_language != language:
            languages.append(self.fallback_audio_language)
        return [
            self._audio_candidate(lang, dialogue_key, index, extension)
            for lang in languages
            for extension in self.audio_extensions
        ]

    def resolve_audio_url(self, language: str, dialogue_key: str, index: int) -> Optional[str]:
        """Return the URL of the first existing audio file for the line, or ``None``."""
        _label, url = first_labelled_match(self.audio_candidates(language, dialogue_key, index))
        return url
