# File: linguadeck_app/modules/decks/exceptions.py
"""Domain errors raised by the decks module."""

from linguadeck_app.core.error_handlers import LinguaDeckError


class DialogueSourceNotFoundError(LinguaDeckError):
    """The source-language script of a dialogue is missing or empty."""

    def __init__(self, source_language: str, dialogue_key: str):
        self.source_language = source_language
        self.dialogue_key = dialogue_key
        super().__init__(
            message=f"Dialogue file not found or empty: {source_language}/{dialogue_key}.txt",
            code='DIALOGUE_FILE_NOT_FOUND',
            status_code=404,
            details={'source_language': source_language, 'dialogue_key': dialogue_key},
        )

    @property
    def reason(self) -> str:
        return f"missing_source:{self.source_language}/{self.dialogue_key}.txt"


class DialogueKeyUnresolvedError(LinguaDeckError):
    """Neither the tags nor the name of a deck identify its dialogue."""

    reason = 'dialogue_key_not_found'

    def __init__(self, deck_id=None):
        super().__init__(
            message='Could not determine the dialogue key of this deck',
            code='DIALOGUE_KEY_UNRESOLVED',
            status_code=400,
            details={'deck_id': deck_id} if deck_id is not None else None,
        )


class NormalizeUnsupportedError(LinguaDeckError):
    """Normalization was requested for a deck that is not a dialogue deck."""

    def __init__(self, deck_id=None):
        super().__init__(
            message='Normalization is only supported for dialogue decks',
            code='DECK_NORMALIZE_UNSUPPORTED',
            status_code=400,
            details={'deck_id': deck_id} if deck_id is not None else None,
        )


class DialogueKeyRequiredError(LinguaDeckError):
    def __init__(self):
        super().__init__(
            message='dialogueKey is required',
            code='DIALOGUE_KEY_REQUIRED',
            status_code=400,
        )


class TargetLanguageRequiredError(LinguaDeckError):
    def __init__(self):
        super().__init__(
            message='targetLang is required when includeAllTranslations is false',
            code='TARGET_LANG_REQUIRED',
            status_code=400,
        )


class TranslationNotFoundError(LinguaDeckError):
    """No lines exist for the requested target (or for any target in ALL mode)."""

    def __init__(self, dialogue_key: str, target_language=None):
        if target_language:
            message = f"Translation not found: {target_language}/{dialogue_key}.txt"
            code = 'TRANSLATION_FILE_NOT_FOUND'
        else:
            message = 'No translation available for this dialogue'
            code = 'TRANSLATIONS_NOT_FOUND'
        super().__init__(
            message=message,
            code=code,
            status_code=404,
            details={'dialogue_key': dialogue_key, 'target_language': target_language},
        )


class DialoguesNotFoundError(LinguaDeckError):
    def __init__(self, source_language: str):
        super().__init__(
            message=f"No dialogues found for {source_language}",
            code='DIALOGUES_NOT_FOUND',
            status_code=404,
            details={'source_language': source_language},
        )
