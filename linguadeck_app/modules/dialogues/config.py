# File: linguadeck_app/modules/dialogues/config.py
"""Default configuration for the dialogues module."""


class DialogueModuleDefaultConfig:
    """Defaults used when no Flask app context is available."""

    SCRIPT_EXTENSION = '.txt'
    LINE_AUDIO_NAME = 'line_{index}.{ext}'
    COMMENT_PREFIX = '#'

    SOURCE_LANGUAGE = 'en'
    DEFAULT_TARGET_LANGUAGE = 'pt'
    FALLBACK_AUDIO_LANGUAGE = 'en'
    AUDIO_EXTENSIONS = ('mp3', 'wav')
    AUDIO_URL_PREFIX = '/audio/dialogues'
