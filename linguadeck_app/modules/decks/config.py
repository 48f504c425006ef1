# File: linguadeck_app/modules/decks/config.py
"""Default configuration for decks module."""


class DecksModuleDefaultConfig:
    """Default values for decks module configuration."""

    ALL_LANGUAGES = 'ALL'
    DECK_NAME_ARROW = '→'
    GLOBAL_DECK_DESCRIPTION = 'Default deck imported from dialogue {key}'
    IMPORTED_DECK_DESCRIPTION = 'Imported from dialogue {key}'

    # Per-request target override
    TARGET_HEADER = 'X-Target-Lang'
    TARGET_QUERY_PARAM = 'targetLang'

    # SyncAll result statuses
    STATUS_OK = 'ok'
    STATUS_SKIPPED = 'skipped'
    STATUS_ERROR = 'error'
