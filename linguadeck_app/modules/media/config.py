# File: linguadeck_app/modules/media/config.py
"""Default configuration for media module."""


class MediaModuleDefaultConfig:
    """Default values for media module configuration."""

    # Extracted packages live at UPLOAD_FOLDER/<APKG_UPLOAD_SUBDIR>/<owner>/<base>/<APKG_MEDIA_SUBDIR>
    UPLOADS_URL_PREFIX = '/uploads'
    APKG_UPLOAD_SUBDIR = 'apkg'
    APKG_MEDIA_SUBDIR = 'extract/media'

    # Legacy back text written by older dialogue imports
    MISSING_TRANSLATION_PLACEHOLDER = 'Tradução indisponível'
