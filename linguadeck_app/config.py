# File: linguadeck_app/config.py
# Cấu hình trung tâm cho ứng dụng LinguaDeck.

import os

from dotenv import load_dotenv

load_dotenv()

# Thư mục gốc của dự án: config.py nằm ở linguadeck_app/ nên đi lên 1 cấp.
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

DATABASE_PATH = os.path.join(BASE_DIR, "database", "linguadeck.db")


def _env_int(name, default=None):
    raw = os.environ.get(name)
    if raw is None or str(raw).strip() == '':
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Config:
    """Cấu hình ứng dụng LinguaDeck."""

    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-replace-in-production'

    SQLALCHEMY_DATABASE_URI = os.environ.get('SQLALCHEMY_DATABASE_URI') or f'sqlite:///{DATABASE_PATH}'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'connect_args': {'timeout': 30},
    }
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_DIR = os.environ.get('LOG_DIR') or os.path.join(BASE_DIR, 'logs')

    # Uploads (APKG packages are extracted under UPLOAD_FOLDER/apkg/<owner>/<base>/extract/media)
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(BASE_DIR, 'uploads')
    APKG_UPLOAD_SUBDIR = 'apkg'
    APKG_MEDIA_SUBDIR = 'extract/media'

    # Dialogue library
    DIALOGUES_DIR = os.environ.get('DIALOGUES_DIR') or os.path.join(BASE_DIR, 'public', 'dialogues')
    DIALOGUE_AUDIO_DIR = os.environ.get('DIALOGUE_AUDIO_DIR') or os.path.join(BASE_DIR, 'public', 'audio', 'dialogues')
    DIALOGUE_AUDIO_URL_PREFIX = '/audio/dialogues'
    DIALOGUE_SOURCE_LANGUAGE = os.environ.get('DIALOGUE_SOURCE_LANGUAGE', 'en')
    DIALOGUE_DEFAULT_TARGET_LANGUAGE = os.environ.get('DIALOGUE_DEFAULT_TARGET_LANGUAGE', 'pt')
    DIALOGUE_FALLBACK_AUDIO_LANGUAGE = 'en'
    DIALOGUE_AUDIO_EXTENSIONS = ('mp3', 'wav')

    # Periodic reconcile of global dialogue decks (disabled when unset)
    DIALOGUE_SYNC_INTERVAL_MINUTES = _env_int('DIALOGUE_SYNC_INTERVAL_MINUTES')

    @classmethod
    def init_app(cls, app):
        """Tạo các thư mục cần thiết."""
        if app.config.get('SQLALCHEMY_DATABASE_URI', '').startswith('sqlite:///'):
            os.makedirs(os.path.dirname(DATABASE_PATH), exist_ok=True)
        os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)
