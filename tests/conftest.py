import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from linguadeck_app import create_app, db
from linguadeck_app.config import Config
from linguadeck_app.models import User


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {
        'connect_args': {'check_same_thread': False}
    }
    WTF_CSRF_ENABLED = False
    DIALOGUE_SYNC_INTERVAL_MINUTES = None


class DialogueLibrary:
    """Temporary dialogue scripts, line audio and APKG upload trees."""

    def __init__(self, root):
        self.dialogues_dir = root / 'dialogues'
        self.audio_dir = root / 'audio' / 'dialogues'
        self.upload_dir = root / 'uploads'
        for path in (self.dialogues_dir, self.audio_dir, self.upload_dir):
            path.mkdir(parents=True, exist_ok=True)

    def write_script(self, language, key, lines):
        """``lines`` is a list (one entry per line) or raw file content."""
        lang_dir = self.dialogues_dir / language
        lang_dir.mkdir(parents=True, exist_ok=True)
        content = lines if isinstance(lines, str) else '\n'.join(lines) + '\n'
        path = lang_dir / f'{key}.txt'
        path.write_text(content, encoding='utf-8')
        return path

    def remove_script(self, language, key):
        (self.dialogues_dir / language / f'{key}.txt').unlink()

    def add_audio(self, language, key, index, ext='mp3'):
        line_dir = self.audio_dir / language / key
        line_dir.mkdir(parents=True, exist_ok=True)
        path = line_dir / f'line_{index}.{ext}'
        path.write_bytes(b'ID3')
        return path

    def add_package(self, owner_id, base_name, with_media=True):
        package_dir = self.upload_dir / 'apkg' / str(owner_id) / base_name
        target = package_dir / 'extract' / 'media' if with_media else package_dir
        target.mkdir(parents=True, exist_ok=True)
        return package_dir


@pytest.fixture
def library(tmp_path):
    return DialogueLibrary(tmp_path)


@pytest.fixture
def app(library):
    class LibraryTestConfig(TestConfig):
        DIALOGUES_DIR = str(library.dialogues_dir)
        DIALOGUE_AUDIO_DIR = str(library.audio_dir)
        UPLOAD_FOLDER = str(library.upload_dir)

    app = create_app(LibraryTestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def user(app):
    user = User(username='learner', email='learner@example.com')
    user.set_password('password123')
    db.session.add(user)
    db.session.commit()
    return user
