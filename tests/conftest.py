import pytest

from iptv_channels import create_app, db
from iptv_channels.config import Config


class TestConfig(Config):
    __test__ = False
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    WTF_CSRF_ENABLED = False
    PAGE_SIZE = 100
    KODI_HOST = 'kodi.local'
    KODI_PORT = '8080'


SAMPLE_M3U = """#EXTM3U
#EXTINF:-1 tvg-id="CNN.us" tvg-name="US| CNN HD" tvg-logo="https://example.com/cnn.png" group-title="US| NEWS",US| CNN HD
http://example.com/live/cnn.ts
#EXTINF:-1 tvg-id="BBC1.uk" tvg-name="UK| BBC One" tvg-logo="https://example.com/bbc1.png" group-title="UK| ENTERTAINMENT",UK| BBC One
http://example.com/live/bbc1.ts
#EXTINF:-1 tvg-id="" tvg-name="Invalid Channel No URL" tvg-logo="" group-title="TEST"
#EXTINF:-1 tvg-id="" tvg-name="EX - The Shawshank Redemption (1994)" tvg-logo="https://image.tmdb.org/poster.jpg" group-title="|EXYU| MOVIES",EX - The Shawshank Redemption (1994)
http://example.com/movie/user/pass/1808354.mkv
#EXTINF:-1 tvg-id="" tvg-name="DE - Show S02 E11" tvg-logo="https://tmdb.org/poster.jpg" group-title="|DE| SERIES",DE - Show S02 E11
http://example.com/series/user/pass/1136293.mkv"""


@pytest.fixture
def app():
    """A fresh app on an in-memory database for every test."""
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sample_m3u():
    return SAMPLE_M3U


@pytest.fixture
def file_app(tmp_path):
    """An app on a file-backed SQLite database, shared by every thread's connection."""
    class FileConfig(TestConfig):
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{tmp_path / 'iptv_channels.db'}"

    app = create_app(FileConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
        db.engine.dispose()
