from instalike.core.config import Settings


def test_defaults():
    settings = Settings()

    assert settings.API_PREFIX == "/api"
    assert settings.ACCESS_TOKEN_EXPIRE_MINUTES == 60 * 24 * 7
    assert settings.MAX_UPLOAD_SIZE == 5 * 1024 * 1024
    assert settings.ALLOWED_IMAGE_EXTENSIONS == [".jpg", ".jpeg", ".png", ".gif"]


def test_list_settings_from_environment(monkeypatch):
    monkeypatch.setenv("BACKEND_CORS_ORIGINS", "http://a.test, http://b.test")
    monkeypatch.setenv("ALLOWED_IMAGE_EXTENSIONS", '["PNG", ".webp"]')

    settings = Settings()

    assert settings.BACKEND_CORS_ORIGINS == ["http://a.test", "http://b.test"]
    assert settings.ALLOWED_IMAGE_EXTENSIONS == [".png", ".webp"]


def test_upload_prefix_normalized():
    assert Settings(UPLOAD_URL_PREFIX="media/").UPLOAD_URL_PREFIX == "/media"
