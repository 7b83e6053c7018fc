from clinic_api.common.config import Settings


def test_allowed_origins_accepts_comma_separated_env(monkeypatch):
    monkeypatch.setenv("ALLOWED_ORIGINS", "http://a.com, http://b.com,")

    assert Settings().ALLOWED_ORIGINS == ["http://a.com", "http://b.com"]


def test_allowed_origins_defaults_to_any(monkeypatch):
    monkeypatch.delenv("ALLOWED_ORIGINS", raising=False)

    assert Settings().ALLOWED_ORIGINS == ["*"]
