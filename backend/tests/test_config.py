from frutico.core.config import Settings, load_settings


def test_comma_separated_origins_from_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "CORS_ORIGINS=https://frutico.in,https://www.frutico.in\n"
        "BASE_URL=https://tickets.frutico.in/\n"
    )
    settings = Settings(_env_file=str(env_file))
    assert settings.CORS_ORIGINS == ["https://frutico.in", "https://www.frutico.in"]
    assert settings.BASE_URL == "https://tickets.frutico.in"


def test_single_origin_from_environment(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", "https://frutico.in")
    settings = Settings(_env_file=None)
    assert settings.CORS_ORIGINS == ["https://frutico.in"]


def test_json_origins_still_accepted(monkeypatch):
    monkeypatch.setenv("CORS_ORIGINS", '["https://a.in", "https://b.in"]')
    settings = Settings(_env_file=None)
    assert settings.CORS_ORIGINS == ["https://a.in", "https://b.in"]


def test_load_settings_reads_env_file_variable(tmp_path, monkeypatch):
    env_file = tmp_path / "frutico.env"
    env_file.write_text("CORS_ORIGINS=https://frutico.in\nSTAFF_REDEEM_TOKEN= counter-1 \n")
    monkeypatch.setenv("ENV_FILE", str(env_file))
    settings = load_settings()
    assert settings.CORS_ORIGINS == ["https://frutico.in"]
    assert settings.STAFF_REDEEM_TOKEN == "counter-1"
