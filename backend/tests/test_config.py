import warnings

from musicos.config import Settings


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("ORDER_TTL_DAYS", "3")
    monkeypatch.setenv("ORDER_EXPIRY_ENFORCED", "true")
    monkeypatch.setenv("BANK_IBAN", "DE89 3704 0044 0532 0130 00")
    s = Settings()
    assert s.ORDER_TTL_DAYS == 3
    assert s.ORDER_EXPIRY_ENFORCED is True
    assert s.bank_details()["iban"] == "DE89 3704 0044 0532 0130 00"


def test_settings_use_env_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("PAYPAL_ME_HANDLE", raising=False)
    (tmp_path / ".env").write_text("PAYPAL_ME_HANDLE=musicosbooking\n", encoding="utf-8")
    assert Settings().PAYPAL_ME_HANDLE == "musicosbooking"
    assert Settings.model_config["env_file"] == ".env"


def test_settings_class_is_warning_free():
    with warnings.catch_warnings():
        warnings.simplefilter("error")

        class Local(Settings):
            pass

        Local()
