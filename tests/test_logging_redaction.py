import logging

from orbit_core.logging_config import RedactionFilter, configure_logging


def test_redacts_bearer_and_query_tokens():
    out = RedactionFilter.redact("Authorization: Bearer abc.def.ghi GET /sync?token=xyz&x=1")
    assert "abc.def.ghi" not in out and "xyz" not in out
    assert "token=[REDACTED]" in out


def test_redacts_password_and_push_keys():
    out = RedactionFilter.redact("{'password': 'hunter2', 'p256dh': 'BKey', 'auth': 'sec', 'endpoint': 'https://e'}")
    assert "hunter2" not in out and "BKey" not in out and "sec'" not in out
    assert "https://e" in out


def test_filter_formats_args_before_redacting():
    record = logging.LogRecord("orbit_api", logging.INFO, __file__, 1, "login %s", ("password=swordfish",), None)
    assert RedactionFilter().filter(record) is True
    assert record.args is None
    assert "swordfish" not in record.msg


def test_configure_logging_from_template(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = tmp_path / "logging.ini"
    cfg.write_text(
        "[loggers]\nkeys=root\n[handlers]\nkeys=console\n[formatters]\nkeys=plain\n"
        "[logger_root]\nlevel=__LOG_LEVEL__\nhandlers=console\n"
        "[handler_console]\nclass=StreamHandler\nlevel=__LOG_LEVEL__\nformatter=plain\nargs=(sys.stderr,)\n"
        "[formatter_plain]\nformat=%(message)s\n"
    )
    configure_logging(level="debug", config_file=cfg)
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert any(isinstance(f, RedactionFilter) for h in root.handlers for f in h.filters)
