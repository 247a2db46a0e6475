from loguru import logger

from tabdesk.core.logging import setup_logging


def test_setup_logging_writes_file(tmp_path):
    log_dir = tmp_path / "logs"

    setup_logging(debug_mode=True, log_dir=str(log_dir))
    logger.debug("hello from test")
    logger.complete()

    files = list(log_dir.glob("tabdesk_*.log"))
    assert len(files) == 1
    assert "hello from test" in files[0].read_text(encoding="utf-8")

    setup_logging(to_file=False)


def test_setup_logging_console_only(tmp_path):
    setup_logging(debug_mode=False, log_dir=str(tmp_path / "unused"), to_file=False)
    assert not (tmp_path / "unused").exists()


def test_setup_logging_from_config(tmp_path):
    from tabdesk.core.config import ConfigManager
    from tabdesk.core.logging import setup_logging_from_config

    config = ConfigManager(None)
    config.update("general", "log_dir", str(tmp_path / "app-logs"))

    setup_logging_from_config(config)
    logger.info("configured")
    logger.complete()

    assert list((tmp_path / "app-logs").glob("tabdesk_*.log"))
    setup_logging(to_file=False)
