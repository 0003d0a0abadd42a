from loguru import logger

from fitclient.config.settings import settings
from fitclient.core.logger import setup_logger


class TestSetupLogger:
    def test_console_sink_renders_structured_kwargs(self, capsys):
        setup_logger("INFO")
        try:
            logger.info("Cache entry stored", key="cache_user_profile")
            logger.debug("Hidden below INFO")
            err = capsys.readouterr().err
        finally:
            with capsys.disabled():
                setup_logger(settings.log_level)

        assert "Cache entry stored" in err
        assert "cache_user_profile" in err
        assert "Hidden below INFO" not in err
