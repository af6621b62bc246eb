import logging

from a4blend.logging_config import (
    A4BlendError,
    CatalogError,
    MetadataError,
    SinkCommandError,
    get_logger,
    setup_logging,
)


class TestLogging:

    def teardown_method(self):
        logger = logging.getLogger("a4blend")
        for handler in logger.handlers:
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)

    def test_logger_namespace(self):
        assert get_logger("playlist").name == "a4blend.playlist"

    def test_file_handler_receives_module_logs(self, tmp_path):
        log_file = tmp_path / "a4blend.log"
        setup_logging("DEBUG", log_file)
        get_logger("playlist").info("Loaded 3 songs")
        for handler in logging.getLogger("a4blend").handlers:
            handler.flush()
        assert "Loaded 3 songs" in log_file.read_text()

    def test_unknown_level_falls_back_to_info(self):
        setup_logging("chatty")
        assert logging.getLogger("a4blend").level == logging.INFO

    def test_non_string_level_falls_back_to_info(self):
        setup_logging(None)
        assert logging.getLogger("a4blend").level == logging.INFO


def test_exception_hierarchy():
    for exc in (CatalogError, MetadataError, SinkCommandError):
        assert issubclass(exc, A4BlendError)
