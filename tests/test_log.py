import io

import pytest

from influxwriter import log


@pytest.fixture
def stream():
    original = log.get_logger()
    buffer = io.StringIO()
    log.set_logger(log.Logger(stream=buffer))
    yield buffer
    log.set_logger(original)


def _log_messages(logger):
    logger.debug("Debug")
    logger.debug("Debugf %s %d", "message", 1)
    logger.info("Info")
    logger.info("Infof %s %d", "message", 2)
    logger.warn("Warn")
    logger.warn("Warnf %s %d", "message", 3)
    logger.error("Error")
    logger.error("Errorf %s %d", "message", 4)


def _verify(output, level, prefix):
    checks = [
        (log.LogLevel.DEBUG, [f"{prefix} D! Debug\n", f"{prefix} D! Debugf message 1"]),
        (log.LogLevel.INFO, [f"{prefix} I! Info\n", f"{prefix} I! Infof message 2"]),
        (log.LogLevel.WARNING, [f"{prefix} W! Warn\n", f"{prefix} W! Warnf message 3"]),
        (log.LogLevel.ERROR, [f"{prefix} E! Error\n", f"{prefix} E! Errorf message 4"]),
    ]
    for threshold, expected in checks:
        for text in expected:
            assert (text in output) == (level >= threshold), text


def test_default_logger_settings():
    logger = log.Logger()
    assert logger.prefix == "influxdb2client"
    assert logger.log_level == log.LogLevel.ERROR


@pytest.mark.parametrize(
    "level",
    [log.LogLevel.ERROR, log.LogLevel.WARNING, log.LogLevel.INFO, log.LogLevel.DEBUG],
)
def test_logging_levels(stream, level):
    logger = log.get_logger()
    logger.log_level = level
    _log_messages(logger)
    _verify(stream.getvalue(), level, "influxdb2client")


def test_prefix_change(stream):
    logger = log.get_logger()
    logger.log_level = log.LogLevel.DEBUG
    logger.prefix = "client"
    _log_messages(logger)
    _verify(stream.getvalue(), log.LogLevel.DEBUG, "client")


def test_module_functions_delegate(stream):
    log.get_logger().log_level = log.LogLevel.DEBUG
    assert log.level() == log.LogLevel.DEBUG
    log.debug("Debug")
    log.debug("Debugf %s %d", "message", 1)
    log.info("Info")
    log.info("Infof %s %d", "message", 2)
    log.warn("Warn")
    log.warn("Warnf %s %d", "message", 3)
    log.error("Error")
    log.error("Errorf %s %d", "message", 4)
    output = stream.getvalue()
    for text in [
        "Debug",
        "Debugf message 1",
        "Info",
        "Infof message 2",
        "Warn",
        "Warnf message 3",
        "Error",
        "Errorf message 4",
    ]:
        assert text in output


def test_disabled_logging_writes_nothing(stream):
    log.set_logger(None)
    log.debug("Debug")
    log.info("Infof %s %d", "message", 2)
    log.warn("Warn")
    log.error("Errorf %s %d", "message", 4)
    assert stream.getvalue() == ""
    assert log.level() == log.LogLevel.ERROR


class _RecordingLogger:
    def __init__(self):
        self.log_level = log.LogLevel.INFO
        self.records = []

    def debug(self, msg, *args):
        self.records.append(("debug", msg % args if args else msg))

    def info(self, msg, *args):
        self.records.append(("info", msg % args if args else msg))

    def warn(self, msg, *args):
        self.records.append(("warn", msg % args if args else msg))

    def error(self, msg, *args):
        self.records.append(("error", msg % args if args else msg))


def test_custom_logger(stream):
    custom = _RecordingLogger()
    log.set_logger(custom)
    log.debug("Debugf %s %d", "message", 1)
    log.info("Info")
    log.warn("Warnf %s %d", "message", 3)
    log.error("Error")
    assert custom.records == [
        ("debug", "Debugf message 1"),
        ("info", "Info"),
        ("warn", "Warnf message 3"),
        ("error", "Error"),
    ]
    assert log.level() == log.LogLevel.INFO
    assert stream.getvalue() == ""