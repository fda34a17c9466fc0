import io
from datetime import datetime, timedelta

import pytest

from trojango import colorful, log
from trojango.golog import Logger
from trojango.log import EmptyLogger, LogLevel


def plain_logger():
    out = io.StringIO()
    logger = Logger(out).without_color().without_timestamp()
    return logger, out


def test_info_line_plain():
    logger, out = plain_logger()
    logger.info("hello", "world")
    assert out.getvalue() == "[INFO]  hello world\n"


def test_infof_formats_and_adds_newline():
    logger, out = plain_logger()
    logger.infof("%d items %v", 3, "ok")
    assert out.getvalue() == "[INFO]  3 items ok\n"


def test_format_keeps_existing_newline():
    logger, out = plain_logger()
    logger.warnf("done\n")
    assert out.getvalue() == "[WARN]  done\n"


def test_level_filters_lower_messages():
    logger, out = plain_logger()
    logger.set_log_level(LogLevel.WARN)
    logger.info("hidden")
    logger.debug("hidden")
    logger.warn("shown")
    assert out.getvalue() == "[WARN]  shown\n"


def test_debug_only_at_all_level():
    logger, out = plain_logger()
    logger.set_log_level(LogLevel.INFO)
    logger.trace("hidden")
    logger.set_log_level(LogLevel.ALL)
    logger.trace("visible")
    assert out.getvalue() == "[TRACE] visible\n"


def test_timestamp_format():
    out = io.StringIO()
    logger = Logger(out).without_color()
    logger.warn("careful")
    text = out.getvalue()
    assert text[:8] == "[WARN]  "
    assert text[27:] == " careful\n"
    stamp = datetime.strptime(text[8:27], "%Y/%m/%d %H:%M:%S")
    assert abs(stamp - datetime.now()) < timedelta(minutes=5)


def test_color_prefix():
    out = io.BytesIO()
    logger = Logger(out).with_color().without_timestamp()
    logger.info("hi")
    assert out.getvalue() == colorful.green(b"[INFO]  ") + b"hi\n"


def test_set_output_disables_color_for_non_terminal():
    logger = Logger(io.StringIO()).with_color().without_timestamp()
    target = io.StringIO()
    logger.set_output(target)
    logger.info("hi")
    assert target.getvalue() == "[INFO]  hi\n"


def test_quiet_suppresses_output():
    logger, out = plain_logger()
    logger.quiet()
    logger.error("nothing")
    assert logger.is_quiet()
    assert out.getvalue() == ""
    logger.no_quiet()
    logger.error("again")
    assert "again" in out.getvalue()


def test_debug_flag_toggles():
    logger, _ = plain_logger()
    assert logger.with_debug().is_debug() is True
    assert logger.without_debug().is_debug() is False


def test_debug_includes_caller_through_log_module():
    logger, out = plain_logger()
    log.register_logger(logger)
    try:
        log.debug("x")
    finally:
        log.register_logger(EmptyLogger())
    text = out.getvalue()
    assert text.startswith("[DEBUG] ")
    assert "test_debug_includes_caller_through_log_module:test_golog.py:" in text
    assert text.endswith(" x\n")


def test_fatal_writes_and_exits():
    logger, out = plain_logger()
    with pytest.raises(SystemExit) as exc:
        logger.fatal("boom")
    assert exc.value.code == 1
    assert out.getvalue().startswith("[FATAL] ")
    assert out.getvalue().endswith("boom\n")


def test_fatal_off_level_still_exits_silently():
    logger, out = plain_logger()
    logger.set_log_level(LogLevel.OFF)
    with pytest.raises(SystemExit):
        logger.fatalf("boom %s", "now")
    assert out.getvalue() == ""