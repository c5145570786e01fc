"""Unit tests for log_config.py"""

import json
import logging

import structlog

from mdpost.log_config import configure_logging


def test_verbose_sets_debug_for_mdpost_loggers():
    configure_logging(verbose=True)
    assert logging.getLogger("mdpost").level == logging.DEBUG
    configure_logging()
    assert logging.getLogger("mdpost").level == logging.WARNING


def test_json_lines_on_stderr(capsys):
    configure_logging(log_json=True)
    structlog.get_logger("mdpost.core.session").warning("document_opened", path="a.md")
    line = capsys.readouterr().err.strip().splitlines()[-1]
    event = json.loads(line)
    assert event["event"] == "document_opened"
    assert event["path"] == "a.md"
    assert event["level"] == "warning"
    assert event["logger"] == "mdpost.core.session"


def test_debug_events_hidden_without_verbose(capsys):
    configure_logging(log_json=True)
    structlog.get_logger("mdpost.core.frontmatter").debug("header_line_dropped")
    assert "header_line_dropped" not in capsys.readouterr().err
