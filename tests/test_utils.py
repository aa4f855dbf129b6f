"""Utility and logging setup tests"""

import logging

from policyadmin import log
from policyadmin.utils import canonicalify, ensure_path


def test_canonicalify_expands_user(monkeypatch, tmp_path):
    monkeypatch.setenv("HOME", str(tmp_path))
    assert canonicalify("~/data") == tmp_path.resolve() / "data"


def test_ensure_path_creates_directories(tmp_path):
    target = tmp_path / "a" / "b"
    assert ensure_path(target) == target.resolve()
    assert target.is_dir()


def test_log_setup_writes_to_given_file(tmp_path, monkeypatch):
    logfile = tmp_path / "logs" / "admin.log"
    monkeypatch.setitem(log.LOGGING_CONFIG["handlers"]["console"], "stream", "ext://sys.stderr")

    log.setup(str(logfile))
    logging.getLogger("policyadmin.test").info("hello")
    for handler in logging.getLogger("policyadmin").handlers:
        handler.flush()

    assert logfile.parent.is_dir()
    assert "hello" in logfile.read_text()

    for handler in list(logging.getLogger("policyadmin").handlers):
        handler.close()
        logging.getLogger("policyadmin").removeHandler(handler)
