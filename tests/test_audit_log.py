import logging
import pathlib
import sys

import pytest

sys.path.append(str(pathlib.Path(__file__).resolve().parents[1]))

from core.audit import CalculationLog


def test_log_records_level_category_and_timestamp():
    log = CalculationLog()
    log.log("info", "heloc", "draw", {"amount": 500})
    assert len(log.entries) == 1
    entry = log.entries[0]
    assert entry.level == "info"
    assert entry.category == "heloc"
    assert entry.data == {"amount": 500}
    assert entry.timestamp is not None
    assert log.as_dict()[0]["message"] == "draw"


def test_disabled_log_records_nothing():
    log = CalculationLog(enabled=False)
    log.log("error", "pmi", "ignored")
    assert list(log.entries) == []


def test_log_is_bounded():
    log = CalculationLog(max_entries=3)
    for i in range(5):
        log.log("debug", "loop", f"month {i}")
    assert [e.message for e in log.entries] == ["month 2", "month 3", "month 4"]


def test_from_env():
    assert CalculationLog.from_env({"HELOC_DEBUG": "true"}).enabled
    assert not CalculationLog.from_env({"HELOC_DEBUG": "0"}).enabled
    assert not CalculationLog.from_env({}).enabled


def test_filter_and_clear():
    log = CalculationLog()
    log.log("info", "pmi", "a")
    log.log("warn", "heloc", "b")
    assert [e.message for e in log.filter(category="heloc")] == ["b"]
    assert [e.message for e in log.filter(level="info")] == ["a"]
    log.clear()
    assert log.as_dict() == []


def test_unknown_level_rejected():
    with pytest.raises(ValueError):
        CalculationLog().log("loud", "x", "y")


def test_records_forwarded_to_stdlib_logger(caplog):
    with caplog.at_level(logging.DEBUG, logger="heloc.debug"):
        CalculationLog().log("warn", "budgeting", "cash flow negative")
    assert "[budgeting] cash flow negative" in caplog.text
