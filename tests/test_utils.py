from datetime import date

import pytest

from farmfromspace_engine.core.utils.dates import (
    DEFAULT_START_DATE,
    date_for_week,
    formatted_date_range,
    formatted_week,
    season_for,
    short_week,
    week_in_month,
)
from farmfromspace_engine.core.utils.logging_utils import get_logger, setup_logger
from farmfromspace_engine.core.utils.transitions import clamp01, geometric_cost, water_adequacy


def test_week_dates():
    assert date_for_week(DEFAULT_START_DATE, 0) == date(2024, 3, 1)
    assert date_for_week(DEFAULT_START_DATE, 4) == date(2024, 3, 29)
    assert week_in_month(date(2024, 3, 29)) == 5
    assert week_in_month(date(2024, 3, 31)) == 5


def test_week_labels():
    assert formatted_week(DEFAULT_START_DATE, 0) == "March, Week 1"
    assert formatted_week(DEFAULT_START_DATE, 5) == "April, Week 1"
    assert short_week(DEFAULT_START_DATE, 1) == "Mar W2"
    assert formatted_date_range(DEFAULT_START_DATE, 0) == "March 1-7, 2024"
    assert formatted_date_range(DEFAULT_START_DATE, 4) == "Mar 29 - Apr 4, 2024"


@pytest.mark.parametrize(
    "month, season",
    [(1, "Winter"), (3, "Spring"), (7, "Summer"), (10, "Autumn"), (12, "Winter")],
)
def test_seasons(month, season):
    assert season_for(date(2024, month, 15)) == season


def test_water_adequacy():
    assert water_adequacy(0.7, 0.7) == 1.0
    assert water_adequacy(0.6, 0.7) == pytest.approx(0.8)
    assert water_adequacy(0.1, 0.7) == 0.0
    assert clamp01(1.3) == 1.0


def test_geometric_cost():
    assert geometric_cost(60, 1.25, 0) == 60
    assert geometric_cost(60, 1.25, 1) == 75
    assert geometric_cost(60, 1.25, 2) == 94


def test_file_logger(tmp_path):
    logger = setup_logger("farmfromspace_filetest", log_dir=tmp_path)
    logger.info("hello")
    for handler in logger.handlers:
        handler.flush()
    logs = list(tmp_path.glob("farmfromspace_filetest_*.log"))
    assert len(logs) == 1
    assert "hello" in logs[0].read_text(encoding="utf-8")


def test_child_loggers_share_root():
    assert get_logger("farmfromspace.engine").parent is get_logger("farmfromspace")
