"""
Calendar helpers mapping week indices (turns) to real dates.
"""

from datetime import date, timedelta

DEFAULT_START_DATE = date(2024, 3, 1)


def date_for_week(start_date, week_index):
    return start_date + timedelta(days=7 * week_index)


def week_in_month(day):
    """Week number within the month, 1 to 5."""
    return min((day.day - 1) // 7 + 1, 5)


def formatted_week(start_date, week_index):
    """e.g. "March, Week 1"."""
    day = date_for_week(start_date, week_index)
    return f"{day.strftime('%B')}, Week {week_in_month(day)}"


def short_week(start_date, week_index):
    """e.g. "Mar W1"."""
    day = date_for_week(start_date, week_index)
    return f"{day.strftime('%b')} W{week_in_month(day)}"


def formatted_date_range(start_date, week_index):
    """e.g. "March 1-7, 2024" or "Mar 29 - Apr 4, 2024"."""
    week_start = date_for_week(start_date, week_index)
    week_end = week_start + timedelta(days=6)
    if week_start.month == week_end.month:
        return f"{week_start.strftime('%B')} {week_start.day}-{week_end.day}, {week_start.year}"
    return (
        f"{week_start.strftime('%b')} {week_start.day} - "
        f"{week_end.strftime('%b')} {week_end.day}, {week_start.year}"
    )


def season_for(day):
    # Northern hemisphere meteorological seasons
    if 3 <= day.month <= 5:
        return "Spring"
    if 6 <= day.month <= 8:
        return "Summer"
    if 9 <= day.month <= 11:
        return "Autumn"
    return "Winter"
