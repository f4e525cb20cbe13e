"""
Date and time parsing and display formatting.
"""

from datetime import datetime, date
from typing import Optional
from loguru import logger


class DateTimeParser:
    """Parse the form's date/time strings and format them for display."""

    DATE_FORMAT = '%Y-%m-%d'
    TIME_FORMAT = '%H:%M'

    @classmethod
    def parse_date(cls, text: Optional[str]) -> Optional[date]:
        """Parse a YYYY-MM-DD date; None when missing or malformed."""
        if not text:
            return None
        try:
            return datetime.strptime(text.strip(), cls.DATE_FORMAT).date()
        except ValueError:
            logger.debug(f"Unparsable date: '{text}'")
            return None

    @classmethod
    def parse_time(cls, text: Optional[str]) -> Optional[datetime]:
        """Parse a 24h HH:MM time; None when missing or malformed."""
        if not text:
            return None
        try:
            return datetime.strptime(text.strip(), cls.TIME_FORMAT)
        except ValueError:
            logger.debug(f"Unparsable time: '{text}'")
            return None

    @classmethod
    def combine(cls, date_str: Optional[str], time_str: Optional[str]) -> Optional[datetime]:
        """Join a date and a time into one naive local datetime."""
        day = cls.parse_date(date_str)
        clock = cls.parse_time(time_str)
        if day is None or clock is None:
            return None
        return datetime.combine(day, clock.time())

    @staticmethod
    def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
        """Parse an ISO-8601 timestamp as stored by the data service."""
        if not value:
            return None
        try:
            return datetime.fromisoformat(value.replace('Z', '+00:00'))
        except ValueError:
            logger.debug(f"Unparsable timestamp: '{value}'")
            return None

    @staticmethod
    def format_time(time_str: Optional[str]) -> str:
        """'14:30' -> '2:30 PM'"""
        if not time_str:
            return ""
        hour_str, _, minute_str = time_str.partition(':')
        hour = int(hour_str)
        minutes = minute_str or "00"
        am_pm = 'PM' if hour >= 12 else 'AM'
        if hour == 0:
            hour = 12
        elif hour > 12:
            hour -= 12
        return f"{hour}:{minutes} {am_pm}"

    @classmethod
    def format_date(cls, date_str: Optional[str]) -> str:
        """'2025-01-05' -> 'Jan 5'"""
        day = cls.parse_date(date_str)
        if day is None:
            return ""
        return f"{day:%b} {day.day}"

    @classmethod
    def format_rebook(cls, moment: datetime) -> str:
        """Rebook display string, e.g. 'Mar 26, 10:00 AM'"""
        return f"{moment:%b} {moment.day}, {cls.format_time(moment.strftime(cls.TIME_FORMAT))}"

    @classmethod
    def format_visit(cls, moment: datetime) -> str:
        """Visit timestamp display string, e.g. 'Jan 5, 2025, 2:30 PM'"""
        return f"{moment:%b} {moment.day}, {moment.year}, {cls.format_time(moment.strftime(cls.TIME_FORMAT))}"
