"""Time formatting utilities for countdowns and subtask time ranges.

Converts seconds to "HH:MM:SS" for the pomodoro and subtask countdowns, and
timestamps to the "dd/mm/yyyy, HH:MM:SS" form shown next to each subtask.
Also parses the typed-in times coming from the subtask forms.
"""
from datetime import datetime
from typing import Optional, Union

from ticktask.config import TIME_INPUT_FORMATS


class TimeFormatter:
    """Unified time formatting utilities for the application."""

    @staticmethod
    def seconds_to_hms(seconds: int) -> str:
        """Convert seconds to zero-padded HH:MM:SS format."""
        seconds = max(0, int(seconds))
        hours = seconds // 3600
        minutes = (seconds % 3600) // 60
        secs = seconds % 60
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"

    @staticmethod
    def datetime_to_display(value: Union[datetime, str, None]) -> str:
        """Convert a timestamp to display format like '05/03/2026, 14:30:00'.

        Accepts ISO strings as well; anything unparseable renders empty.
        """
        if isinstance(value, str):
            value = TimeFormatter.parse_timestamp(value)
        if value is None:
            return ""
        return value.strftime("%d/%m/%Y, %H:%M:%S")

    @staticmethod
    def range_to_display(start: Optional[datetime], end: Optional[datetime]) -> str:
        """Format a subtask window; empty unless both ends are set."""
        if start is None or end is None:
            return ""
        return f"{TimeFormatter.datetime_to_display(start)} - {TimeFormatter.datetime_to_display(end)}"

    @staticmethod
    def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
        """Parse a stored or typed-in timestamp. Blank or invalid gives None."""
        if not raw or not raw.strip():
            return None
        text = raw.strip()
        for fmt in TIME_INPUT_FORMATS:
            try:
                return datetime.strptime(text, fmt)
            except ValueError:
                continue
        try:
            if text.endswith("Z"):
                text = text[:-1] + "+00:00"
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        if parsed.tzinfo is not None:
            # Everything else compares against naive local wall-clock time
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed

    @staticmethod
    def parse_time_input(raw: Optional[str]) -> Optional[datetime]:
        """Parse a typed-in time. Blank means unset; anything else must parse.

        Raises:
            ValueError: If a non-blank value is not a recognised timestamp.
        """
        if not raw or not raw.strip():
            return None
        parsed = TimeFormatter.parse_timestamp(raw)
        if parsed is None:
            raise ValueError(f"Unrecognised time: {raw!r}")
        return parsed

    @staticmethod
    def to_input_value(value: Optional[datetime]) -> str:
        """Render a timestamp back into the editable input format."""
        if value is None:
            return ""
        if value.second:
            return value.strftime("%Y-%m-%dT%H:%M:%S")
        return value.strftime("%Y-%m-%dT%H:%M")
