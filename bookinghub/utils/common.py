from datetime import datetime, date, time, timedelta

TIME_FORMAT = '%H:%M'
DATE_FORMAT = '%Y-%m-%d'


def parse_time(value):
    """Parse an "HH:MM" wall-clock string; time objects pass through"""
    if isinstance(value, time):
        return value.replace(second=0, microsecond=0)
    return datetime.strptime(value.strip(), TIME_FORMAT).time()


def parse_date(value):
    """Parse a "YYYY-MM-DD" string; date objects pass through"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.strptime(value.strip(), DATE_FORMAT).date()


def format_time(value):
    return value.strftime(TIME_FORMAT) if value is not None else None


def format_date(value):
    return value.strftime(DATE_FORMAT) if value is not None else None


def add_minutes(start, minutes):
    """Return start + minutes as a time on the same day.

    Raises ValueError when the result would spill past midnight.
    """
    total = start.hour * 60 + start.minute + minutes
    if total > 24 * 60 - 1:
        raise ValueError('Appointment must end on the same day it starts')
    return time(total // 60, total % 60)


def intervals_overlap(start_a, end_a, start_b, end_b):
    """Half-open [start, end) overlap; touching endpoints do not overlap"""
    return start_a < end_b and start_b < end_a


def iter_times(start, end, step_minutes):
    """Yield times from start (inclusive) to end (exclusive) every step_minutes"""
    if step_minutes <= 0:
        raise ValueError('step_minutes must be positive')
    current = datetime.combine(date.min, start)
    stop = datetime.combine(date.min, end)
    step = timedelta(minutes=step_minutes)
    while current < stop:
        yield current.time()
        current += step
