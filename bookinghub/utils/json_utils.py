from datetime import date, datetime, time
from decimal import Decimal

from flask.json.provider import DefaultJSONProvider

from bookinghub.utils.common import format_time, format_date


class BookingJSONProvider(DefaultJSONProvider):
    """
    JSON provider that can handle Decimal and wall-clock values
    Money goes out as a number, dates as YYYY-MM-DD and times as HH:MM
    """
    sort_keys = False

    @staticmethod
    def default(obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, date):
            return format_date(obj)
        if isinstance(obj, time):
            return format_time(obj)
        return DefaultJSONProvider.default(obj)
