from collections import namedtuple

from bookinghub.errors import ConflictError, ValidationError
from bookinghub.utils.common import add_minutes, intervals_overlap, iter_times

Slot = namedtuple('Slot', ['start', 'end'])


class SlotValidator:
    """Checks candidate (staff, date, start, end) windows against the book.

    Only non-cancelled appointments occupy time. Intervals are half-open,
    so an appointment ending at 10:30 does not clash with one starting at
    10:30.
    """

    def __init__(self, storage):
        self.storage = storage

    def find_conflict(self, staff_id, date, start_time, end_time, exclude_appointment_id=None):
        """Return the earliest-starting appointment overlapping the window, or None"""
        if start_time >= end_time:
            raise ValidationError.for_field('end_time', 'End time must be after start time.')

        for appointment in self.storage.get_staff_appointments(staff_id, date):
            if appointment.id == exclude_appointment_id:
                continue
            if intervals_overlap(start_time, end_time, appointment.start_time, appointment.end_time):
                return appointment
        return None

    def validate(self, staff_id, date, start_time, end_time, exclude_appointment_id=None):
        conflict = self.find_conflict(staff_id, date, start_time, end_time, exclude_appointment_id)
        if conflict is not None:
            raise ConflictError(conflict.id)

    def open_slots(self, staff_id, date, duration, interval=30, not_before=None):
        """Start/end pairs a customer may pick for a service of `duration` minutes.

        Candidates step through each active availability window of the
        staff member for the weekday of `date`, must fit inside the window,
        and must not overlap a booked appointment. `not_before` drops
        candidates starting earlier (used for today's date).
        """
        windows = self.storage.get_availability(staff_id, day_of_week=date.weekday(), active_only=True)
        if not windows:
            return []

        booked = self.storage.get_staff_appointments(staff_id, date)
        slots = set()

        for window in windows:
            for start in iter_times(window.start_time, window.end_time, interval):
                if not_before is not None and start < not_before:
                    continue
                try:
                    end = add_minutes(start, duration)
                except ValueError:
                    break
                if end > window.end_time:
                    break
                if any(intervals_overlap(start, end, a.start_time, a.end_time) for a in booked):
                    continue
                slots.add(Slot(start, end))

        return sorted(slots)
