class SchedulingError(Exception):
    """Base class for scheduling core errors."""


class InvalidScheduleError(SchedulingError, ValueError):
    """Raised when hours or an override are inconsistent (e.g. open >= close)."""


class StoreReadError(SchedulingError):
    """Raised by a store when a read fails for infrastructure reasons."""


class BookingWriteError(SchedulingError):
    """Raised when a booking record could not be persisted."""


class InvalidBookingStateError(SchedulingError):
    """Raised when a booking attempt step is called out of order."""

    def __init__(self, current_state, expected_states):
        self.current_state = current_state
        self.expected_states = tuple(expected_states)
        expected = ", ".join(str(s.value) for s in self.expected_states)
        super().__init__(
            f"Booking attempt is in state '{current_state.value}', "
            f"expected one of: {expected}"
        )


class InvalidStatusTransitionError(SchedulingError, ValueError):
    """Raised when a booking cannot move from its current status to the requested one."""

    def __init__(self, current_status, requested_status):
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(
            f"Cannot change booking status from '{current_status}' "
            f"to '{requested_status}'"
        )
