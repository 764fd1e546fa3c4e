from eato.shared.models.enums import BookingStatus


class BookingStateMachine:
    ALLOWED_TRANSITIONS = {
        BookingStatus.PENDING: [BookingStatus.ACCEPTED, BookingStatus.DECLINED],
        BookingStatus.ACCEPTED: [BookingStatus.COMPLETED],
        BookingStatus.DECLINED: [],
        BookingStatus.COMPLETED: [],
    }

    # Statuses that block a new booking for the same truck and event
    ACTIVE_STATUSES = (BookingStatus.PENDING, BookingStatus.ACCEPTED)

    @staticmethod
    def can_transition(current_status: str, new_status: str) -> bool:
        try:
            curr = BookingStatus(current_status)
            new = BookingStatus(new_status)
            return new in BookingStateMachine.ALLOWED_TRANSITIONS.get(curr, [])
        except ValueError:
            return False
