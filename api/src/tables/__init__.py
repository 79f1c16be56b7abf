from .payment import Payment, Status, TERMINAL_STATUSES, ALLOWED_TRANSITIONS, can_transition
