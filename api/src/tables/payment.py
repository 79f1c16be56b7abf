from typing import Literal
from datetime import datetime
from uuid import UUID
from decimal import Decimal
from dataclasses import dataclass


Status = Literal['pending', 'waiting_for_capture', 'succeeded', 'canceled']

TERMINAL_STATUSES: frozenset[Status] = frozenset(('succeeded', 'canceled'))

# https://yookassa.ru/developers/payment-acceptance/getting-started/payment-process#payment-statuses
ALLOWED_TRANSITIONS: dict[Status, frozenset[Status]] = {
    'pending': frozenset(('waiting_for_capture', 'succeeded', 'canceled')),
    'waiting_for_capture': frozenset(('succeeded', 'canceled')),
    'succeeded': frozenset(),
    'canceled': frozenset(),
}


@dataclass(frozen=True)
class Payment:
    id: UUID
    external_id: str | None
    amount: Decimal
    status: Status
    confirmation_url: str | None
    created_at: datetime
    updated_at: datetime

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


def can_transition(current: Status, new: Status) -> bool:
    return new in ALLOWED_TRANSITIONS[current]
