import threading
from uuid import UUID
from datetime import datetime, timezone
from dataclasses import replace
from fastapi import Request

import tables


class PaymentStore:
    '''
    Хранилище платежей в памяти процесса, живет столько же, сколько приложение

    Записи неизменяемы, наружу отдаются как есть, обновление заменяет запись целиком
    '''

    def __init__(self):
        self._payments: dict[UUID, tables.Payment] = {}
        self._ids_by_external_id: dict[str, UUID] = {}
        self._lock = threading.Lock()

    def save(self, payment: tables.Payment):
        with self._lock:
            previous = self._payments.get(payment.id)
            if (
                previous is not None
                and previous.external_id is not None
                and previous.external_id != payment.external_id
                and self._ids_by_external_id.get(previous.external_id) == payment.id
            ):
                # Ключ мог уже перейти к другой записи, ее не трогаем
                del self._ids_by_external_id[previous.external_id]

            self._payments[payment.id] = payment
            if payment.external_id is not None:
                self._ids_by_external_id[payment.external_id] = payment.id

    def find_by_id(self, id: UUID) -> tables.Payment | None:
        with self._lock:
            return self._payments.get(id)

    def find_by_external_id(self, external_id: str) -> tables.Payment | None:
        with self._lock:
            id = self._ids_by_external_id.get(external_id)
            return self._payments.get(id) if id is not None else None

    def update_status(self, id: UUID, status: tables.Status) -> tables.Payment | None:
        with self._lock:
            payment = self._payments.get(id)
            if payment is None:
                return None

            # updated_at >= created_at, даже если часы сдвинулись назад
            updated_at = max(datetime.now(timezone.utc), payment.created_at)
            payment = replace(payment, status=status, updated_at=updated_at)
            self._payments[id] = payment
            return payment

    def get_all(self) -> list[tables.Payment]:
        with self._lock:
            return list(self._payments.values())


def get_store(request: Request) -> PaymentStore:
    return request.app.state.payment_store
