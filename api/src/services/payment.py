import logging
from fastapi import Depends
from datetime import datetime, timezone
from uuid import UUID, uuid4
from decimal import Decimal
from typing import Annotated, Literal
from dataclasses import dataclass
from pydantic import BaseModel

import tables
from db.memory import PaymentStore, get_store
from services.yookassa import YookassaClient, GatewayError, get_yookassa_client, format_amount
from settings import yookassa_settings


logger = logging.getLogger('payment-service')

MIN_AMOUNT = Decimal(1)
MAX_AMOUNT = Decimal(100000)


class PaymentServiceError(Exception):
    status_code: int = 500
    code: str = 'internal_error'

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequestError(PaymentServiceError):
    status_code = 400
    code = 'invalid_request'


class PaymentDoesntExistError(PaymentServiceError):
    status_code = 404
    code = 'not_found'


class InternalError(PaymentServiceError):
    ...


class Amount(BaseModel):
    value: str
    currency: Literal['RUB'] = 'RUB'


class Confirmation(BaseModel):
    type: Literal['qr'] = 'qr'
    confirmation_url: str


class CreatedPayment(BaseModel):
    id: UUID
    status: tables.Status
    amount: Amount
    confirmation: Confirmation
    description: str | None = None
    test: bool
    created_at: datetime


class PaymentStatusInfo(BaseModel):
    id: UUID
    status: tables.Status
    amount: Amount
    created_at: datetime
    test: bool
    paid_at: datetime | None = None


@dataclass(frozen=True)
class PaymentService:
    store: PaymentStore
    yookassa_client: YookassaClient
    test_mode: bool = True

    async def create(self, amount: Decimal, description: str | None = None) -> CreatedPayment:
        if not MIN_AMOUNT <= amount <= MAX_AMOUNT:
            raise InvalidRequestError('Payment amount must be between 1 and 100000 rubles')

        try:
            remote = await self.yookassa_client.create_payment(amount, description)
        except GatewayError as e:
            # Повторно не отправляем, клиент должен сам пересоздать платеж
            logger.error(f'failed to create yookassa payment for {amount}: {e}')
            raise InternalError('Failed to create payment') from e

        if remote.confirmation is None or remote.confirmation.confirmation_url is None:
            logger.error(f'yookassa payment {remote.id} has no confirmation url')
            raise InternalError('Failed to create payment')

        now = datetime.now(timezone.utc)
        payment = tables.Payment(
            id=uuid4(),
            external_id=remote.id,
            amount=amount,
            status=remote.status,
            confirmation_url=remote.confirmation.confirmation_url,
            created_at=now,
            updated_at=now
        )
        self.store.save(payment)
        logger.info(f'created payment {payment.id} (yookassa {remote.id}) for {format_amount(amount)} RUB')

        return CreatedPayment(
            id=payment.id,
            status=payment.status,
            amount=Amount(value=format_amount(amount)),
            confirmation=Confirmation(confirmation_url=remote.confirmation.confirmation_url),
            description=remote.description,
            test=remote.test,
            created_at=payment.created_at
        )

    def get_status(self, payment_id: UUID) -> PaymentStatusInfo:
        payment = self.store.find_by_id(payment_id)
        if payment is None:
            raise PaymentDoesntExistError('Payment with specified ID not found')

        return PaymentStatusInfo(
            id=payment.id,
            status=payment.status,
            amount=Amount(value=format_amount(payment.amount)),
            created_at=payment.created_at,
            test=self.test_mode,
            paid_at=payment.updated_at if payment.status == 'succeeded' else None
        )


def get_payment_service(
    store: Annotated[PaymentStore, Depends(get_store)],
    yookassa_client: Annotated[YookassaClient, Depends(get_yookassa_client)]
) -> PaymentService:
    return PaymentService(
        store=store,
        yookassa_client=yookassa_client,
        test_mode=yookassa_settings.is_test_mode
    )
