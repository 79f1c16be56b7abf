from typing import Annotated
from uuid import UUID
from decimal import Decimal
from fastapi import APIRouter, Body, Depends, Path, status
from pydantic import BaseModel, Field

from services.payment import (
    PaymentService, PaymentDoesntExistError, CreatedPayment, PaymentStatusInfo, get_payment_service
)


router = APIRouter()


class PaymentBody(BaseModel):
    amount: Decimal = Field(description='Сумма в рублях, от 1 до 100000 включительно')
    # Ограничение Yookassa на длину описания
    description: str | None = Field(default=None, max_length=128)


@router.post(
    path='',
    status_code=status.HTTP_201_CREATED,
    response_model_exclude_none=True,
    description=
    'Создает платеж посредством Yookassa<br>'
    'Пользователю необходимо отсканировать QR код со ссылкой `confirmation.confirmation_url` и произвести платеж'
)
async def create_payment(
    body: Annotated[PaymentBody, Body()],
    payments_service: Annotated[PaymentService, Depends(get_payment_service)]
) -> CreatedPayment:
    return await payments_service.create(amount=body.amount, description=body.description)


@router.get(
    path='/{payment_id}',
    response_model_exclude_none=True,
    description='Возвращает текущий статус платежа, `paid_at` присутствует только у успешных платежей'
)
async def get_payment_status(
    payment_id: Annotated[str, Path()],
    payments_service: Annotated[PaymentService, Depends(get_payment_service)]
) -> PaymentStatusInfo:
    try:
        id = UUID(payment_id)
    except ValueError:
        raise PaymentDoesntExistError('Payment with specified ID not found')

    return payments_service.get_status(id)
