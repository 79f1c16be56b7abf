import httpx
from uuid import UUID
from decimal import Decimal
from datetime import datetime
from typing import Literal
from pydantic import BaseModel


Status = Literal['pending', 'waiting_for_capture', 'succeeded', 'canceled']

TERMINAL_STATUSES: frozenset[Status] = frozenset(('succeeded', 'canceled'))


class ApiError(Exception):
    def __init__(self, message: str, status_code: int):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class PaymentAmount(BaseModel):
    value: str
    currency: str


class PaymentConfirmation(BaseModel):
    type: str
    confirmation_url: str


class CreatePaymentResponse(BaseModel):
    id: UUID
    status: Status
    amount: PaymentAmount
    confirmation: PaymentConfirmation
    description: str | None = None
    test: bool
    created_at: datetime


class PaymentStatusResponse(BaseModel):
    id: UUID
    status: Status
    amount: PaymentAmount
    created_at: datetime
    test: bool
    paid_at: datetime | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class ApiClient:
    '''Клиент HTTP API бэкенда, то же, что делает браузерный фронтенд'''

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    async def create_payment(self, amount: Decimal, description: str | None = None) -> CreatePaymentResponse:
        body: dict[str, object] = {'amount': str(amount)}
        if description:
            body['description'] = description

        response = await self.client.post('/api/payments', json=body)
        _raise_for_error(response)
        return CreatePaymentResponse.model_validate_json(response.content)

    async def get_payment_status(self, payment_id: UUID | str) -> PaymentStatusResponse:
        response = await self.client.get(f'/api/payments/{payment_id}')
        _raise_for_error(response)
        return PaymentStatusResponse.model_validate_json(response.content)

    async def aclose(self):
        await self.client.aclose()


def _raise_for_error(response: httpx.Response):
    if response.is_success:
        return

    message = response.reason_phrase or f'HTTP {response.status_code}'
    try:
        message = response.json()['error']['message']
    except (ValueError, KeyError, TypeError):
        ...
    raise ApiError(message, response.status_code)
