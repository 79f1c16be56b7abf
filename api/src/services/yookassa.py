import httpx
import logging
from uuid import uuid4
from decimal import Decimal
from datetime import datetime
from typing import Any
from dataclasses import dataclass
from fastapi import Request
from pydantic import BaseModel, ValidationError

import tables
from settings import YookassaSettings


logger = logging.getLogger('yookassa-client')

DEFAULT_DESCRIPTION = 'Payment via demo app'


class GatewayError(Exception):
    def __init__(self, status_code: int | None, body: str):
        super().__init__(f'yookassa request failed: {status_code} {body}')
        self.status_code = status_code
        self.body = body


class RemoteAmount(BaseModel):
    value: str
    currency: str


class RemoteConfirmation(BaseModel):
    type: str
    confirmation_url: str | None = None


class RemotePayment(BaseModel):
    id: str
    status: tables.Status
    amount: RemoteAmount
    description: str | None = None
    confirmation: RemoteConfirmation | None = None
    created_at: datetime
    test: bool
    paid: bool = False
    metadata: dict[str, Any] | None = None


def format_amount(amount: Decimal) -> str:
    return f'{amount:.2f}'


@dataclass(frozen=True)
class YookassaClient:
    client: httpx.AsyncClient
    return_url: str

    async def create_payment(self, amount: Decimal, description: str | None = None) -> RemotePayment:
        # https://yookassa.ru/developers/api#create_payment
        return await self._request(
            'POST',
            '/v3/payments',
            headers={'Idempotence-Key': str(uuid4())},
            json={
                'amount': {
                    'value': format_amount(amount),
                    'currency': 'RUB'
                },
                'confirmation': {
                    'type': 'redirect',
                    'return_url': self.return_url
                },
                'description': description or DEFAULT_DESCRIPTION,
                # Одностадийная оплата, подтверждать списание не нужно
                'capture': True,
                'test': True
            }
        )

    async def get_payment(self, external_id: str) -> RemotePayment:
        # https://yookassa.ru/developers/api#get_payment
        return await self._request('GET', f'/v3/payments/{external_id}')

    async def _request(self, method: str, url: str, **kwargs) -> RemotePayment:
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f'{method} {url} failed: {e!r}')
            raise GatewayError(None, str(e)) from e

        if not response.is_success:
            logger.error(f'{method} {url} responded with {response.status_code}: {response.text}')
            raise GatewayError(response.status_code, response.text)

        try:
            return RemotePayment.model_validate_json(response.content)
        except ValidationError as e:
            logger.error(f'{method} {url} returned unexpected payload: {response.text}')
            raise GatewayError(response.status_code, response.text) from e

    async def aclose(self):
        await self.client.aclose()


def create_yookassa_client(settings: YookassaSettings, return_url: str) -> YookassaClient:
    return YookassaClient(
        client=httpx.AsyncClient(
            base_url=settings.base_url,
            auth=httpx.BasicAuth(settings.shop_id, settings.secret_key),
            timeout=settings.connection_timeout_sec
        ),
        return_url=return_url
    )


def get_yookassa_client(request: Request) -> YookassaClient:
    return request.app.state.yookassa_client
