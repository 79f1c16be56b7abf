from uuid import uuid4
from decimal import Decimal
from datetime import datetime, timezone
from typing import Any
import httpx

import tables


YOOKASSA_PAYMENTS_URL = 'https://api.yookassa.ru/v3/payments'


# Не фикстуры, так как параметры у каждого теста свои

def yookassa_payment(
    id: str | None = None,
    status: str = 'pending',
    value: str = '150.00',
    description: str | None = 'Payment via demo app'
) -> dict[str, Any]:
    # https://yookassa.ru/developers/api#payment_object
    id = id or str(uuid4())
    return {
        'id': id,
        'status': status,
        'amount': {'value': value, 'currency': 'RUB'},
        'description': description,
        'recipient': {'account_id': '1245745', 'gateway_id': '2345678'},
        'created_at': '2026-10-18T10:00:00.000Z',
        'confirmation': {
            'type': 'redirect',
            'confirmation_url': f'https://yoomoney.ru/checkout/payments/v2/contract?orderId={id}'
        },
        'test': True,
        'paid': False,
        'refundable': False,
        'metadata': {}
    }


def notification(external_id: str, event: str = 'payment.succeeded') -> dict[str, Any]:
    # https://yookassa.ru/developers/using-api/webhooks#notification-object
    return {
        'type': 'notification',
        'event': event,
        'object': {
            'id': external_id,
            'status': event.removeprefix('payment.'),
            'paid': event == 'payment.succeeded'
        }
    }


def make_payment(
    external_id: str | None = 'ext-1',
    status: tables.Status = 'pending',
    amount: str = '150'
) -> tables.Payment:
    now = datetime.now(timezone.utc)
    return tables.Payment(
        id=uuid4(),
        external_id=external_id,
        amount=Decimal(amount),
        status=status,
        confirmation_url='https://yoomoney.ru/checkout/payments/v2/contract?orderId=ext-1',
        created_at=now,
        updated_at=now
    )


async def create_payment(api_client: httpx.AsyncClient, amount: float | str = 150, description: str | None = 'x'):
    body: dict[str, Any] = {'amount': amount}
    if description is not None:
        body['description'] = description
    return await api_client.post('/api/payments', json=body)
