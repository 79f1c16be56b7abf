import json
import httpx
import pytest
from uuid import UUID, uuid4
from decimal import Decimal
from pytest_httpx import HTTPXMock
from starlette import status

from db.memory import PaymentStore
from helpers import create_payment, yookassa_payment, make_payment, YOOKASSA_PAYMENTS_URL


@pytest.mark.parametrize('amount, value', [
    (1, '1.00'),
    (150, '150.00'),
    (99.99, '99.99'),
    (100000, '100000.00'),
])
async def test_create_payment(
    api_client: httpx.AsyncClient,
    store: PaymentStore,
    httpx_mock: HTTPXMock,
    amount: float,
    value: str
):
    remote = yookassa_payment(id='ext-1', value=value, description='x')
    httpx_mock.add_response(method='POST', url=YOOKASSA_PAYMENTS_URL, json=remote)

    response = await create_payment(api_client, amount=amount, description='x')

    assert response.status_code == status.HTTP_201_CREATED, response.text
    response_json = response.json()
    assert response_json['status'] == 'pending'
    assert response_json['amount'] == {'value': value, 'currency': 'RUB'}
    assert response_json['confirmation'] == {
        'type': 'qr',
        'confirmation_url': remote['confirmation']['confirmation_url']
    }
    assert response_json['description'] == 'x'
    assert response_json['test'] is True
    assert 'created_at' in response_json

    payment = store.find_by_id(UUID(response_json['id']))
    assert payment is not None
    assert payment.external_id == 'ext-1'
    assert payment.amount == Decimal(str(amount))
    assert payment.confirmation_url == remote['confirmation']['confirmation_url']

    request = httpx_mock.get_request()
    assert request is not None
    assert json.loads(request.content)['amount'] == {'value': value, 'currency': 'RUB'}
    assert request.headers['Idempotence-Key']


async def test_create_payment_keeps_gateway_status(
    api_client: httpx.AsyncClient,
    store: PaymentStore,
    httpx_mock: HTTPXMock
):
    httpx_mock.add_response(
        method='POST',
        url=YOOKASSA_PAYMENTS_URL,
        json=yookassa_payment(status='waiting_for_capture')
    )

    response = await create_payment(api_client)

    assert response.status_code == status.HTTP_201_CREATED, response.text
    assert response.json()['status'] == 'waiting_for_capture'
    payment = store.find_by_id(UUID(response.json()['id']))
    assert payment is not None and payment.status == 'waiting_for_capture'


@pytest.mark.parametrize('amount', [0, 0.99, -5, 100000.01, 200000])
async def test_create_payment_with_invalid_amount(
    api_client: httpx.AsyncClient,
    store: PaymentStore,
    httpx_mock: HTTPXMock,
    amount: float
):
    response = await create_payment(api_client, amount=amount)

    assert response.status_code == status.HTTP_400_BAD_REQUEST, response.text
    assert response.json() == {
        'error': {
            'code': 'invalid_request',
            'message': 'Payment amount must be between 1 and 100000 rubles'
        }
    }
    assert store.get_all() == []
    assert httpx_mock.get_requests() == []


@pytest.mark.parametrize('body', [{}, {'amount': 'a lot'}, {'amount': 100, 'description': 'x' * 129}])
async def test_create_payment_with_malformed_body(
    api_client: httpx.AsyncClient,
    store: PaymentStore,
    httpx_mock: HTTPXMock,
    body: dict
):
    response = await api_client.post('/api/payments', json=body)

    assert response.status_code == status.HTTP_400_BAD_REQUEST, response.text
    assert response.json()['error']['code'] == 'invalid_request'
    assert store.get_all() == []
    assert httpx_mock.get_requests() == []


async def test_create_payment_gateway_error(
    api_client: httpx.AsyncClient,
    store: PaymentStore,
    httpx_mock: HTTPXMock
):
    httpx_mock.add_response(
        method='POST',
        url=YOOKASSA_PAYMENTS_URL,
        status_code=500,
        json={'type': 'error', 'code': 'internal_server_error'}
    )

    response = await create_payment(api_client)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR, response.text
    assert response.json() == {'error': {'code': 'internal_error', 'message': 'Failed to create payment'}}
    assert store.get_all() == []


async def test_create_payment_gateway_timeout(
    api_client: httpx.AsyncClient,
    store: PaymentStore,
    httpx_mock: HTTPXMock
):
    httpx_mock.add_exception(httpx.ReadTimeout('timed out'), method='POST', url=YOOKASSA_PAYMENTS_URL)

    response = await create_payment(api_client)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR, response.text
    assert response.json()['error']['code'] == 'internal_error'
    assert store.get_all() == []


async def test_get_payment_status_pending(api_client: httpx.AsyncClient, store: PaymentStore):
    payment = make_payment(amount='150')
    store.save(payment)

    response = await api_client.get(f'/api/payments/{payment.id}')

    assert response.status_code == status.HTTP_200_OK, response.text
    response_json = response.json()
    assert response_json['id'] == str(payment.id)
    assert response_json['status'] == 'pending'
    assert response_json['amount'] == {'value': '150.00', 'currency': 'RUB'}
    assert response_json['test'] is True
    assert 'created_at' in response_json
    assert 'paid_at' not in response_json


async def test_get_payment_status_succeeded(api_client: httpx.AsyncClient, store: PaymentStore):
    payment = make_payment()
    store.save(payment)
    updated = store.update_status(payment.id, 'succeeded')
    assert updated is not None

    response = await api_client.get(f'/api/payments/{payment.id}')

    assert response.status_code == status.HTTP_200_OK, response.text
    response_json = response.json()
    assert response_json['status'] == 'succeeded'
    assert 'paid_at' in response_json


@pytest.mark.parametrize('payment_id', [str(uuid4()), 'not-a-uuid'])
async def test_get_unknown_payment(api_client: httpx.AsyncClient, payment_id: str):
    response = await api_client.get(f'/api/payments/{payment_id}')

    assert response.status_code == status.HTTP_404_NOT_FOUND, response.text
    assert response.json() == {
        'error': {
            'code': 'not_found',
            'message': 'Payment with specified ID not found'
        }
    }
