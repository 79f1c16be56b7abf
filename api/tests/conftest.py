import os
import sys
import pathlib
import pytest
import httpx
from asgi_lifespan import LifespanManager

sys.path.append(str(pathlib.Path(__file__).parent.parent/'src'))
sys.path.append(str(pathlib.Path(__file__).parent))

# https://yookassa.ru/developers/payment-acceptance/testing-and-going-live/testing
os.environ.setdefault('PAYMENT_DEMO_YOOKASSA_SHOP_ID', '1245745')
os.environ.setdefault('PAYMENT_DEMO_YOOKASSA_SECRET_KEY', 'test_EYVo1Qh3f5Yg2VJk-x6KNPBrF2AIokmz6-WcNOK84Do')

from main import app
from db.memory import PaymentStore


@pytest.fixture
async def api_client():
    async with LifespanManager(app):
        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url='http://tests'
        ) as client:
            yield client


@pytest.fixture
def store(api_client: httpx.AsyncClient) -> PaymentStore:
    return app.state.payment_store
