import logging
from datetime import datetime, timezone
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from api.v1 import payments, webhooks
from db.memory import PaymentStore
from services.payment import PaymentServiceError
from services.yookassa import create_yookassa_client
from settings import settings, yookassa_settings


VERSION = '0.1.0'

logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s %(name)s %(levelname)s: %(message)s'
)

logger = logging.getLogger('payment-api')


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.payment_store = PaymentStore()
    app.state.yookassa_client = create_yookassa_client(yookassa_settings, return_url=settings.frontend_url)

    logger.info(f'environment: {settings.environment}, frontend url: {settings.frontend_url}')
    logger.info(f'yookassa shop {yookassa_settings.shop_id}, test mode: {yookassa_settings.is_test_mode}')

    yield

    await app.state.yookassa_client.aclose()


app = FastAPI(
    title='YooKassa Payment Demo',
    version=VERSION,
    lifespan=lifespan,
    docs_url='/api/openapi',
    openapi_url='/api/openapi.json',
    default_response_class=ORJSONResponse
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*']
)

app.include_router(payments.router, prefix='/api/payments', tags=['payments'])
app.include_router(webhooks.router, prefix='/api/webhooks', tags=['webhooks'])


def error_response(status_code: int, code: str, message: str) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status_code,
        content={'error': {'code': code, 'message': message}}
    )


@app.exception_handler(PaymentServiceError)
async def payment_service_error_handler(request: Request, exc: PaymentServiceError):
    return error_response(exc.status_code, exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    message = '; '.join(
        f'{".".join(str(part) for part in error["loc"])}: {error["msg"]}'
        for error in exc.errors()
    )
    return error_response(400, 'invalid_request', message or 'Invalid request')


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.error(f'{request.method} {request.url.path} failed', exc_info=exc)
    return error_response(500, 'internal_error', 'Internal server error')


@app.get('/health')
async def health():
    return {'status': 'ok', 'timestamp': datetime.now(timezone.utc).isoformat()}


@app.get('/')
async def root():
    return {
        'message': 'YooKassa Payment Backend',
        'version': VERSION,
        'environment': settings.environment
    }


if __name__ == '__main__':
    import uvicorn

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
