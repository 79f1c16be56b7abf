import asyncio
import httpx
import logging
from uuid import UUID
from decimal import Decimal
from urllib.parse import quote
from typing import Callable, Literal

from .api import ApiClient, ApiError, CreatePaymentResponse, PaymentStatusResponse


logger = logging.getLogger('payment-client')

View = Literal['form', 'qr', 'status']

MIN_AMOUNT = Decimal(1)
MAX_AMOUNT = Decimal(100000)

QR_CODE_SERVICE_URL = 'https://api.qrserver.com/v1/create-qr-code/?size=300x300&data='


class FlowStateError(Exception):
    ...


def qr_code_url(confirmation_url: str) -> str:
    return QR_CODE_SERVICE_URL + quote(confirmation_url, safe='')


class StatusPoller:
    '''
    Периодически запрашивает статус платежа

    Останавливается сам, как только статус становится финальным (`succeeded` или `canceled`),
    либо при вызове `stop()`. Ошибки запроса не прерывают опрос
    '''

    def __init__(
        self,
        api_client: ApiClient,
        payment_id: UUID,
        on_update: Callable[[PaymentStatusResponse], None],
        on_error: Callable[[Exception], None] | None = None,
        interval: float = 3.0
    ):
        self.api_client = api_client
        self.payment_id = payment_id
        self.on_update = on_update
        self.on_error = on_error
        self.interval = interval
        self.last: PaymentStatusResponse | None = None
        self._task: asyncio.Task[PaymentStatusResponse] | None = None

    def start(self):
        if self._task is not None:
            raise FlowStateError('poller is already started')
        self._task = asyncio.create_task(self._run())

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def wait(self) -> PaymentStatusResponse:
        if self._task is None:
            raise FlowStateError('poller is not started')
        return await self._task

    async def stop(self):
        if self._task is None or self._task.done():
            return

        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            ...

    async def _run(self) -> PaymentStatusResponse:
        while True:
            try:
                payment = await self.api_client.get_payment_status(self.payment_id)
            except (ApiError, httpx.HTTPError) as e:
                logger.warning(f'failed to get status of payment {self.payment_id}: {e}')
                if self.on_error:
                    self.on_error(e)
            else:
                self.last = payment
                self.on_update(payment)
                if payment.is_terminal:
                    return payment

            await asyncio.sleep(self.interval)


class PaymentFlow:
    '''Форма -> QR код -> статус платежа'''

    def __init__(
        self,
        api_client: ApiClient,
        poll_interval: float = 3.0,
        on_status: Callable[[PaymentStatusResponse], None] | None = None
    ):
        self.api_client = api_client
        self.poll_interval = poll_interval
        self.on_status = on_status

        self.view: View = 'form'
        self.payment: CreatePaymentResponse | None = None
        self.status: PaymentStatusResponse | None = None
        self.error: str | None = None
        self._poller: StatusPoller | None = None

    @property
    def qr_code_url(self) -> str | None:
        if self.payment is None:
            return None
        return qr_code_url(self.payment.confirmation.confirmation_url)

    async def submit(self, amount: Decimal, description: str | None = None) -> CreatePaymentResponse | None:
        self._expect_view('form')
        self.error = None

        if not MIN_AMOUNT <= amount <= MAX_AMOUNT:
            self.error = 'Payment amount must be between 1 and 100000 rubles'
            return None

        try:
            self.payment = await self.api_client.create_payment(amount, description)
        except (ApiError, httpx.HTTPError) as e:
            logger.warning(f'failed to create payment: {e}')
            self.error = str(e) or 'Failed to create payment'
            return None

        self.view = 'qr'
        return self.payment

    def proceed_to_status(self):
        self._expect_view('qr')
        assert self.payment is not None

        self.view = 'status'
        self._poller = StatusPoller(
            api_client=self.api_client,
            payment_id=self.payment.id,
            on_update=self._on_update,
            interval=self.poll_interval
        )
        self._poller.start()

    async def wait_for_result(self) -> PaymentStatusResponse:
        self._expect_view('status')
        assert self._poller is not None
        return await self._poller.wait()

    async def cancel(self):
        self._expect_view('qr')
        await self._reset()

    async def create_new(self):
        self._expect_view('status')
        await self._reset()

    async def close(self):
        if self._poller is not None:
            await self._poller.stop()

    @property
    def polling(self) -> bool:
        return self._poller is not None and self._poller.running

    def _on_update(self, status: PaymentStatusResponse):
        self.status = status
        if self.on_status:
            self.on_status(status)

    async def _reset(self):
        await self.close()
        self._poller = None
        self.payment = None
        self.status = None
        self.error = None
        self.view = 'form'

    def _expect_view(self, view: View):
        if self.view != view:
            raise FlowStateError(f'expected view "{view}", current view is "{self.view}"')
