import sys
import httpx
import asyncio
import logging
import argparse
from decimal import Decimal, InvalidOperation

from .api import ApiClient, PaymentStatusResponse
from .flow import PaymentFlow
from .settings import client_settings


STATUS_MESSAGES = {
    'pending': 'Waiting for payment...',
    'waiting_for_capture': 'Payment authorized, waiting for capture...',
    'succeeded': 'Payment completed successfully!',
    'canceled': 'Payment was canceled',
}


def print_status(status: PaymentStatusResponse):
    line = f'[{status.status}] {STATUS_MESSAGES[status.status]}'
    if status.paid_at:
        line += f' Paid at {status.paid_at.isoformat()}'
    print(line, flush=True)


async def run(amount: Decimal, description: str | None, base_url: str, interval: float) -> int:
    api_client = ApiClient(httpx.AsyncClient(base_url=base_url, timeout=client_settings.request_timeout))
    flow = PaymentFlow(api_client, poll_interval=interval, on_status=print_status)

    try:
        payment = await flow.submit(amount, description)
        if payment is None:
            print(f'Error: {flow.error}', file=sys.stderr)
            return 1

        print(f'Payment {payment.id}: {payment.amount.value} {payment.amount.currency}')
        if payment.description:
            print(f'Description: {payment.description}')
        print(f'Open to pay: {payment.confirmation.confirmation_url}')
        print(f'QR code: {flow.qr_code_url}')

        flow.proceed_to_status()
        result = await flow.wait_for_result()
        return 0 if result.status == 'succeeded' else 1
    finally:
        await flow.close()
        await api_client.aclose()


def parse_amount(value: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation:
        raise argparse.ArgumentTypeError(f'invalid amount "{value}"')

    if not amount.is_finite():
        raise argparse.ArgumentTypeError(f'invalid amount "{value}"')
    return amount


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Create a test YooKassa payment and wait for its result')
    parser.add_argument('amount', type=parse_amount, help='Amount in rubles (1 - 100000)')
    parser.add_argument('--description', default=None)
    parser.add_argument('--base-url', default=client_settings.base_url)
    parser.add_argument('--interval', type=float, default=client_settings.poll_interval, help='Polling interval, seconds')
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING, format='%(asctime)s %(levelname)s: %(message)s')
    try:
        sys.exit(asyncio.run(run(args.amount, args.description, args.base_url, args.interval)))
    except KeyboardInterrupt:
        sys.exit(130)
