import logging
from fastapi import Depends
from typing import Annotated, Literal
from dataclasses import dataclass
from pydantic import BaseModel, ConfigDict, Field

import tables
from db.memory import PaymentStore, get_store


logger = logging.getLogger('webhook-receiver')


# https://yookassa.ru/developers/using-api/webhooks#events
EVENT_STATUSES: dict[str, tables.Status] = {
    'payment.succeeded': 'succeeded',
    'payment.canceled': 'canceled',
    'payment.waiting_for_capture': 'waiting_for_capture',
}


class NotificationObject(BaseModel):
    # Числовой id приводим к строке, такой платеж просто не будет найден
    model_config = ConfigDict(extra='allow', coerce_numbers_to_str=True)

    id: str = Field(min_length=1)


class Notification(BaseModel):
    model_config = ConfigDict(extra='allow')

    type: Literal['notification']
    event: str = Field(min_length=1)
    object: NotificationObject


@dataclass(frozen=True)
class NotificationService:
    store: PaymentStore

    def handle(self, notification: Notification) -> tables.Payment | None:
        external_id = notification.object.id
        logger.info(f'received webhook {notification.event} for yookassa payment {external_id}')

        payment = self.store.find_by_external_id(external_id)
        if payment is None:
            # Отвечаем успехом, иначе Yookassa будет повторять уведомление,
            # например после перезапуска, когда хранилище в памяти пустое
            logger.warning(f'yookassa payment {external_id} is not found, ignoring')
            return None

        status = EVENT_STATUSES.get(notification.event)
        if status is None:
            logger.warning(f'unknown webhook event "{notification.event}", ignoring')
            return None

        if status == payment.status:
            logger.info(f'payment {payment.id} is already {status}, ignoring')
            return payment

        # Порядок доставки уведомлений не гарантирован, финальный статус не откатываем
        if payment.is_terminal:
            logger.warning(f'payment {payment.id} is already {payment.status}, late {notification.event} ignored')
            return payment

        if not tables.can_transition(payment.status, status):
            logger.warning(f'payment {payment.id} can not go from {payment.status} to {status}, ignoring')
            return payment

        updated = self.store.update_status(payment.id, status)
        if updated is not None:
            logger.info(f'updated payment {payment.id} status to {status}')
        return updated


def get_notification_service(
    store: Annotated[PaymentStore, Depends(get_store)]
) -> NotificationService:
    return NotificationService(store=store)
