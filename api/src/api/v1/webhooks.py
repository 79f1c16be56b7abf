import logging
from typing import Literal
from fastapi import APIRouter, Request, Response, status
from pydantic import BaseModel, ValidationError

from db.memory import get_store
from services.notification import Notification, get_notification_service


logger = logging.getLogger('webhook-receiver')

router = APIRouter()


class WebhookAck(BaseModel):
    success: Literal[True] = True


@router.post(
    path='/yookassa',
    response_model=WebhookAck,
    responses={400: {'description': 'Некорректное уведомление'}, 500: {'description': 'Yookassa повторит доставку'}},
    description=
    'Принимает уведомления Yookassa об изменении статуса платежа<br>'
    'Отвечает успехом и для неизвестных платежей, чтобы Yookassa не повторяла доставку'
)
async def receive_yookassa_webhook(request: Request):
    # Тело разбираем сами, на некорректное уведомление отвечаем 400 без тела
    try:
        notification = Notification.model_validate_json(await request.body())
    except ValidationError:
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    # Сервис собираем здесь же, любая ошибка должна дать 500 без тела
    try:
        notification_service = get_notification_service(get_store(request))
        notification_service.handle(notification)
    except Exception:
        logger.exception(f'failed to process webhook {notification.event} for {notification.object.id}')
        return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return WebhookAck()
