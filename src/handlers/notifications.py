"""
Lambda handler for rescheduling cycle reminders.
"""
from typing import Dict
import json

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext
from pydantic import ValidationError

from src.models.notification import NotificationSettings
from src.services.notifications import NotificationScheduler, StoreNotificationBackend
from src.services.repository import AppDataRepository
from src.utils.logging import bind_user, logger
from src.utils.storage import create_store

tracer = Tracer()


@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict, context: LambdaContext) -> Dict:
    """
    Re-plan a user's reminders.

    The body carries ``user_id`` and optionally new ``settings``, which are
    saved before scheduling.
    """
    try:
        body = json.loads(event.get("body") or "{}")
        user_id = body.get("user_id")

        if not user_id:
            return {
                "statusCode": 400,
                "body": json.dumps({
                    "error": "user_id is required"
                })
            }

        bind_user(user_id)
        store = create_store(user_id)
        repository = AppDataRepository(store)

        if body.get("settings") is not None:
            try:
                settings = NotificationSettings(**body["settings"])
            except ValidationError as e:
                return {
                    "statusCode": 400,
                    "body": json.dumps({
                        "error": f"Invalid settings: {str(e)}"
                    })
                }
            repository.save_notification_settings(settings)
        else:
            settings = repository.load_notification_settings()

        scheduler = NotificationScheduler(StoreNotificationBackend(store))
        scheduled = scheduler.schedule_all(repository.load_cycle_config(), settings)

        return {
            "statusCode": 200,
            "body": json.dumps({
                "user_id": user_id,
                "scheduled": [reminder.model_dump(mode="json") for reminder in scheduled]
            })
        }

    except Exception as e:
        logger.exception("Error scheduling reminders")
        return {
            "statusCode": 500,
            "body": json.dumps({
                "error": str(e)
            })
        }
