"""
Lambda handler for cycle predictions.
"""
from datetime import date
from typing import Dict
import hashlib
import json

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from src.models.cache import CacheConfig
from src.models.cycle import CycleConfig
from src.services.cache import SmartCache
from src.services.exceptions import StorageError
from src.services.prediction import predict, train
from src.services.repository import AppDataRepository
from src.utils.logging import bind_user, logger
from src.utils.storage import create_store

tracer = Tracer()


def prediction_cache_key(reference_date: date, config: CycleConfig) -> str:
    """
    Build the cache key for a day's prediction.

    The key carries a digest of the cycle configuration, so an edited
    configuration never serves a prediction computed from the old one.
    """
    digest = hashlib.sha256(config.model_dump_json().encode("utf-8")).hexdigest()[:16]
    return f"predictions:{reference_date.isoformat()}:{digest}"


@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict, context: LambdaContext) -> Dict:
    """
    Handle prediction request.

    Predictions are cached per reference date. The persisted model is used
    when present; otherwise (or with ``retrain=true``) a model is trained
    from the daily records and saved.

    Args:
        event: API Gateway event with user_id, optional date and retrain
        context: Lambda context

    Returns:
        API Gateway response
    """
    try:
        query_params = event.get("queryStringParameters", {}) or {}
        user_id = query_params.get("user_id")
        retrain = str(query_params.get("retrain", "")).lower() in ("1", "true", "yes")

        if not user_id:
            return {
                "statusCode": 400,
                "body": json.dumps({
                    "error": "user_id is required"
                })
            }

        try:
            reference_date = date.fromisoformat(query_params["date"]) if query_params.get("date") else date.today()
        except ValueError as e:
            return {
                "statusCode": 400,
                "body": json.dumps({
                    "error": f"Invalid date: {str(e)}"
                })
            }

        bind_user(user_id)
        store = create_store(user_id)
        repository = AppDataRepository(store)
        config = repository.load_cycle_config()

        if config is None:
            return {
                "statusCode": 404,
                "body": json.dumps({
                    "error": "Cycle configuration not found"
                })
            }

        cache = SmartCache(store, CacheConfig.from_env())
        cache_key = prediction_cache_key(reference_date, config)

        if retrain:
            cache.remove(cache_key)
        else:
            cached = cache.get(cache_key)
            if cached is not None:
                logger.debug("Serving cached prediction", extra={"user_id": user_id})
                return {
                    "statusCode": 200,
                    "body": json.dumps({
                        "user_id": user_id,
                        "cached": True,
                        "prediction": cached
                    })
                }

        model = None if retrain else repository.load_prediction_model()
        if model is None:
            model = train(repository.load_daily_records())
            logger.info("Prediction model trained", extra={
                "user_id": user_id,
                "cycle_count": model.cycle_count,
                "accuracy": model.accuracy
            })
            try:
                repository.save_prediction_model(model)
            except StorageError as e:
                # The in-memory model still serves this request; the next one retrains
                logger.warning("Could not persist prediction model", extra={
                    "user_id": user_id,
                    "error": str(e),
                    "error_type": e.__class__.__name__
                })

        prediction = predict(model, config, reference_date).model_dump(mode="json")
        cache.set(cache_key, prediction)

        return {
            "statusCode": 200,
            "body": json.dumps({
                "user_id": user_id,
                "cached": False,
                "prediction": prediction
            })
        }

    except Exception as e:
        logger.exception("Error generating prediction")
        return {
            "statusCode": 500,
            "body": json.dumps({
                "error": str(e)
            })
        }
