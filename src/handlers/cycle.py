"""
Lambda handler for the current cycle state.
"""
from datetime import date
from typing import Dict
import json

from aws_lambda_powertools import Tracer
from aws_lambda_powertools.utilities.typing import LambdaContext

from src.services.cycle import compute_cycle_state, get_month_days, project_cycles
from src.services.history import extract_historical_cycles
from src.services.phase import get_phase_description
from src.services.repository import AppDataRepository
from src.services.statistics import (
    calculate_cycle_statistics,
    calculate_mood_distribution,
    calculate_symptom_frequencies,
    summarize_cycles,
)
from src.utils.logging import bind_user, logger
from src.utils.storage import create_store

tracer = Tracer()


def parse_date(value: str) -> date:
    """Parse a YYYY-MM-DD query parameter."""
    return date.fromisoformat(value)


@logger.inject_lambda_context
@tracer.capture_lambda_handler
def handler(event: Dict, context: LambdaContext) -> Dict:
    """
    Handle cycle state request.

    Query parameters:
        user_id: Required user identifier
        date: Optional reference date (YYYY-MM-DD), defaults to today
        month: Optional month (YYYY-MM) to include calendar days for

    Args:
        event: API Gateway event
        context: Lambda context

    Returns:
        API Gateway response
    """
    try:
        query_params = event.get("queryStringParameters", {}) or {}
        user_id = query_params.get("user_id")

        if not user_id:
            return {
                "statusCode": 400,
                "body": json.dumps({
                    "error": "user_id is required"
                })
            }

        try:
            reference_date = parse_date(query_params["date"]) if query_params.get("date") else date.today()
            month = parse_date(f"{query_params['month']}-01") if query_params.get("month") else None
        except ValueError as e:
            return {
                "statusCode": 400,
                "body": json.dumps({
                    "error": f"Invalid date: {str(e)}"
                })
            }

        bind_user(user_id)
        repository = AppDataRepository(create_store(user_id))
        config = repository.load_cycle_config()

        if config is None:
            logger.info("Cycle not configured", extra={"user_id": user_id})
            return {
                "statusCode": 404,
                "body": json.dumps({
                    "error": "Cycle configuration not found"
                })
            }

        state = compute_cycle_state(config, reference_date)
        records = repository.load_daily_records()
        cycles = extract_historical_cycles(records)

        response = {
            "user_id": user_id,
            "date": reference_date.isoformat(),
            "state": state.model_dump(mode="json"),
            "phase_description": get_phase_description(state.phase),
            "projections": [p.model_dump(mode="json") for p in project_cycles(config, reference_date)],
            "statistics": calculate_cycle_statistics(cycles).model_dump() if cycles else None,
            "warnings": config.validate_ranges(),
            "analytics": {
                "symptoms": [s.model_dump() for s in calculate_symptom_frequencies(records, today=reference_date)],
                "moods": [m.model_dump() for m in calculate_mood_distribution(records)],
                "recent_cycles": [c.model_dump(mode="json") for c in summarize_cycles(cycles)]
            }
        }
        if month is not None:
            response["calendar"] = [
                day.model_dump(mode="json")
                for day in get_month_days(config, month, today=reference_date)
            ]

        logger.info("Cycle state computed", extra={
            "user_id": user_id,
            "day_of_cycle": state.day_of_cycle,
            "phase": state.phase.value
        })

        return {
            "statusCode": 200,
            "body": json.dumps(response)
        }

    except Exception as e:
        logger.exception("Error computing cycle state")
        return {
            "statusCode": 500,
            "body": json.dumps({
                "error": str(e)
            })
        }
