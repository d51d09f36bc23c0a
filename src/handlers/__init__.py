"""
Lambda handlers package for AWS Lambda functions.
"""
from .cycle import handler as cycle_handler
from .prediction import handler as prediction_handler
from .notifications import handler as notifications_handler

__all__ = ["cycle_handler", "prediction_handler", "notifications_handler"]
