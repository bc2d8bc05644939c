"""
Structured logging for Backend PayPilot.

JSON logs with timestamp, user_id, event_type.
Use get_logger() in all modules for aggregation-friendly output.
"""

from backend_paypilot.paypilot_logging.logger import bind_user, get_logger

__all__ = ["bind_user", "get_logger"]
