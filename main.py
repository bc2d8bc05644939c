"""
Main entrypoint: PayPilot FastAPI server.

Env: DB_PATH or DATABASE_URL, API_HOST, API_PORT, POLICY_MODE, POLICY_WEBHOOK_URL,
GEMINI_API_KEY, LOG_LEVEL, etc. (see backend_paypilot.config.settings).

Equivalent: uvicorn backend_paypilot.api_server.app:app --host 0.0.0.0 --port 3000
"""

import uvicorn

# Configure structured JSON logging before other imports that may log
from backend_paypilot.paypilot_logging import get_logger

logger = get_logger("main")


def main() -> None:
    """Run the API server in the main thread."""
    from backend_paypilot.api_server.app import app
    from backend_paypilot.config import get_settings

    settings = get_settings()
    logger.info(
        "main_server_starting",
        host=settings.api_host,
        port=settings.api_port,
        policy_mode=settings.policy_mode,
    )
    uvicorn.run(app, host=settings.api_host, port=settings.api_port, log_level=settings.log_level.lower())


if __name__ == "__main__":
    main()
