"""
Sentry integration for error tracking.
"""

from typing import Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from shoplabel.utils.logger import get_logger

logger = get_logger(__name__)


def setup_sentry(
    dsn: Optional[str],
    environment: str = "development",
    release: Optional[str] = None,
    traces_sample_rate: float = 0.1,
) -> bool:
    """
    Initialize Sentry SDK.

    Args:
        dsn: Sentry DSN; Sentry stays disabled when empty
        environment: Deployment environment (production, staging, development)
        release: Release version (e.g., "shoplabel@1.0.0")
        traces_sample_rate: Percentage of transactions to trace (0.0-1.0)

    Returns:
        True if Sentry was initialized
    """
    if not dsn:
        logger.info("Sentry DSN not configured, skipping Sentry initialization")
        return False

    sentry_sdk.init(
        dsn=dsn,
        environment=environment,
        release=release,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
            SqlalchemyIntegration(),
            LoggingIntegration(),
        ],
        traces_sample_rate=traces_sample_rate,
        # Seller emails and tokens stay out of Sentry
        send_default_pii=False,
    )

    logger.info(f"Sentry initialized (environment={environment})")
    return True
