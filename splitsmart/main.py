"""Process start-up: settings, logging and storage wiring."""

import logging
from typing import Optional

from splitsmart.services.config import Settings, get_settings
from splitsmart.services.data import create_data_service
from splitsmart.services.expense_service import ExpenseService
from splitsmart.services.logging import setup_logging

logger = logging.getLogger(__name__)


def create_expense_service(settings: Optional[Settings] = None) -> ExpenseService:
    """Configure logging and storage, then build the expense service.

    Call once when the embedding process starts. The returned service owns
    the storage backend for the life of the process.

    Args:
        settings: Settings to use (default: get_settings())

    Returns:
        ExpenseService formatting amounts in settings.locale
    """
    settings = settings or get_settings()
    log_path = setup_logging(settings)
    data = create_data_service(settings)

    logger.info(
        f"SplitSmart ready: backend={settings.data_backend}, "
        f"locale={settings.locale}, log={log_path}"
    )
    return ExpenseService(data, locale=settings.locale)


__all__ = ["create_expense_service"]
