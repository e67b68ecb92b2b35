"""Process startup wiring: logging, backend selection and the fragment service."""

from typing import Iterable, Optional

from common.logging_config import get_logger, setup_logging
from datastore.config import Settings
from datastore.factory import create_backend
from fragments.service import FragmentService

logger = get_logger(__name__)

LOGGED_COMPONENTS = ("datastore", "fragments", "converter")


def create_service(settings: Optional[Settings] = None, extra_types: Iterable[str] = ()) -> FragmentService:
    """
    Configure logging and build the service over the configured backend.

    Args:
        settings: Storage settings (defaults to Settings.from_env())
        extra_types: Additional MIME types accepted on create/update

    Returns:
        FragmentService bound to a freshly built backend
    """
    if settings is None:
        settings = Settings.from_env()

    for component in LOGGED_COMPONENTS:
        setup_logging(component, log_level=settings.log_level)

    logger.info(f"Starting fragment service [backend={settings.backend}, log_level={settings.log_level}]")
    return FragmentService(create_backend(settings), extra_types=extra_types)
