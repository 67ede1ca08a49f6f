import logging

from pydantic import ValidationError as PydanticValidationError

from storefront.core.error_handler import sanitize_error_message
from storefront.core.exceptions import StorefrontError, ValidationError
from storefront.schemas.forms import field_errors_from
from storefront.schemas.results import ActionResult

logger = logging.getLogger(__name__)

INTERNAL_ERROR_CODE = "INTERNAL_ERROR"


def result_from_error(exc: Exception, fallback: str, result_cls=ActionResult) -> ActionResult:
    """Convert a failure raised inside an action into a failed result."""
    if isinstance(exc, PydanticValidationError):
        return result_cls.fail(
            field_errors=field_errors_from(exc),
            error_code=ValidationError.default_code,
        )

    if isinstance(exc, ValidationError):
        return result_cls.fail(exc.message, field_errors=exc.field_errors, error_code=exc.code)

    if isinstance(exc, StorefrontError):
        logger.info(f"Action refused: {exc.code} {exc.message}")
        return result_cls.fail(exc.message, error_code=exc.code)

    logger.error(f"Unexpected action failure: {type(exc).__name__}: {exc}", exc_info=True)
    return result_cls.fail(sanitize_error_message(str(exc) or fallback), error_code=INTERNAL_ERROR_CODE)
