"""
Storefront Exception Hierarchy

All exceptions include code, message, and details so they can be logged and
converted into action results or HTTP responses without losing context.

Exception Hierarchy:
    StorefrontError
    ├── ValidationError
    ├── NotFoundError
    ├── AuthorizationError
    ├── AuthenticationError
    ├── BusinessError
    │   ├── InsufficientInventoryError
    │   ├── EmptyCartError
    │   ├── DuplicateEmailError
    │   └── InvalidStatusTransitionError
    └── StoreError
        ├── DuplicateValueError
        ├── DocumentValidationError
        └── UnresolvedReferenceError
"""
import logging
from typing import Optional, Dict, Any, List

logger = logging.getLogger(__name__)


class StorefrontError(Exception):
    """
    Base exception for all storefront errors.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code for programmatic handling
        details: Additional context for debugging
    """

    default_code: str = "STOREFRONT_ERROR"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code or self.default_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/serialization."""
        return {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class ValidationError(StorefrontError):
    """Per-field input validation failure."""
    default_code = "VALIDATION_ERROR"

    def __init__(
        self,
        message: str = "Invalid input",
        field_errors: Optional[Dict[str, List[str]]] = None,
        **kwargs
    ):
        self.field_errors = field_errors or {}
        details = kwargs.pop("details", {})
        details["field_errors"] = self.field_errors
        super().__init__(message, details=details, **kwargs)


class NotFoundError(StorefrontError):
    """Entity absent; renders as a not-found outcome."""
    default_code = "NOT_FOUND"

    def __init__(
        self,
        message: str = "Not found",
        collection: Optional[str] = None,
        lookup: Optional[Any] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "collection": collection,
            "lookup": lookup,
        })
        super().__init__(message, details=details, **kwargs)


class AuthorizationError(StorefrontError):
    """No signed-in user, or the user may not do this."""
    default_code = "UNAUTHORIZED"


class AuthenticationError(StorefrontError):
    """Credentials rejected."""
    default_code = "INVALID_CREDENTIALS"


# =============================================================================
# BUSINESS ERRORS
# =============================================================================

class BusinessError(StorefrontError):
    """Request understood but refused by a business rule."""
    default_code = "BUSINESS_ERROR"


class InsufficientInventoryError(BusinessError):
    """Requested quantity exceeds what is in stock."""
    default_code = "INSUFFICIENT_INVENTORY"

    def __init__(
        self,
        message: str,
        product_id: Optional[int] = None,
        product_name: Optional[str] = None,
        requested_qty: Optional[int] = None,
        available_qty: Optional[int] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "product_id": product_id,
            "product_name": product_name,
            "requested_qty": requested_qty,
            "available_qty": available_qty,
        })
        super().__init__(message, details=details, **kwargs)


class EmptyCartError(BusinessError):
    default_code = "EMPTY_CART"


class DuplicateEmailError(BusinessError):
    default_code = "DUPLICATE_EMAIL"


class InvalidStatusTransitionError(BusinessError):
    default_code = "INVALID_STATUS_TRANSITION"

    def __init__(
        self,
        message: str,
        current_status: Optional[str] = None,
        requested_status: Optional[str] = None,
        **kwargs
    ):
        details = kwargs.pop("details", {})
        details.update({
            "current_status": current_status,
            "requested_status": requested_status,
        })
        super().__init__(message, details=details, **kwargs)


# =============================================================================
# DOCUMENT STORE ERRORS
# =============================================================================

class StoreError(StorefrontError):
    """Base exception for document store failures."""
    default_code = "STORE_ERROR"


class DuplicateValueError(StoreError):
    """Unique field collision."""
    default_code = "DUPLICATE_VALUE"

    def __init__(self, collection: str, field: str, value: Any = None, **kwargs):
        self.collection = collection
        self.field = field
        details = kwargs.pop("details", {})
        details.update({"collection": collection, "field": field, "value": value})
        super().__init__(
            f"Value for '{field}' already exists in {collection}",
            details=details,
            **kwargs
        )


class DocumentValidationError(StoreError):
    """Document rejected by the collection's field rules."""
    default_code = "DOCUMENT_INVALID"

    def __init__(self, collection: str, errors: Dict[str, str], **kwargs):
        self.collection = collection
        self.errors = errors
        details = kwargs.pop("details", {})
        details.update({"collection": collection, "errors": errors})
        summary = "; ".join(f"{k}: {v}" for k, v in errors.items())
        super().__init__(f"Invalid {collection} document ({summary})", details=details, **kwargs)


class UnresolvedReferenceError(StoreError):
    """A reference was used as a document before it was resolved."""
    default_code = "UNRESOLVED_REFERENCE"


# Maps error codes to the HTTP status used when an action result is returned
HTTP_STATUS_BY_CODE = {
    ValidationError.default_code: 422,
    NotFoundError.default_code: 404,
    AuthorizationError.default_code: 401,
    AuthenticationError.default_code: 401,
    BusinessError.default_code: 400,
    InsufficientInventoryError.default_code: 409,
    EmptyCartError.default_code: 400,
    DuplicateEmailError.default_code: 409,
    InvalidStatusTransitionError.default_code: 409,
    DuplicateValueError.default_code: 409,
    DocumentValidationError.default_code: 422,
    "PRODUCT_UNAVAILABLE": 409,
    "INTERNAL_ERROR": 500,
    "FORBIDDEN": 403,
}
