"""GraphQL Permissions: authentication gate for identity-bound fields."""

import logging
from typing import Any

from strawberry.permission import BasePermission
from strawberry.types import Info

from guildhall.core.errors import ErrorCategory, ErrorSeverity, UnauthenticatedError

logger = logging.getLogger(__name__)


class IsAuthenticated(BasePermission):
    """Reject the field unless the request carries a valid bearer token."""

    message = "Not authorized"
    error_extensions = {
        "code": "UNAUTHENTICATED",
        "category": ErrorCategory.AUTHENTICATION.value,
        "severity": ErrorSeverity.WARNING.value,
    }

    def has_permission(self, source: Any, info: Info, **kwargs: Any) -> bool:
        try:
            info.context.authenticate()
        except UnauthenticatedError as e:
            logger.info(
                f"Unauthenticated access to {info.field_name}: {e.message}",
                extra={"error_code": e.code},
            )
            return False
        return True
