"""GraphQL Schema: Strawberry schema, error policy and the FastAPI router.

Invariants:
    - GuildhallError → GraphQL error with extensions {code, category, severity}
    - Errors without a domain cause (unexpected exceptions) are masked as
      INTERNAL_ERROR with a generic message; the original is logged with traceback
    - GraphQL syntax/validation errors pass through unchanged

Design Decisions:
    - Logging in process_errors: Strawberry calls it before MaskErrors rewrites
      the errors, so logs keep the original exception
    - Multipart uploads enabled explicitly: server images arrive as `file`
"""

import logging

import strawberry
from graphql import GraphQLError
from strawberry.extensions import MaskErrors
from strawberry.fastapi import GraphQLRouter
from strawberry.types import ExecutionContext

from guildhall.api.graphql.context import get_context
from guildhall.api.graphql.mutations import Mutation
from guildhall.api.graphql.queries import Query
from guildhall.core.errors import ErrorCategory, ErrorSeverity, GuildhallError

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"


def is_internal_error(error: GraphQLError) -> bool:
    """True when the error wraps an exception that is not part of the domain."""
    original = error.original_error
    if original is None:
        return False
    return not isinstance(original, (GuildhallError, GraphQLError))


class MaskInternalErrors(MaskErrors):
    """MaskErrors that keeps a stable INTERNAL_ERROR code on masked errors.

    Registered as a class: Strawberry builds one instance per operation.
    """

    def __init__(self, *, execution_context: ExecutionContext | None = None):
        super().__init__(
            should_mask_error=is_internal_error,
            error_message=INTERNAL_ERROR_MESSAGE,
        )
        if execution_context is not None:
            self.execution_context = execution_context

    def anonymise_error(self, error: GraphQLError) -> GraphQLError:
        return GraphQLError(
            self.error_message,
            nodes=error.nodes,
            source=error.source,
            positions=error.positions,
            path=error.path,
            extensions={
                "code": "INTERNAL_ERROR",
                "category": ErrorCategory.INTERNAL.value,
                "severity": ErrorSeverity.CRITICAL.value,
            },
        )


class GuildhallSchema(strawberry.Schema):
    """Schema whose error log distinguishes domain failures from crashes."""

    def process_errors(
        self,
        errors: list[GraphQLError],
        execution_context: ExecutionContext | None = None,
    ) -> None:
        for error in errors:
            path = ".".join(str(p) for p in error.path or [])
            original = error.original_error
            if isinstance(original, GuildhallError):
                logger.warning(
                    f"{type(original).__name__}: {original.message}",
                    extra={"error_code": original.code, "path": path},
                )
            elif is_internal_error(error):
                logger.error(
                    f"Unhandled exception in resolver {path}: {original}",
                    exc_info=original,
                    extra={"error_code": "INTERNAL_ERROR", "path": path},
                )
            else:
                logger.info(f"GraphQL error at {path or '<document>'}: {error.message}")


schema = GuildhallSchema(
    query=Query,
    mutation=Mutation,
    extensions=[MaskInternalErrors],
)


def create_graphql_router(graphiql: bool = True) -> GraphQLRouter:
    return GraphQLRouter(
        schema,
        context_getter=get_context,
        graphql_ide="graphiql" if graphiql else None,
        multipart_uploads_enabled=True,
    )
