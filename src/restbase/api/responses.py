"""
Response building for restbase endpoints.

:class:`ResponseBuilder` is created per request. It carries the status code
of the response being built and wraps payloads in the success and error
envelopes::

    {"data": {...}}
    {"data": [...], "meta": {"pagination": {...}}}
    {"error": {"code": "NOT-FOUND", "http_code": 404, "message": "..."}}
    {"message": "Done"}
"""
from typing import Any, Dict, Iterable, Optional, Union

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from restbase.api.models import ErrorBody, ErrorEnvelope, MessageEnvelope
from restbase.api.pagination import Paginator
from restbase.api.resources import Collection, Item, Manager
from restbase.constants import (
    HTTP_BAD_REQUEST,
    HTTP_CREATED,
    HTTP_FORBIDDEN,
    HTTP_INTERNAL_SERVER_ERROR,
    HTTP_NOT_FOUND,
    HTTP_OK,
    HTTP_UNAUTHORIZED,
    MESSAGE_CREATED,
    MESSAGE_FORBIDDEN,
    MESSAGE_INTERNAL_ERROR,
    MESSAGE_NOT_FOUND,
    MESSAGE_OK,
    MESSAGE_UNAUTHORIZED,
    MESSAGE_WRONG_ARGS,
    ErrorCode,
)
from restbase.utils.logging import logger


class ResponseBuilder:
    """Wraps payloads in JSON envelopes with a mutable status code."""

    def __init__(self, manager: Optional[Manager] = None, status_code: int = HTTP_OK):
        """Initialize the builder.

        Args:
            manager: Include manager used to serialize resources
            status_code: Initial status code
        """
        self.manager = manager or Manager()
        self.status_code = status_code

    def get_status_code(self) -> int:
        return self.status_code

    def set_status_code(self, status_code: int) -> "ResponseBuilder":
        self.status_code = status_code
        return self

    def array(self, payload: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> JSONResponse:
        """Send a payload as-is with the current status code."""
        return JSONResponse(
            content=jsonable_encoder(payload),
            status_code=self.status_code,
            headers=headers,
        )

    def item(self, record: Any, transformer: Any) -> JSONResponse:
        scope = self.manager.create_data(Item(record, transformer))
        return self.array(scope.to_dict())

    def collection(
        self,
        records: Iterable[Any],
        transformer: Any,
        paginator: Optional[Paginator] = None,
        meta: Optional[Dict[str, Any]] = None,
    ) -> JSONResponse:
        """Send a list of records.

        Args:
            records: Records to transform
            transformer: Transformer applied to each record
            paginator: Adds ``meta.pagination`` when given
            meta: Extra keys merged into ``meta``

        Returns:
            JSON response with ``data`` and, when present, ``meta``
        """
        resource = Collection(records, transformer, paginator=paginator)
        if meta:
            resource.set_meta(meta)

        scope = self.manager.create_data(resource)
        return self.array(scope.to_dict())

    def paginated(
        self, paginator: Paginator, transformer: Any, meta: Optional[Dict[str, Any]] = None
    ) -> JSONResponse:
        return self.collection(paginator.items, transformer, paginator, meta)

    def ok(self, message: str = MESSAGE_OK) -> JSONResponse:
        envelope = MessageEnvelope(message=message)
        return self.set_status_code(HTTP_OK).array(envelope.model_dump())

    def created(self, message: str = MESSAGE_CREATED) -> JSONResponse:
        envelope = MessageEnvelope(message=message)
        return self.set_status_code(HTTP_CREATED).array(envelope.model_dump())

    def error(
        self,
        message: str,
        code: Union[ErrorCode, str],
        headers: Optional[Dict[str, str]] = None,
    ) -> JSONResponse:
        """Send an error envelope with the current status code.

        Args:
            message: Error message
            code: Envelope error code
            headers: Extra response headers

        Returns:
            JSON response with an ``error`` body
        """
        if self.status_code == HTTP_OK:
            logger.warning(
                "You better have a really good reason for erroring on a 200...",
                component="response",
                context={"code": str(code), "message": message},
            )

        envelope = ErrorEnvelope(
            error=ErrorBody(code=ErrorCode(code), http_code=self.status_code, message=message)
        )
        return self.array(envelope.model_dump(mode="json"), headers)

    def error_wrong_args(self, message: str = MESSAGE_WRONG_ARGS) -> JSONResponse:
        return self.set_status_code(HTTP_BAD_REQUEST).error(message, ErrorCode.WRONG_ARGS)

    def error_unauthorized(self, message: str = MESSAGE_UNAUTHORIZED) -> JSONResponse:
        return self.set_status_code(HTTP_UNAUTHORIZED).error(message, ErrorCode.UNAUTHORIZED)

    def error_forbidden(self, message: str = MESSAGE_FORBIDDEN) -> JSONResponse:
        return self.set_status_code(HTTP_FORBIDDEN).error(message, ErrorCode.FORBIDDEN)

    def error_not_found(self, message: str = MESSAGE_NOT_FOUND) -> JSONResponse:
        return self.set_status_code(HTTP_NOT_FOUND).error(message, ErrorCode.NOT_FOUND)

    def error_internal_error(self, message: str = MESSAGE_INTERNAL_ERROR) -> JSONResponse:
        return self.set_status_code(HTTP_INTERNAL_SERVER_ERROR).error(message, ErrorCode.INTERNAL_ERROR)
