from fastapi import status

from src.domain.errors import ErrorKind, kind_of
from src.libs.result import Error

STATUS_BY_KIND = {
    ErrorKind.not_found: status.HTTP_404_NOT_FOUND,
    ErrorKind.conflict: status.HTTP_409_CONFLICT,
    ErrorKind.precondition_failed: status.HTTP_412_PRECONDITION_FAILED,
    ErrorKind.invalid: status.HTTP_400_BAD_REQUEST,
    ErrorKind.transient_provider: status.HTTP_502_BAD_GATEWAY,
    ErrorKind.permanent_provider: status.HTTP_502_BAD_GATEWAY,
}


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(
        self, base_error: Error, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    ):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


def raise_for_error(error: Error):
    """Raise the HTTP error matching the kind of a use case error code"""
    kind = kind_of(error.code)
    if kind in (ErrorKind.transient_provider, ErrorKind.permanent_provider):
        raise ServerError(error, status_code=STATUS_BY_KIND[kind])
    if kind in STATUS_BY_KIND:
        raise ClientError(error, status_code=STATUS_BY_KIND[kind])
    raise ServerError(error)
