# shopledger/core/errors.py
#
# Typed errors raised by the services. The API layer maps each one to a
# status code and a {"detail": ...} payload, the same shape FastAPI uses for
# HTTPException.

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger("app")


class LedgerError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LedgerError):
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(LedgerError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(LedgerError):
    status_code = status.HTTP_409_CONFLICT


class StoreError(LedgerError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


async def ledger_error_handler(request: Request, exc: LedgerError):
    if isinstance(exc, StoreError):
        logger.error(f"{request.method} {request.url.path} store failure: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
    )
