from typing import NoReturn

from fastapi import HTTPException

from allowork.services.marketplace_store import (
    MarketplaceConflictError,
    MarketplaceError,
    MarketplaceNotFoundError,
    MarketplacePermissionError,
)
from allowork.services.message_store import (
    MessageStoreError,
    MessageStoreNotFoundError,
    MessageStorePermissionError,
)


def raise_http_error(exc: ValueError) -> NoReturn:
    if isinstance(exc, (MarketplaceNotFoundError, MessageStoreNotFoundError)):
        raise HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, (MarketplacePermissionError, MessageStorePermissionError)):
        raise HTTPException(status_code=403, detail=str(exc))
    if isinstance(exc, MarketplaceConflictError):
        raise HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, (MarketplaceError, MessageStoreError)):
        raise HTTPException(status_code=400, detail=str(exc))
    raise exc
