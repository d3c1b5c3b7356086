"""
Storage error translation.

Core operations must not leak raw SQLAlchemy errors. Integrity violations
that slip past the explicit existence checks (typically a concurrent insert)
become ConflictError; anything else becomes InternalError.
"""

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from cardledger.models.failure import ConflictError, InternalError

logger = logging.getLogger(__name__)

P = ParamSpec("P")
R = TypeVar("R")


def storage_guard(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
    """Wrap an async store operation so only CardLedgerError escapes."""

    @functools.wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        try:
            return await func(*args, **kwargs)
        except IntegrityError as e:
            logger.warning("Integrity violation in %s: %s", func.__name__, e.orig)
            raise ConflictError(
                "The change conflicts with existing data.",
                detail=type(e.orig).__name__,
            ) from e
        except SQLAlchemyError as e:
            logger.exception("Storage failure in %s", func.__name__)
            raise InternalError(
                "Unexpected storage failure.",
                detail=type(e).__name__,
            ) from e

    return wrapper
