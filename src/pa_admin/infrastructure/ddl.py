"""Run one DDL statement and report whether it created anything."""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from src.pa_common.enums import DdlOutcome, StoreErrorKind
from src.pa_common.store_errors import classify_store_error, to_store_error

logger = logging.getLogger(__name__)


async def execute_ddl(conn: AsyncConnection, statement: str) -> DdlOutcome:
    """Execute on an AUTOCOMMIT connection.

    Returns ALREADY_EXISTS instead of raising when the object exists; every
    other store failure is raised as a classified StoreError.
    """
    try:
        await conn.exec_driver_sql(statement)
    except SQLAlchemyError as e:
        if classify_store_error(e) == StoreErrorKind.ALREADY_EXISTS:
            logger.info("Already exists, skipping: %s", _first_line(statement))
            return DdlOutcome.ALREADY_EXISTS
        raise to_store_error(e) from e
    return DdlOutcome.CREATED


def _first_line(statement: str) -> str:
    return statement.strip().splitlines()[0]
