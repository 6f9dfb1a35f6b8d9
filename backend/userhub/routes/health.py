"""
UserHub Backend — Database Health Route
=========================================

What:  Liveness probe against the database (GET /healthdb).
How:   Executes SELECT 1 on a pooled connection.
Who:   Operators, container health checks and the UI, to tell a database
       outage apart from an application bug.

    200  {"success": true,  "message": "Database connection healthy"}
    500  {"success": false, "message": "Database connection failed"}
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from userhub.database import get_db_session
from userhub.responses import envelope_response
from userhub.schemas.user import EmptyEnvelope

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get(
    "/healthdb",
    response_model=EmptyEnvelope,
    responses={500: {"description": "Database unreachable", "model": EmptyEnvelope}},
    summary="Database liveness probe",
)
async def health_db(db: AsyncSession = Depends(get_db_session)) -> JSONResponse:
    try:
        await db.execute(text("SELECT 1"))
    except (SQLAlchemyError, OSError) as e:
        # Driver text stays in the log; the client gets the generic message
        logger.warning("Health check: database unreachable: %s", e)
        # Leaves the session clean for the commit in get_db_session
        await db.rollback()
        return envelope_response(500, "Database connection failed")

    return envelope_response(200, "Database connection healthy")
