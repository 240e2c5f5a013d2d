# app/repositories/base.py
import logging
from typing import Any

import httpx
from postgrest.exceptions import APIError
from supabase import AsyncClient

from app.core.errors import DataAccessError

logger = logging.getLogger(__name__)


class SupabaseRepository:
    """
    Shared plumbing for every repository.

    Responsibilities:
      - hold the async Supabase client
      - execute a query builder and unwrap `.data`
      - translate client errors into DataAccessError
    """

    def __init__(self, client: AsyncClient):
        self.client = client

    async def _execute(self, query: Any, operation: str) -> Any:
        """
        Await a postgrest query and return its data.

        maybe_single() queries that match nothing come back as a None
        response on recent client versions; that is returned as None.
        """
        try:
            response = await query.execute()
        except APIError as e:
            logger.error("Query %s failed: %s", operation, e.message)
            raise DataAccessError(operation, e.message or str(e)) from e
        except httpx.HTTPError as e:
            logger.error("Query %s could not reach the backend: %s", operation, e)
            raise DataAccessError(operation, str(e)) from e
        if response is None:
            return None
        return response.data
