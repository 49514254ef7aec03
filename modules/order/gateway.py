"""
Order Persistence Gateways
===========================
The admin console reads and updates orders through a gateway:

  fetch_orders()                     → full order list (newest first)
  update_order(order_id, fields)     → updated Order

Implementations:
  HttpOrderGateway  → PostgREST-style REST service (storefront backend)
  SqlOrderGateway   → local database via SQLAlchemy (blocking calls run in the threadpool)

Any transport/database failure is raised as ExternalServiceError.
"""

import logging
from typing import Any, Dict, List, Optional

import httpx
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError as SchemaError
from sqlalchemy.exc import SQLAlchemyError

from common.exceptions import ExternalServiceError, NotFoundError
from common.helpers import now_utc
from modules.order.models import OrderRecord
from modules.order.schemas import Order, order_from_row, update_to_row

logger = logging.getLogger("foodhub.order.gateway")


def _orders_from_rows(rows) -> List[Order]:
    """Map service rows to orders; one malformed row fails the whole batch."""
    try:
        return [order_from_row(row) for row in rows]
    except (SchemaError, KeyError, AttributeError, TypeError) as e:
        logger.error(f"Order service returned a malformed row: {e}")
        raise ExternalServiceError("Order service returned a malformed order")


class BaseOrderGateway:
    """Abstract gateway interface."""
    name: str = ""

    async def fetch_orders(self) -> List[Order]:
        raise NotImplementedError

    async def update_order(self, order_id: str, fields: Dict[str, Any]) -> Order:
        raise NotImplementedError

    async def aclose(self) -> None:
        pass


# ==========================================
# HTTP (PostgREST-style)
# ==========================================

class HttpOrderGateway(BaseOrderGateway):
    name = "http"

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout: float = 10,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    async def fetch_orders(self) -> List[Order]:
        try:
            resp = await self._client.get(
                "/rest/v1/orders",
                params={"select": "*", "order": "created_at.desc"},
            )
            resp.raise_for_status()
            rows = resp.json()
        except httpx.TimeoutException:
            logger.error("Order fetch timed out")
            raise ExternalServiceError("Order service timed out")
        except httpx.HTTPError as e:
            logger.error(f"Order fetch failed: {e}")
            raise ExternalServiceError(f"Order service error: {e}")
        except ValueError as e:
            logger.error(f"Order fetch returned invalid JSON: {e}")
            raise ExternalServiceError("Order service returned an invalid response")

        if not isinstance(rows, list):
            raise ExternalServiceError("Order service returned an invalid response")
        return _orders_from_rows(rows)

    async def update_order(self, order_id: str, fields: Dict[str, Any]) -> Order:
        payload = update_to_row(fields)
        logger.info(f"Updating order {order_id}: {sorted(payload)}")
        try:
            resp = await self._client.patch(
                "/rest/v1/orders",
                params={"id": f"eq.{order_id}"},
                json=payload,
                headers={"Prefer": "return=representation"},
            )
            resp.raise_for_status()
            rows = resp.json()
        except httpx.TimeoutException:
            logger.error(f"Order update timed out: {order_id}")
            raise ExternalServiceError("Order service timed out")
        except httpx.HTTPStatusError as e:
            code = e.response.status_code
            if code in (401, 403):
                logger.error(f"Order update rejected by row-level policy: {order_id}")
                raise ExternalServiceError("Permission denied by the order service")
            logger.error(f"Order update failed ({code}): {order_id}")
            raise ExternalServiceError(f"Failed to update order: HTTP {code}")
        except httpx.HTTPError as e:
            logger.error(f"Order update failed: {order_id}: {e}")
            raise ExternalServiceError(f"Order service error: {e}")
        except ValueError:
            raise ExternalServiceError("Order service returned an invalid response")

        if isinstance(rows, dict):
            rows = [rows]
        if not rows:
            logger.error(f"Order update returned no data: {order_id}")
            raise ExternalServiceError("Order update returned no data")
        return _orders_from_rows(rows[:1])[0]

    async def aclose(self) -> None:
        await self._client.aclose()


# ==========================================
# SQL (SQLAlchemy)
# ==========================================

_UPDATABLE_COLUMNS = (
    "status", "items", "total_amount", "delivery_fee", "tax_amount",
    "customer_details", "notes", "payment_method",
)


class SqlOrderGateway(BaseOrderGateway):
    name = "sql"

    def __init__(self, session_factory):
        self._session_factory = session_factory

    async def fetch_orders(self) -> List[Order]:
        return await run_in_threadpool(self._fetch_sync)

    async def update_order(self, order_id: str, fields: Dict[str, Any]) -> Order:
        return await run_in_threadpool(self._update_sync, order_id, fields)

    def _fetch_sync(self) -> List[Order]:
        db = self._session_factory()
        try:
            records = db.query(OrderRecord).order_by(OrderRecord.created_at.desc()).all()
            return _orders_from_rows([r.to_row() for r in records])
        except SQLAlchemyError as e:
            logger.error(f"Order fetch failed: {e}")
            raise ExternalServiceError("Order database unavailable")
        finally:
            db.close()

    def _update_sync(self, order_id: str, fields: Dict[str, Any]) -> Order:
        row = update_to_row(fields)
        db = self._session_factory()
        try:
            record = db.query(OrderRecord).filter(OrderRecord.id == order_id).first()
            if not record:
                raise NotFoundError(f"Order {order_id} not found")
            for column in _UPDATABLE_COLUMNS:
                if column in row:
                    setattr(record, column, row[column])
            record.updated_at = now_utc()
            db.commit()
            db.refresh(record)
            logger.info(f"Order {record.order_number} updated: {sorted(k for k in row if k != 'updated_at')}")
            return _orders_from_rows([record.to_row()])[0]
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"Order update failed: {order_id}: {e}")
            raise ExternalServiceError("Order database unavailable")
        finally:
            db.close()


def build_order_gateway() -> BaseOrderGateway:
    """Gateway selected by ORDERS_BACKEND."""
    from config import settings

    if settings.ORDERS_BACKEND == "http":
        return HttpOrderGateway(
            settings.ORDERS_API_URL,
            api_key=settings.ORDERS_API_KEY,
            timeout=settings.ORDERS_API_TIMEOUT,
        )
    from config.database import SessionLocal
    return SqlOrderGateway(SessionLocal)
