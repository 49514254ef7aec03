"""
Order Store
============
Local cache of the order set, fed by a persistence gateway.

- refresh() replaces the cache wholesale on success; on failure the previous
  cache is kept and the error re-raised
- update() writes through the gateway first; the cache only changes once the
  service confirms (last response to arrive wins)
"""

import logging
from typing import Any, Dict, List, Optional

from common.exceptions import NotFoundError
from modules.order.gateway import BaseOrderGateway
from modules.order.schemas import Order

logger = logging.getLogger("foodhub.order")


class OrderStore:

    def __init__(self, gateway: BaseOrderGateway, orders: Optional[List[Order]] = None):
        self.gateway = gateway
        self._orders: List[Order] = list(orders or [])
        self.loading = False
        self.last_error: Optional[str] = None

    @property
    def orders(self) -> List[Order]:
        # copy so callers can't reorder/mutate the cache
        return list(self._orders)

    def get(self, order_id: str) -> Order:
        for order in self._orders:
            if order.id == order_id:
                return order
        raise NotFoundError(f"Order {order_id} not found")

    async def refresh(self) -> List[Order]:
        self.loading = True
        try:
            orders = await self.gateway.fetch_orders()
        except Exception as e:
            self.last_error = str(e)
            raise
        finally:
            self.loading = False
        self._orders = list(orders)
        self.last_error = None
        logger.info(f"Order cache refreshed: {len(self._orders)} orders")
        return self.orders

    async def update(self, order_id: str, fields: Dict[str, Any]) -> Order:
        updated = await self.gateway.update_order(order_id, fields)
        self._apply(updated)
        return updated

    def _apply(self, updated: Order) -> None:
        for index, order in enumerate(self._orders):
            if order.id == updated.id:
                self._orders[index] = updated
                return
        self._orders.insert(0, updated)
