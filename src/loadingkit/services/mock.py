"""Simulated user and product services.

Latencies come from ``values.yml`` and elapse on a :class:`TimeSource`, so
tests drive them with ``SimTimeSource.advance``. Failures are drawn from an
injected ``random.Random`` to keep runs reproducible.

Example usage:

    users = MockUserService(ts=SimTimeSource(), rng=random.Random(1))
    task = asyncio.create_task(users.get_user("123"))
"""

from __future__ import annotations

import logging
import random
from typing import Any, Dict, List, Mapping, Optional

from loadingkit.core.exceptions import FetchFailure
from loadingkit.core.time import RealTimeSource, TimeSource
from loadingkit.models import Product, User
from loadingkit.settings.values import MOCK_DELAYS_S

__all__ = ["CATALOGUE", "MockUserService", "MockProductService"]

logger = logging.getLogger(__name__)

CATALOGUE: tuple[Product, ...] = (
    Product(
        id="1",
        name="iPhone 15",
        description="Latest Apple smartphone",
        price=999.99,
        image="https://via.placeholder.com/150/FF0000/FFFFFF?text=iPhone",
        category="phones",
    ),
    Product(
        id="2",
        name="MacBook Pro",
        description="Powerful laptop for professionals",
        price=1999.99,
        image="https://via.placeholder.com/150/00FF00/FFFFFF?text=MacBook",
        category="laptops",
    ),
    Product(
        id="3",
        name="iPad Air",
        description="Versatile tablet for work and play",
        price=599.99,
        image="https://via.placeholder.com/150/0000FF/FFFFFF?text=iPad",
        category="tablets",
    ),
    Product(
        id="4",
        name="AirPods Pro",
        description="Wireless earbuds with noise cancellation",
        price=249.99,
        image="https://via.placeholder.com/150/FF00FF/FFFFFF?text=AirPods",
        category="audio",
    ),
    Product(
        id="5",
        name="Apple Watch",
        description="Smart watch for health and fitness",
        price=399.99,
        image="https://via.placeholder.com/150/FFFF00/000000?text=Watch",
        category="wearables",
    ),
    Product(
        id="6",
        name="Samsung Galaxy",
        description="Android flagship phone",
        price=899.99,
        image="https://via.placeholder.com/150/00FFFF/000000?text=Galaxy",
        category="phones",
    ),
)


class MockUserService:
    """Profile lookup and form submission with random failures."""

    def __init__(
        self,
        *,
        ts: TimeSource | None = None,
        rng: Optional[random.Random] = None,
        failure_rate: float = 0.5,
        delays: Optional[Mapping[str, float]] = None,
    ) -> None:
        self._ts: TimeSource = ts or RealTimeSource()
        self._rng = rng or random.Random()
        self._failure_rate = failure_rate
        self._delays: Dict[str, float] = dict(MOCK_DELAYS_S)
        if delays:
            self._delays.update(delays)
        self.calls: List[str] = []
        self.submissions: List[Dict[str, Any]] = []

    def _fails(self) -> bool:
        return self._failure_rate > 0 and self._rng.random() < self._failure_rate

    async def get_user(self, user_id: str) -> User:
        self.calls.append(f"get_user:{user_id}")
        await self._ts.sleep(self._delays.get("get_user", 2.0))
        if self._fails():
            raise FetchFailure("User not found")
        return User(
            id=user_id,
            name="John Doe",
            email="john@example.com",
            avatar="https://via.placeholder.com/150/0000FF/FFFFFF?text=JD",
        )

    async def submit_form(self, data: Mapping[str, Any]) -> bool:
        self.calls.append("submit_form")
        await self._ts.sleep(self._delays.get("submit_form", 3.0))
        if self._fails():
            raise FetchFailure("Submission failed")
        self.submissions.append(dict(data))
        logger.debug("form accepted: %s", sorted(data))
        return True


class MockProductService:
    """Serves :data:`CATALOGUE` with simulated latency. Never fails."""

    def __init__(
        self,
        *,
        ts: TimeSource | None = None,
        catalogue: tuple[Product, ...] = CATALOGUE,
        delays: Optional[Mapping[str, float]] = None,
    ) -> None:
        self._ts: TimeSource = ts or RealTimeSource()
        self._catalogue = catalogue
        self._delays: Dict[str, float] = dict(MOCK_DELAYS_S)
        if delays:
            self._delays.update(delays)
        self.calls: List[str] = []

    async def get_all_products(self) -> List[Product]:
        self.calls.append("get_all_products")
        await self._ts.sleep(self._delays.get("get_all_products", 1.0))
        return list(self._catalogue)

    async def search_products(
        self, query: str, category: Optional[str] = None
    ) -> List[Product]:
        self.calls.append(
            f"search_products:{query}" + (f"@{category}" if category else "")
        )
        await self._ts.sleep(self._delays.get("search_products", 0.8))
        return [
            p
            for p in self._catalogue
            if (not query or p.matches(query))
            and (not category or p.category == category)
        ]
