"""Poll cycle of the Google Traffic integration."""
from __future__ import annotations

import asyncio
from collections.abc import Callable
import logging
from typing import Any, Optional

from .api import GoogleTrafficApi, GoogleTrafficError
from .config import TrafficConfig
from .const import STATUS_ACTIVE, STATUS_API_ERROR, STATUS_DESCRIPTIONS, STATUS_NOT_CONFIGURED
from .models import PollResult, reduce_response
from .repository import Repository, materialize

_LOGGER = logging.getLogger(__name__)


class TrafficPoller:
    """Run one query, reduce it and hand the result to the repository.

    Failures never escape ``poll``; they are reported through
    ``health_status`` instead.
    """

    def __init__(
        self,
        api_factory: Callable[[TrafficConfig], GoogleTrafficApi],
        repository: Optional[Repository],
        origin_provider: Callable[[TrafficConfig], Optional[tuple[float, float]]],
        minutes_label: str = "Minutes",
        root: Any = None,
    ) -> None:
        self.api_factory = api_factory
        self.repository = repository
        self.origin_provider = origin_provider
        self.minutes_label = minutes_label
        self.root = root
        self.health_status = STATUS_NOT_CONFIGURED
        self._lock = asyncio.Lock()

    def _set_status(self, status: int) -> None:
        if status != self.health_status:
            _LOGGER.debug(f"状态变更：{self.health_status} -> {status} ({STATUS_DESCRIPTIONS.get(status)})")
        self.health_status = status

    async def poll(self, config: TrafficConfig) -> Optional[PollResult]:
        """Poll once. Returns None when nothing was updated."""
        if self._lock.locked():
            _LOGGER.debug("上一次更新尚未完成，跳过本次更新")
            return None

        async with self._lock:
            if not config.is_configured:
                _LOGGER.debug("尚未配置 API Key，跳过更新")
                self._set_status(STATUS_NOT_CONFIGURED)
                return None

            api = self.api_factory(config)
            try:
                response = await api.fetch(
                    self.origin_provider(config), config.addresses
                )
            except GoogleTrafficError as err:
                _LOGGER.error(f"请求 Google Traffic API 失败：{err}")
                self._set_status(err.status_code)
                return None

            try:
                result = reduce_response(response, config.destinations, self.minutes_label)
                if self.repository is not None:
                    materialize(
                        self.repository, self.root, result.records(), self.minutes_label
                    )
            except Exception as err:
                _LOGGER.error(f"处理 Google Traffic API 响应时出错：{err}")
                self._set_status(STATUS_API_ERROR)
                return None

            self._set_status(STATUS_ACTIVE)
            return result
