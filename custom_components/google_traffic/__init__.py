"""The Google Traffic integration."""
from __future__ import annotations

from datetime import timedelta
import logging
from typing import Optional

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant, ServiceCall
from homeassistant.helpers.aiohttp_client import async_get_clientsession
from homeassistant.helpers.update_coordinator import DataUpdateCoordinator
from homeassistant.util.unit_system import US_CUSTOMARY_SYSTEM

from .api import GoogleTrafficApi
from .config import TrafficConfig, load_config
from .const import (
    COORDINATOR,
    DOMAIN,
    MINUTES_LABELS,
    SERVICE_UPDATE,
)
from .models import PollResult
from .poller import TrafficPoller

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.SENSOR]


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Set up Google Traffic from a config entry."""
    config = load_config(entry.data, entry.options)
    if not config.is_configured:
        _LOGGER.warning("尚未配置 API Key，数据不会更新")

    coordinator = GoogleTrafficDataUpdateCoordinator(hass, entry, config)
    await coordinator.async_config_entry_first_refresh()

    hass.data.setdefault(DOMAIN, {})
    hass.data[DOMAIN][entry.entry_id] = {
        COORDINATOR: coordinator,
    }

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)

    if not hass.services.has_service(DOMAIN, SERVICE_UPDATE):
        async def handle_update(call: ServiceCall) -> None:
            """Refresh every configured instance now."""
            for stored in hass.data.get(DOMAIN, {}).values():
                await stored[COORDINATOR].async_request_refresh()

        hass.services.async_register(DOMAIN, SERVICE_UPDATE, handle_update)

    # 配置变更后重新加载，以便按新的间隔重新设置定时器
    entry.async_on_unload(entry.add_update_listener(async_update_options))

    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    """Unload a config entry."""
    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        hass.data[DOMAIN].pop(entry.entry_id, None)
        _LOGGER.debug(f"成功卸载配置项：{entry.entry_id}")
        if not hass.data[DOMAIN]:
            hass.services.async_remove(DOMAIN, SERVICE_UPDATE)
    else:
        _LOGGER.error(f"卸载平台失败：{entry.entry_id}")
    return unload_ok


async def async_update_options(hass: HomeAssistant, entry: ConfigEntry) -> None:
    """Handle options update."""
    await hass.config_entries.async_reload(entry.entry_id)


def get_origin(hass: HomeAssistant, config: TrafficConfig) -> Optional[tuple[float, float]]:
    """Return (latitude, longitude) of the origin.

    Uses the origin entity when one is configured, the home location otherwise.
    """
    if config.origin_entity_id:
        state = hass.states.get(config.origin_entity_id)
        if state is None:
            _LOGGER.error(f"无法找到实体：{config.origin_entity_id}")
            return None
        latitude = state.attributes.get("latitude")
        longitude = state.attributes.get("longitude")
        if latitude is None or longitude is None:
            _LOGGER.error(f"实体 {config.origin_entity_id} 缺少位置属性")
            return None
        return latitude, longitude

    if not hass.config.latitude or not hass.config.longitude:
        return None
    return hass.config.latitude, hass.config.longitude


class GoogleTrafficDataUpdateCoordinator(DataUpdateCoordinator[Optional[PollResult]]):
    """Poll the distance matrix on the configured interval."""

    def __init__(self, hass: HomeAssistant, entry: ConfigEntry, config: TrafficConfig) -> None:
        """Initialize."""
        self.entry = entry
        self.session = async_get_clientsession(hass)

        language = (hass.config.language or "en").split("-")[0]
        self.language = language
        self.units = "imperial" if hass.config.units == US_CUSTOMARY_SYSTEM else "metric"

        self.poller = TrafficPoller(
            api_factory=self._create_api,
            repository=None,
            origin_provider=lambda cfg: get_origin(hass, cfg),
            minutes_label=MINUTES_LABELS.get(language, MINUTES_LABELS["en"]),
            root=entry.entry_id,
        )

        _LOGGER.debug(f"初始化 Google Traffic：目的地数量={len(config.destinations)}, 更新间隔={config.interval}秒")

        super().__init__(
            hass,
            _LOGGER,
            config_entry=entry,
            name=DOMAIN,
            update_interval=timedelta(seconds=config.interval),
        )

    @property
    def health_status(self) -> int:
        return self.poller.health_status

    def _create_api(self, config: TrafficConfig) -> GoogleTrafficApi:
        return GoogleTrafficApi(
            self.session,
            config.api_key,
            language=self.language,
            units=self.units,
        )

    async def _async_update_data(self) -> Optional[PollResult]:
        """Update data via API."""
        # 每次更新都重新读取配置
        config = load_config(self.entry.data, self.entry.options)
        result = await self.poller.poll(config)
        if result is None:
            # 保留上一次成功的数据
            return self.data
        return result
