"""Sensor platform for Google Traffic integration."""
from __future__ import annotations

import logging
from typing import Any, Optional

from homeassistant.components.sensor import SensorEntity, SensorStateClass
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import EntityCategory, UnitOfTime
from homeassistant.core import HomeAssistant
from homeassistant.helpers.entity_platform import AddEntitiesCallback
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import (
    COORDINATOR,
    DEFAULT_NAME,
    DOMAIN,
    PROFILE_PLUS_MINUTES,
    STATUS_DESCRIPTIONS,
)
from .repository import Repository, VariableProfile, materialize, name_key

_LOGGER = logging.getLogger(__name__)


async def async_setup_entry(
    hass: HomeAssistant, entry: ConfigEntry, async_add_entities: AddEntitiesCallback
) -> None:
    """Set up the Google Traffic sensor platform."""
    coordinator = hass.data[DOMAIN][entry.entry_id][COORDINATOR]

    async_add_entities([GoogleTrafficStatusSensor(coordinator, entry)])

    repository = EntityRepository(entry, async_add_entities)
    coordinator.poller.repository = repository

    # 首次刷新发生在平台加载之前
    if coordinator.data:
        materialize(
            repository,
            entry.entry_id,
            coordinator.data.records(),
            coordinator.poller.minutes_label,
        )


def entity_slug(*names: str) -> str:
    """Build an entity id friendly slug, transliterating Chinese names."""
    return "_".join(name_key(name) for name in names)


def root_device_info(entry: ConfigEntry) -> dict:
    return {
        "identifiers": {(DOMAIN, entry.entry_id)},
        "name": entry.title or DEFAULT_NAME,
        "manufacturer": "Google",
    }


class EntityRepository(Repository):
    """Store categories as devices and variables as sensor entities."""

    def __init__(self, entry: ConfigEntry, async_add_entities: AddEntitiesCallback) -> None:
        self.entry = entry
        self.async_add_entities = async_add_entities
        self.categories: dict[str, dict[str, Any]] = {}
        self.entities: dict[str, GoogleTrafficSensor] = {}

    def _device_info(self, parent: Any) -> dict:
        category = self.categories.get(parent)
        if category is None:
            return root_device_info(self.entry)
        return {
            "identifiers": {(DOMAIN, parent)},
            "name": category["name"],
            "manufacturer": "Google",
            "via_device": (DOMAIN, self.entry.entry_id),
        }

    def create_or_update_category(self, parent: Any, ident: str, name: str, position: int) -> str:
        category = self.categories.setdefault(ident, {"name": name, "parent": parent})
        category["position"] = position
        return ident

    def create_or_update_variable(
        self,
        parent: Any,
        ident: str,
        name: str,
        value: Any,
        profile: VariableProfile,
        position: int,
    ) -> None:
        entity = self.entities.get(ident)
        if entity is not None:
            entity.update_value(value, position)
            return

        category = self.categories.get(parent)
        names = [category["name"], name] if category else [name]
        entity = GoogleTrafficSensor(
            ident=ident,
            name=" ".join(names),
            slug=entity_slug(*names),
            value=value,
            profile=profile,
            position=position,
            device_info=self._device_info(parent),
        )
        self.entities[ident] = entity
        _LOGGER.debug(f"创建传感器：{ident}")
        self.async_add_entities([entity])


class GoogleTrafficSensor(SensorEntity):
    """A single value written by the poller."""

    _attr_should_poll = False

    def __init__(
        self,
        ident: str,
        name: str,
        slug: str,
        value: Any,
        profile: VariableProfile,
        position: int,
        device_info: dict,
    ) -> None:
        """Initialize the sensor."""
        self.profile = profile
        self.position = position
        self._value = value

        self._attr_name = name
        self._attr_unique_id = ident
        self.entity_id = f"sensor.{DOMAIN}_{slug}"
        self._attr_device_info = device_info
        self._attr_icon = profile.icon

        if profile.name == PROFILE_PLUS_MINUTES:
            self._attr_native_unit_of_measurement = UnitOfTime.MINUTES
            self._attr_state_class = SensorStateClass.MEASUREMENT
            self._attr_suggested_display_precision = profile.digits

    @property
    def native_value(self):
        """Return the state of the sensor."""
        return self._value

    @property
    def extra_state_attributes(self):
        """Return the state attributes."""
        return {
            "position": self.position,
            "display": self.profile.format(self._value),
        }

    def update_value(self, value: Any, position: int) -> None:
        """Store a new value, writing state only when something changed."""
        if value == self._value and position == self.position:
            return
        self._value = value
        self.position = position
        if self.hass is not None:
            self.async_write_ha_state()


class GoogleTrafficStatusSensor(CoordinatorEntity, SensorEntity):
    """Health status of the integration as a numeric code."""

    _attr_entity_category = EntityCategory.DIAGNOSTIC
    _attr_has_entity_name = True
    _attr_icon = "mdi:traffic-light"

    def __init__(self, coordinator, entry: ConfigEntry) -> None:
        """Initialize the sensor."""
        super().__init__(coordinator)
        self._attr_name = "Status"
        self._attr_unique_id = f"{entry.entry_id}_status"
        self._attr_device_info = root_device_info(entry)

    @property
    def available(self) -> bool:
        # 状态传感器始终可用，失败也需要显示出来
        return True

    @property
    def native_value(self) -> int:
        """Return the health status code."""
        return self.coordinator.health_status

    @property
    def extra_state_attributes(self) -> dict[str, Optional[str]]:
        return {"description": STATUS_DESCRIPTIONS.get(self.coordinator.health_status)}
