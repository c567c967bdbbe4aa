"""Configuration loading for the Google Traffic integration."""
from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import json
import logging
from typing import Any, Optional

from .const import (
    CONF_API_KEY,
    CONF_DESTINATION,
    CONF_DESTINATION_NAME,
    CONF_DESTINATIONS,
    CONF_INTERVAL,
    CONF_ORIGIN_ENTITY_ID,
    DEFAULT_INTERVAL,
)
from .models import Destination
from .repository import name_key

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrafficConfig:
    """Settings read at the start of every poll."""

    api_key: str = ""
    destinations: tuple[Destination, ...] = field(default_factory=tuple)
    interval: int = DEFAULT_INTERVAL
    origin_entity_id: Optional[str] = None

    @property
    def is_configured(self) -> bool:
        """Return True once an API key has been entered."""
        return bool(self.api_key)

    @property
    def addresses(self) -> list[str]:
        return [item.destination for item in self.destinations]


def parse_destinations(value: Any) -> tuple[Destination, ...]:
    """Parse the serialized destination list.

    Accepts a JSON string or an already decoded list of mappings. Anything
    that cannot be read is treated as an empty list.
    """
    if value is None or value == "":
        return ()

    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError as err:
            _LOGGER.warning(f"无法解析目的地列表：{err}")
            return ()

    if not isinstance(value, list):
        _LOGGER.warning(f"目的地列表格式无效：{type(value).__name__}")
        return ()

    destinations = []
    keys = set()
    for item in value:
        if not isinstance(item, Mapping):
            _LOGGER.warning(f"忽略无效的目的地：{item!r}")
            continue
        name = str(item.get(CONF_DESTINATION_NAME) or "").strip()
        destination = str(item.get(CONF_DESTINATION) or "").strip()
        if not name or not destination:
            _LOGGER.warning(f"忽略不完整的目的地：{item!r}")
            continue
        if name_key(name) in keys:
            _LOGGER.warning(f"忽略重名的目的地：{name}")
            continue
        keys.add(name_key(name))
        destinations.append(Destination(name=name, destination=destination))
    return tuple(destinations)


def dump_destinations(destinations) -> str:
    """Serialize destinations back into the stored JSON form."""
    return json.dumps(
        [
            {CONF_DESTINATION: item.destination, CONF_DESTINATION_NAME: item.name}
            for item in destinations
        ],
        ensure_ascii=False,
    )


def parse_interval(value: Any) -> int:
    """Return the poll interval in seconds, falling back to the default."""
    try:
        interval = int(float(value))  # 兼容浮点数输入
        if interval < 1:
            raise ValueError
    except (ValueError, TypeError):
        if value is not None:
            _LOGGER.warning(f"更新间隔无效：{value}，使用默认值 {DEFAULT_INTERVAL} 秒")
        return DEFAULT_INTERVAL
    return interval


def load_config(data: Mapping[str, Any], options: Optional[Mapping[str, Any]] = None) -> TrafficConfig:
    """Build a TrafficConfig from config entry data, options taking precedence."""
    merged = dict(data)
    if options:
        merged.update(options)

    api_key = merged.get(CONF_API_KEY) or ""
    if not isinstance(api_key, str):
        api_key = ""

    origin_entity_id = merged.get(CONF_ORIGIN_ENTITY_ID) or None

    return TrafficConfig(
        api_key=api_key.strip(),
        destinations=parse_destinations(merged.get(CONF_DESTINATIONS)),
        interval=parse_interval(merged.get(CONF_INTERVAL)),
        origin_entity_id=origin_entity_id,
    )
