"""Data model and response reduction for the Google Traffic integration."""
from __future__ import annotations

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
import logging
from typing import Any, Union

from .const import ATTR_DISTANCE, ATTR_DURATION, ATTR_TRAFFIC, START_ADDRESS

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Destination:
    """A configured destination."""

    name: str
    destination: str


@dataclass(frozen=True)
class DestinationResult:
    """Travel information for one destination."""

    distance_text: str
    duration_text: str
    delay_minutes: float

    def as_record(self) -> dict[str, Union[str, float]]:
        return {
            ATTR_DISTANCE: self.distance_text,
            ATTR_DURATION: self.duration_text,
            ATTR_TRAFFIC: self.delay_minutes,
        }


@dataclass
class PollResult:
    """Everything one poll produced."""

    origin_address: str = ""
    destinations: dict[str, DestinationResult] = field(default_factory=dict)

    def records(self) -> Iterator[tuple[str, Any]]:
        """Yield the flat record set handed to materialization."""
        yield START_ADDRESS, self.origin_address
        for name, result in self.destinations.items():
            yield name, result.as_record()


def format_minutes(minutes: float) -> str:
    """Render minutes without a trailing .0."""
    if float(minutes).is_integer():
        return str(int(minutes))
    return str(minutes)


def compute_delay(duration: float, duration_in_traffic: float) -> float:
    """Return the traffic delay in minutes, rounded half away from zero to one decimal."""
    minutes = (Decimal(str(duration_in_traffic)) - Decimal(str(duration))) / 60
    return float(minutes.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def reduce_element(element: Mapping, minutes_label: str = "Minutes") -> DestinationResult:
    """Turn one OK distance matrix element into a DestinationResult."""
    in_traffic = element.get("duration_in_traffic") or element["duration"]
    minutes = compute_delay(element["duration"]["value"], in_traffic["value"])

    duration_text = in_traffic.get("text", "")
    if minutes > 1:
        duration_text += f", +{format_minutes(minutes)} {minutes_label}"

    return DestinationResult(
        distance_text=(element.get("distance") or {}).get("text", ""),
        duration_text=duration_text,
        delay_minutes=float(max(minutes, 0)),
    )


def reduce_response(
    response: dict,
    destinations: Sequence[Destination],
    minutes_label: str = "Minutes",
) -> PollResult:
    """Reduce a distance matrix response to a PollResult.

    Elements are matched to destinations by position. Elements whose status
    is not OK, or that cannot be read, are logged and left out; the rest are
    still processed.
    """
    origin_addresses = response.get("origin_addresses")
    if not isinstance(origin_addresses, list) or not origin_addresses:
        origin_addresses = [""]
    result = PollResult(origin_address=str(origin_addresses[0] or ""))

    rows = response.get("rows") or []
    row = rows[0] if isinstance(rows, list) and rows else None
    elements = row.get("elements") if isinstance(row, Mapping) else None
    if not isinstance(elements, list):
        _LOGGER.warning("响应中没有路线数据")
        return result

    for destination, element in zip(destinations, elements):
        if not isinstance(element, Mapping):
            _LOGGER.warning(f"{destination.name}: 无效的路线数据 ({element!r})")
            continue
        status = element.get("status")
        if status != "OK":
            _LOGGER.warning(f"{destination.name}: {status}")
            continue
        try:
            result.destinations[destination.name] = reduce_element(element, minutes_label)
        except (AttributeError, KeyError, TypeError, InvalidOperation) as err:
            _LOGGER.warning(f"{destination.name}: 响应数据不完整 ({err})")

    return result
