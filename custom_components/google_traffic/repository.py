"""Materialization of poll results into the host object tree."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace
import logging
from typing import Any, Optional

from homeassistant.util import slugify
from pypinyin import lazy_pinyin

from .const import PROFILE_MAPPINGS, PROFILE_PLUS_MINUTES, PROFILE_STRING

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class VariableProfile:
    """How a stored value is displayed."""

    name: str
    value_type: type
    digits: Optional[int] = None
    prefix: str = ""
    suffix: str = ""
    icon: Optional[str] = None

    def format(self, value: Any) -> str:
        if self.value_type is float and isinstance(value, (int, float)):
            text = f"{value:.{self.digits or 0}f}"
            # 只有正值才加前缀
            if value > 0:
                text = f"{self.prefix}{text}"
            return f"{text}{self.suffix}"
        return f"{value}{self.suffix}"


VARIABLE_PROFILES = {
    PROFILE_STRING: VariableProfile(name=PROFILE_STRING, value_type=str),
    PROFILE_PLUS_MINUTES: VariableProfile(
        name=PROFILE_PLUS_MINUTES,
        value_type=float,
        digits=0,
        prefix="+",
        suffix=" Minutes",
        icon="mdi:clock-outline",
    ),
}


def profile_for(name: str, minutes_label: Optional[str] = None) -> VariableProfile:
    """Look up the display profile for a variable name.

    ``minutes_label`` replaces the untranslated suffix of the minutes profile.
    """
    profile = VARIABLE_PROFILES[PROFILE_MAPPINGS.get(name, PROFILE_STRING)]
    if minutes_label and profile.name == PROFILE_PLUS_MINUTES:
        return replace(profile, suffix=f" {minutes_label}")
    return profile


def name_key(name: str) -> str:
    """Normalized form of a name, shared by identifiers and entity ids.

    Two names with the same key would end up on the same entities.
    """
    return slugify("".join(lazy_pinyin(name)))


def make_ident(parent: Any, name: str) -> str:
    """Stable identifier of a child of parent."""
    return f"{parent}_{name_key(name)}"


class Repository(ABC):
    """Host capability that stores categories and typed variables."""

    @abstractmethod
    def create_or_update_category(self, parent: Any, ident: str, name: str, position: int) -> Any:
        """Return the category ident under parent, creating it if needed."""

    @abstractmethod
    def create_or_update_variable(
        self,
        parent: Any,
        ident: str,
        name: str,
        value: Any,
        profile: VariableProfile,
        position: int,
    ) -> None:
        """Create the variable under parent or update its value."""


def materialize(
    repository: Repository,
    root: Any,
    records: Iterable[tuple[str, Any]],
    minutes_label: Optional[str] = None,
) -> None:
    """Write a record set through the repository.

    Scalars become variables under root, mappings become a category holding
    one variable per key. Positions follow the iteration order.
    """
    position = 0
    category_position = 0
    for key, value in records:
        if isinstance(value, Mapping):
            category = repository.create_or_update_category(
                root, make_ident(root, key), key, category_position
            )
            category_position += 1
            for pos, (name, child) in enumerate(value.items()):
                repository.create_or_update_variable(
                    category,
                    make_ident(category, name),
                    name,
                    child,
                    profile_for(name, minutes_label),
                    pos,
                )
        else:
            repository.create_or_update_variable(
                root, make_ident(root, key), key, value, profile_for(key, minutes_label), position
            )
            position += 1
    _LOGGER.debug(f"已写入 {position} 个变量和 {category_position} 个分类")
