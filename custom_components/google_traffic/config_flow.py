"""Config flow for Google Traffic integration."""
import logging
import voluptuous as vol

from homeassistant import config_entries
from homeassistant.core import callback
from homeassistant.helpers.selector import (
    BooleanSelector,
    EntitySelector,
    EntitySelectorConfig,
    NumberSelector,
    NumberSelectorConfig,
    TextSelector,
    TextSelectorConfig,
    TextSelectorType,
)

from .config import dump_destinations, parse_destinations
from .const import (
    CONF_ADD_ANOTHER,
    CONF_API_KEY,
    CONF_DESTINATION,
    CONF_DESTINATION_NAME,
    CONF_DESTINATIONS,
    CONF_INTERVAL,
    CONF_ORIGIN_ENTITY_ID,
    DEFAULT_INTERVAL,
    DEFAULT_NAME,
    DOMAIN,
    MIN_INTERVAL,
)
from .models import Destination
from .repository import name_key

_LOGGER = logging.getLogger(__name__)

ORIGIN_DOMAINS = ["device_tracker", "person", "zone"]


def _validate_interval(value):
    """Return the interval as int or None when it is out of range."""
    try:
        interval = int(float(value))  # 兼容浮点数输入
    except (ValueError, TypeError):
        return None
    if interval < MIN_INTERVAL:
        return None
    return interval


class ConfigFlow(config_entries.ConfigFlow, domain=DOMAIN):
    """Handle a config flow for Google Traffic."""

    VERSION = 1

    def __init__(self):
        """Initialize the flow."""
        self.settings = {}
        self.destinations = []

    @staticmethod
    @callback
    def async_get_options_flow(config_entry):
        """Get the options flow for this handler."""
        return OptionsFlowHandler()

    async def async_step_user(self, user_input=None):
        """Handle the initial step."""
        errors = {}

        if user_input is not None:
            api_key = (user_input.get(CONF_API_KEY) or "").strip()
            if not api_key:
                errors["base"] = "invalid_api_key"

            interval = _validate_interval(user_input.get(CONF_INTERVAL, DEFAULT_INTERVAL))
            if interval is None:
                errors["base"] = "invalid_interval"
                _LOGGER.warning(f"无效的更新间隔：{user_input.get(CONF_INTERVAL)}（至少 {MIN_INTERVAL} 秒）")

            if not errors:
                self.settings = {
                    CONF_API_KEY: api_key,
                    CONF_INTERVAL: interval,
                }
                if user_input.get(CONF_ORIGIN_ENTITY_ID):
                    self.settings[CONF_ORIGIN_ENTITY_ID] = user_input[CONF_ORIGIN_ENTITY_ID]
                return await self.async_step_destination()

            _LOGGER.debug(f"用户输入验证失败：{errors}")

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_API_KEY): TextSelector(
                        TextSelectorConfig(type=TextSelectorType.PASSWORD)
                    ),
                    vol.Required(CONF_INTERVAL, default=DEFAULT_INTERVAL): NumberSelector(
                        NumberSelectorConfig(min=MIN_INTERVAL, max=86400, step=1)
                    ),
                    vol.Optional(CONF_ORIGIN_ENTITY_ID): EntitySelector(
                        EntitySelectorConfig(domain=ORIGIN_DOMAINS)
                    ),
                }
            ),
            errors=errors,
        )

    async def async_step_destination(self, user_input=None):
        """Add one destination, repeated while the user asks for another."""
        errors = {}

        if user_input is not None:
            name = (user_input.get(CONF_DESTINATION_NAME) or "").strip()
            destination = (user_input.get(CONF_DESTINATION) or "").strip()

            if not name or not destination:
                errors["base"] = "invalid_destination"
            elif any(name_key(item.name) == name_key(name) for item in self.destinations):
                errors["base"] = "duplicate_destination"

            if not errors:
                self.destinations.append(Destination(name=name, destination=destination))
                _LOGGER.debug(f"添加目的地：{name}")
                if user_input.get(CONF_ADD_ANOTHER):
                    return await self.async_step_destination()
                return await self.async_step_finish()

        return self.async_show_form(
            step_id="destination",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_DESTINATION_NAME): TextSelector(TextSelectorConfig()),
                    vol.Required(CONF_DESTINATION): TextSelector(TextSelectorConfig()),
                    vol.Optional(CONF_ADD_ANOTHER, default=False): BooleanSelector(),
                }
            ),
            errors=errors,
            description_placeholders={"count": str(len(self.destinations))},
        )

    async def async_step_finish(self, user_input=None):
        """Create the config entry."""
        if not self.settings:
            _LOGGER.error("缺少第一步的数据")
            return await self.async_step_user()

        data = dict(self.settings)
        data[CONF_DESTINATIONS] = dump_destinations(self.destinations)
        return self.async_create_entry(title=DEFAULT_NAME, data=data)


class OptionsFlowHandler(config_entries.OptionsFlow):
    """Handle options."""

    async def async_step_init(self, user_input=None):
        """Manage the options."""
        errors = {}
        current = {**self.config_entry.data, **self.config_entry.options}

        if user_input is not None:
            interval = _validate_interval(user_input.get(CONF_INTERVAL))
            if interval is None:
                errors["base"] = "invalid_interval"

            raw = user_input.get(CONF_DESTINATIONS) or "[]"
            destinations = parse_destinations(raw)
            if not destinations and raw.strip() not in ("", "[]"):
                errors["base"] = "invalid_destinations"

            if not errors:
                options = {
                    CONF_API_KEY: (user_input.get(CONF_API_KEY) or "").strip(),
                    CONF_INTERVAL: interval,
                    CONF_DESTINATIONS: dump_destinations(destinations),
                    # 空字符串表示使用家的位置
                    CONF_ORIGIN_ENTITY_ID: user_input.get(CONF_ORIGIN_ENTITY_ID) or "",
                }
                return self.async_create_entry(title="", data=options)

        origin_key = (
            vol.Optional(CONF_ORIGIN_ENTITY_ID, default=current[CONF_ORIGIN_ENTITY_ID])
            if current.get(CONF_ORIGIN_ENTITY_ID)
            else vol.Optional(CONF_ORIGIN_ENTITY_ID)
        )

        return self.async_show_form(
            step_id="init",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_API_KEY, default=current.get(CONF_API_KEY, "")): TextSelector(
                        TextSelectorConfig(type=TextSelectorType.PASSWORD)
                    ),
                    vol.Required(
                        CONF_INTERVAL, default=current.get(CONF_INTERVAL, DEFAULT_INTERVAL)
                    ): NumberSelector(NumberSelectorConfig(min=MIN_INTERVAL, max=86400, step=1)),
                    vol.Required(
                        CONF_DESTINATIONS, default=current.get(CONF_DESTINATIONS, "[]")
                    ): TextSelector(TextSelectorConfig(multiline=True)),
                    origin_key: EntitySelector(EntitySelectorConfig(domain=ORIGIN_DOMAINS)),
                }
            ),
            errors=errors,
        )
