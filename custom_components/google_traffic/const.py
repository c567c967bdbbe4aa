"""Constants for the Google Traffic integration."""

DOMAIN = "google_traffic"

CONF_API_KEY = "api_key"
CONF_DESTINATIONS = "destinations"
CONF_INTERVAL = "interval"
CONF_ORIGIN_ENTITY_ID = "origin_entity_id"
CONF_DESTINATION = "destination"
CONF_DESTINATION_NAME = "name"
CONF_ADD_ANOTHER = "add_another"

DEFAULT_NAME = "Google Traffic"
DEFAULT_INTERVAL = 300
MIN_INTERVAL = 30

API_URL = "https://maps.googleapis.com/maps/api/distancematrix/json"
API_TIMEOUT = 10
USER_AGENT = "HomeAssistant-GoogleTraffic"
API_PARAMS = {
    "departure_time": "",
    "origins": "",
    "destinations": "",
    "language": "",
    "key": "",
    "units": "",
    "traffic_model": "best_guess",
    "avoid": "ferries",
}

# Health status codes
STATUS_ACTIVE = 102
STATUS_NOT_CONFIGURED = 104
STATUS_TRANSPORT_ERROR = 200
STATUS_API_ERROR = 201
STATUS_MISSING_ORIGIN = 202
STATUS_NO_DESTINATIONS = 203

STATUS_DESCRIPTIONS = {
    STATUS_ACTIVE: "active",
    STATUS_NOT_CONFIGURED: "not_configured",
    STATUS_TRANSPORT_ERROR: "transport_error",
    STATUS_API_ERROR: "api_error",
    STATUS_MISSING_ORIGIN: "missing_origin",
    STATUS_NO_DESTINATIONS: "no_destinations",
}

START_ADDRESS = "Start Address"
ATTR_DISTANCE = "Distance"
ATTR_DURATION = "Duration"
ATTR_TRAFFIC = "Traffic"

MINUTES_LABELS = {
    "en": "Minutes",
    "de": "Minuten",
}

PROFILE_STRING = "~String"
PROFILE_PLUS_MINUTES = "PlusMinutes"

PROFILE_MAPPINGS = {
    START_ADDRESS: PROFILE_STRING,
    ATTR_DISTANCE: PROFILE_STRING,
    ATTR_DURATION: PROFILE_STRING,
    ATTR_TRAFFIC: PROFILE_PLUS_MINUTES,
}

SERVICE_UPDATE = "update"

COORDINATOR = "coordinator"
