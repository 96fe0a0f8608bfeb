"""Constants for the ACW02 to MQTT bridge."""

# Cluster names
BASIC_CLUSTER = "genBasic"
ONOFF_CLUSTER = "genOnOff"
THERMOSTAT_CLUSTER = "hvacThermostat"
FAN_CONTROL_CLUSTER = "hvacFanCtrl"

# Attribute names
LOCATION_DESC_ATTRIBUTE = "locationDesc"
ONOFF_ATTRIBUTE = "onOff"
LOCAL_TEMP_ATTRIBUTE = "localTemp"
RUNNING_MODE_ATTRIBUTE = "runningMode"
SYSTEM_MODE_ATTRIBUTE = "systemMode"
HEATING_SETPOINT_ATTRIBUTE = "occupiedHeatingSetpoint"
COOLING_SETPOINT_ATTRIBUTE = "occupiedCoolingSetpoint"
FAN_MODE_ATTRIBUTE = "fanMode"

# Report kinds
REPORT_ATTRIBUTE = "attributeReport"
REPORT_READ_RESPONSE = "readResponse"

# Temperatures are carried in hundredths of a degree
TEMPERATURE_SCALE = 100
SETPOINT_MIN = 16
SETPOINT_MAX = 31
SETPOINT_STEP = 1

# On/off payloads
PAYLOAD_ON = "ON"
PAYLOAD_OFF = "OFF"
PAYLOAD_TOGGLE = "TOGGLE"

# Properties read on every poll, in issue order
POLLED_PROPERTIES = ("running_state", "system_mode", "fan_mode", "error_text")

# Error text
NO_ERROR_TEXTS = ("", "no error")
DEFAULT_KNOWN_ERROR_PATTERNS = (r"^[EFP]\d{1,3}\b",)
DEFAULT_ERROR_FALLBACK = "Unknown AC error, check the indoor unit"
ERROR_TEXT_MODE_CLASSIFY = "classify"
ERROR_TEXT_MODE_PASSTHROUGH = "passthrough"

# Default configuration paths
DEFAULT_CONFIG_FILE = "acw02mqtt.yaml"
DEFAULT_CONFIG_EXAMPLE_FILE = "acw02mqtt.yaml.example"

# MQTT Topics and Payloads
DEFAULT_BASE_TOPIC = "acw02"
MQTT_PAYLOAD_AVAILABLE = "online"
MQTT_PAYLOAD_UNAVAILABLE = "offline"

# Timeouts (seconds)
DEVICE_COMMAND_TIMEOUT = 15.0

# Poll interval (seconds)
DEFAULT_POLL_INTERVAL = 60

# MQTT settings
MQTT_QOS = 1
MQTT_KEEPALIVE = 60
