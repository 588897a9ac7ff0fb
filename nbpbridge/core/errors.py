"""Domain-specific errors for nbpbridge."""


class NbpBridgeError(Exception):
    """Base error for nbpbridge."""


class ConfigError(NbpBridgeError):
    """Base configuration error."""


class ConfigLoadError(ConfigError):
    """Raised when the configuration file cannot be found or read."""


class ConfigValidationError(ConfigError):
    """Raised when a configuration file does not conform to schema or semantics."""


class BridgeSetupError(NbpBridgeError):
    """Base error for fatal startup failures."""


class DeviceOpenError(BridgeSetupError):
    """Raised when the backplate driver cannot be loaded or the link cannot be opened."""


class DeviceResetError(BridgeSetupError):
    """Raised when the reset message cannot be sent to the backplate."""


class EndpointBindError(BridgeSetupError):
    """Raised when a message-bus endpoint cannot be bound."""


class CodecError(NbpBridgeError):
    """Base wire-format error."""


class RequestDecodeError(CodecError):
    """Raised when a control request is not valid JSON or fails schema validation."""


class EventDecodeError(CodecError):
    """Raised when a published event or reply cannot be decoded."""


class ClientTimeoutError(NbpBridgeError):
    """Raised when a remote bridge does not answer in time."""
