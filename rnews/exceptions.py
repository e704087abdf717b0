class ConfigError(RuntimeError):
    """Raised when the configuration file is missing, unresolvable or invalid."""


class UnsupportedWebhookError(ConfigError):
    """Raised when a webhook declares a platform type with no adapter."""


class WebhookError(RuntimeError):
    """Raised when a webhook platform rejects or fails to receive a message."""


class SourceFetchError(RuntimeError):
    """Raised inside a source when a feed or hot list cannot be fetched or decoded."""
