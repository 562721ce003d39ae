class SignboardError(Exception):
    pass


class MalformedData(SignboardError, ValueError):
    """A reloaded payload does not have the expected shape."""


class MeasurementError(SignboardError):
    pass


class ConfigError(SignboardError, ValueError):
    pass
