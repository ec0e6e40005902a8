class DriverLensError(ValueError):
    """Base class for errors raised by the discovery and forecast core."""


class InputShapeError(DriverLensError):
    """Series set or report does not match the normalized input contract."""


class ConfigurationError(DriverLensError):
    """Scoring weights, selection thresholds or forecast options are invalid."""
