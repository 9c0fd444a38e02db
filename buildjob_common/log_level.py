from .models import LogLevel

_ERROR_MARKERS = ("error", "failed")
_WARN_MARKERS = ("warn",)


def classify_message(message: str) -> LogLevel:
    """
    Infer a severity level from free-text log content.

    Case-insensitive substring match, first match wins: "error" or "failed"
    gives ERROR, "warn" gives WARN, anything else is INFO.

    Example:
        >>> classify_message("ERROR in dockerfile")
        <LogLevel.ERROR: 'error'>
    """
    lowered = message.casefold()

    if any(marker in lowered for marker in _ERROR_MARKERS):
        return LogLevel.ERROR

    if any(marker in lowered for marker in _WARN_MARKERS):
        return LogLevel.WARN

    return LogLevel.INFO
