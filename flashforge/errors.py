"""Exception hierarchy for FlashForge."""


class FlashForgeError(Exception):
    """Base class for all FlashForge errors."""


class GenerationError(FlashForgeError):
    """A generation stage (translation, sentences, audio) failed."""


class StageTimeoutError(GenerationError):
    """A generation stage did not report progress in time."""

    def __init__(self, timeout: float):
        super().__init__(f"Stage timed out after {timeout:g}s")
        self.timeout = timeout


class ExportError(FlashForgeError):
    """Writing an export artifact failed."""


class SettingsError(FlashForgeError, ValueError):
    """A settings update named an unknown field or changed a pinned one."""


class InvalidTransitionError(FlashForgeError):
    """A word record was moved to a status its state machine forbids."""

    def __init__(self, current, requested):
        super().__init__(f"Cannot move record from '{current.value}' to '{requested.value}'")
        self.current = current
        self.requested = requested


def describe_error(error: BaseException) -> str:
    """Human-readable reason for a failure, never empty."""
    message = str(error).strip() if error is not None else ""
    return message or "Unknown error"
