"""Custom exception hierarchy for the ECG simulation and analysis core."""


class CardioSimError(Exception):
    """Base exception for all cardiosim errors."""


class InvalidConfigurationError(CardioSimError, ValueError):
    """Raised when a generator or detector is called with invalid parameters."""

    def __init__(self, parameter: str, value: object, detail: str) -> None:
        self.parameter = parameter
        self.value = value
        self.detail = detail
        super().__init__(f"Invalid {parameter}={value!r}: {detail}")


class UnknownPathologyError(CardioSimError, ValueError):
    """Raised when a pathology tag is not part of the supported set."""

    def __init__(self, tag: str) -> None:
        self.tag = tag
        super().__init__(f"Unknown pathology '{tag}'")


class SampleRateMismatchError(CardioSimError):
    """Raised when a detector session is fed buffers at a different sample rate."""

    def __init__(self, expected: float, received: float) -> None:
        self.expected = expected
        self.received = received
        super().__init__(
            f"Sample rate changed mid-session: expected {expected} Hz, got {received} Hz"
        )
