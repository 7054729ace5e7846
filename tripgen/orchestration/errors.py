"""Exception types for the itinerary pipeline."""


class TripValidationError(Exception):
    """Trip request is missing a required field or failed validation."""

    pass


class ProviderError(Exception):
    """Provider call failed or returned unusable data.

    Raised inside adapters only; the provider runner converts it into a
    ProviderErr so it never escapes a stage.
    """

    def __init__(self, reason: str, detail: str = "") -> None:
        super().__init__(detail or reason)
        self.reason = reason
        self.detail = detail


class GenerationError(Exception):
    """Pipeline run failed after the trip was marked failed."""

    pass


class TripNotFoundError(Exception):
    """Trip record does not exist."""

    pass
