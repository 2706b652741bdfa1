"""
Exception hierarchy for location search.

Provider modules raise these; `nearshop.search.session` is the only layer that
turns them into user-visible state. Each class carries a default
`user_message` that a UI can show as-is.
"""

from __future__ import annotations


class LocationSearchError(Exception):
    """Base class for all location search errors."""

    user_message = "Something went wrong while looking up the location."

    def __init__(self, message: str | None = None, *, user_message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        if user_message is not None:
            self.user_message = user_message


class InvalidInputError(LocationSearchError):
    """Query too short to send; suppresses the network call and is never shown."""

    user_message = ""


class ProviderError(LocationSearchError):
    """The geocoding provider answered with a failure status."""

    user_message = "The location service is unavailable right now. Please try again."

    def __init__(
        self,
        message: str | None = None,
        *,
        status: str | None = None,
        user_message: str | None = None,
    ) -> None:
        super().__init__(message, user_message=user_message)
        self.status = status


class TransientNetworkError(ProviderError):
    """Transport or parse failure talking to a provider."""

    user_message = "Could not reach the location service. Check your connection and try again."


class NoResultError(LocationSearchError):
    """The provider answered successfully but found nothing."""

    user_message = "Could not determine this location."


class ConfigurationError(LocationSearchError):
    """Required configuration (e.g. the provider API key) is missing."""

    user_message = "The maps API key is not configured."


class MapUnavailableError(LocationSearchError):
    """A map interaction was requested on a host without map support."""

    user_message = "The map is not available on this device."


class NoSelectionError(LocationSearchError):
    """A picker was confirmed with no location selected."""

    user_message = "Please select a location on the map."
