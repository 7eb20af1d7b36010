"""Booking API client."""

from .client import BookingApiClient, close_api_client, get_api_client

__all__ = ["BookingApiClient", "close_api_client", "get_api_client"]
