"""Venue boundary -- metadata types and the metadata source interface."""

from arbsizer.exchange.client import VenueMetadataSource
from arbsizer.exchange.types import DEFAULT_VOLUME_SCALE, ScaleSpec, VenueInfo

__all__ = ["DEFAULT_VOLUME_SCALE", "ScaleSpec", "VenueInfo", "VenueMetadataSource"]
