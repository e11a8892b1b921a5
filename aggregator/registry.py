"""
Fixed, ordered collection of the venue adapters the aggregator queries.
"""
import logging
from typing import Iterator, List, Optional, Sequence, Tuple

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)

DEFAULT_VENUE_TIMEOUT = 8


class VenueRegistry:
    """
    Immutable ordered set of venues, resolved once at startup.

    Order only matters for presentation and for breaking ties between
    identical output amounts (earliest registered wins).
    """

    def __init__(self, venues: Sequence):
        names = [venue.name for venue in venues]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if duplicates:
            raise ImproperlyConfigured(f"Duplicate venue names: {', '.join(duplicates)}")
        self._venues: Tuple = tuple(venues)

    def __iter__(self) -> Iterator:
        return iter(self._venues)

    def __len__(self) -> int:
        return len(self._venues)

    def names(self) -> List[str]:
        return [venue.name for venue in self._venues]

    def get(self, name: str) -> Optional[object]:
        for venue in self._venues:
            if venue.name == name:
                return venue
        return None


def build_registry_from_settings() -> VenueRegistry:
    """Instantiate every adapter listed in ``settings.SWAP_VENUES``, in order."""
    paths = getattr(settings, "SWAP_VENUES", [])
    timeout = getattr(settings, "QUOTE_VENUE_TIMEOUT", DEFAULT_VENUE_TIMEOUT)

    venues = []
    for path in paths:
        try:
            venue_class = import_string(path)
        except ImportError as exc:
            raise ImproperlyConfigured(f"Cannot import venue adapter {path}: {exc}") from exc
        venues.append(venue_class(timeout=timeout))

    registry = VenueRegistry(venues)
    logger.info(f"Registered {len(registry)} venues: {', '.join(registry.names())}")
    return registry
