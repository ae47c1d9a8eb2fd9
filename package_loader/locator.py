"""Resource location across an ordered loading scope."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .errors import InvalidArgumentError
from .errors import ResourceUnavailableError
from .locations import PhysicalLocation

logger = logging.getLogger(__name__)


class ResourceLocator:
    """Finds the physical locations of a logical path across resolvers.

    Resolvers are queried in the order the scope declares. A location reachable
    through more than one resolver (for example a resolver and the parent it
    delegates to) is reported once, tagged with the resolver that saw it first.
    """

    def locate(self, logical_path: str, scope: Iterable) -> list[PhysicalLocation]:
        """Return the ordered, de-duplicated locations for logical_path.

        Args:
            logical_path: Slash-separated package path
            scope: Ordered resolvers to query

        Returns:
            Possibly empty list of locations. A resolver that fails is skipped.

        Raises:
            InvalidArgumentError: Empty logical path
        """
        if not logical_path:
            raise InvalidArgumentError("Logical path must not be empty")

        seen: set[tuple[str, ...]] = set()
        locations: list[PhysicalLocation] = []

        for resolver in scope:
            try:
                found = resolver.find_locations(logical_path)
            except (OSError, ResourceUnavailableError) as e:
                logger.warning(f"[package:locate] {resolver!r} failed for '{logical_path}': {e}")
                continue

            for location in found:
                if location.identity in seen:
                    logger.debug(f"[package:locate] Skipping duplicate location {location}")
                    continue
                seen.add(location.identity)
                locations.append(location)

        logger.debug(f"[package:locate] '{logical_path}' -> {len(locations)} location(s)")
        return locations
