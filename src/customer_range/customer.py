"""Data structures for customer records and the warnings raised while parsing them."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, NamedTuple, Optional
import logging

from .geometry import GeoPoint

logger = logging.getLogger(__name__)


class WarningKind(Enum):
    """Enumeration for the reasons a customer block is dropped."""

    MALFORMED_IDENTIFIER = "malformed_identifier"
    MALFORMED_LOCATION = "malformed_location"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class WarningMessages:
    """Templates for the human-readable warnings.

    ``identifier`` receives ``latitude`` and ``longitude``, ``location``
    receives ``identifier``. Missing values are rendered as ``missing``.
    """

    identifier: str = (
        "Der Kunde mit den Koordinaten '{latitude},{longitude}' "
        "scheint eine fehlerhafte ID zu haben!"
    )
    location: str = (
        "Der Kunde mit der ID '{identifier}' hat fehlerhafte geographische Daten "
        "und kann, da die Distanz nicht ermittelt werden kann, "
        "nicht ausgewertet werden!"
    )
    missing: str = "undefined"


class ParseWarning(NamedTuple):
    """A single non-fatal diagnostic for a dropped customer block."""

    kind: WarningKind
    message: str

    def __str__(self) -> str:
        return self.message


class WarningLog:
    """Ordered, append-only collection of parse warnings for one session."""

    def __init__(self) -> None:
        self._warnings: List[ParseWarning] = []

    def append(self, kind: WarningKind, message: str) -> None:
        self._warnings.append(ParseWarning(kind, message))

    @property
    def messages(self) -> List[str]:
        """The warning texts in the order they were raised."""
        return [warning.message for warning in self._warnings]

    def count(self, kind: WarningKind) -> int:
        return sum(1 for warning in self._warnings if warning.kind == kind)

    def __len__(self) -> int:
        return len(self._warnings)

    def __iter__(self) -> Iterator[ParseWarning]:
        return iter(list(self._warnings))

    def __getitem__(self, index: int) -> ParseWarning:
        return self._warnings[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, WarningLog):
            return NotImplemented
        return self._warnings == other._warnings

    def __repr__(self) -> str:
        return f"WarningLog({self._warnings!r})"


@dataclass
class CustomerRecord:
    """A validated customer with its distance from the reference point."""

    identifier: str
    location: GeoPoint
    distance_km: float = 0.0

    @property
    def latitude(self) -> float:
        return self.location.latitude

    @property
    def longitude(self) -> float:
        return self.location.longitude


@dataclass
class CustomerBuilder:
    """Accumulates the optional fields of one customer block.

    A block becomes a CustomerRecord only when all fields are present; until
    then ``finalize`` reports what is missing through the warning log.
    """

    identifier: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    FIELDS = ("identifier", "latitude", "longitude")

    def is_empty(self) -> bool:
        return all(getattr(self, name) is None for name in self.FIELDS)

    def is_complete(self) -> bool:
        return all(getattr(self, name) is not None for name in self.FIELDS)

    def has(self, name: str) -> bool:
        return getattr(self, name) is not None

    def set(self, name: str, value) -> None:
        setattr(self, name, value)

    def finalize(
        self, warnings: WarningLog, messages: WarningMessages
    ) -> Optional[CustomerRecord]:
        """
        Turn the accumulated fields into a record or into warnings.

        The identifier and location checks are independent: a block missing
        both its id and a coordinate produces two warnings.

        Args:
            warnings: Log receiving a warning for every failed check
            messages: Warning templates

        Returns:
            The CustomerRecord, or None if the block was dropped
        """
        if self.is_complete():
            return CustomerRecord(
                identifier=self.identifier,
                location=GeoPoint(self.latitude, self.longitude),
            )

        def show(value) -> str:
            return messages.missing if value is None else str(value)

        if self.identifier is None:
            warnings.append(
                WarningKind.MALFORMED_IDENTIFIER,
                messages.identifier.format(
                    latitude=show(self.latitude), longitude=show(self.longitude)
                ),
            )
            logger.debug(
                f"Dropped block without identifier at ({self.latitude}, {self.longitude})"
            )

        if self.latitude is None or self.longitude is None:
            warnings.append(
                WarningKind.MALFORMED_LOCATION,
                messages.location.format(identifier=show(self.identifier)),
            )
            logger.debug(f"Dropped customer {self.identifier} without location")

        return None
