"""
Customer file parsing, distance annotation and range filtering.

The input is a loose sequence of ``key: value`` pairs. A scanner splits it into
tokens, a decision table maps every token kind to a handler, and a
CustomerBuilder accumulates the fields of the current block until a block
boundary is reached. Text that is not a recognised token is ignored so that
comments and formatting in customer files never abort a run.
"""

from enum import Enum
from typing import Callable, Dict, Iterator, List, NamedTuple, Optional, Tuple
import logging
import re

from .config import CustomerRangeConfig
from .customer import CustomerBuilder, CustomerRecord, WarningLog
from .geometry import GeoPoint, calculate_distance

logger = logging.getLogger(__name__)


UUID_PATTERN = r"[a-z0-9]{8}-[a-z0-9]{4}-[a-z0-9]{4}-[a-z0-9]{4}-[a-z0-9]{12}"


class TokenKind(Enum):
    """Enumeration for the token shapes produced by the scanner."""

    LINE_BREAK = "line_break"
    NUMBER_FIELD = "number_field"
    UUID_FIELD = "uuid_field"
    NOISE = "noise"

    def __str__(self) -> str:
        return self.value


class Token(NamedTuple):
    """A scanned piece of the customer file."""

    kind: TokenKind
    key: Optional[str]
    value: Optional[str]
    position: int


class FieldSpec(NamedTuple):
    """How a recognised key is stored on the builder."""

    attribute: str
    token_kind: TokenKind
    convert: Callable[[str], object]


FIELDS: Dict[str, FieldSpec] = {
    "id": FieldSpec("identifier", TokenKind.UUID_FIELD, str),
    "lat": FieldSpec("latitude", TokenKind.NUMBER_FIELD, float),
    "long": FieldSpec("longitude", TokenKind.NUMBER_FIELD, float),
}


def compile_token_pattern(min_fraction_digits: int = 6) -> re.Pattern:
    """
    Build the scanner pattern.

    Coordinates need at least ``min_fraction_digits`` fractional digits; values
    with fewer digits, or without a decimal point, are not coordinates.

    Args:
        min_fraction_digits: Minimum number of digits after the decimal point

    Returns:
        Compiled pattern with one alternative per token shape

    Raises:
        ValueError: If min_fraction_digits is negative
    """
    if min_fraction_digits < 0:
        raise ValueError("min_fraction_digits must not be negative")

    number = rf"[+-]?[0-9]+\.[0-9]{{{min_fraction_digits},}}"
    return re.compile(
        rf"""
        (?P<number_key>[a-z0-9]*):\s*(?P<number>{number})
        | (?P<uuid_key>[a-z0-9]*):\s*(?P<uuid>{UUID_PATTERN})
        | (?P<line_break>\r\n|\r|\n)
        """,
        re.IGNORECASE | re.VERBOSE,
    )


def _noise(raw_text: str, start: int, end: int) -> Iterator[Token]:
    text = raw_text[start:end].strip()
    if text:
        yield Token(TokenKind.NOISE, None, text, start)


def tokenize(raw_text: str, pattern: Optional[re.Pattern] = None) -> Iterator[Token]:
    """
    Split raw customer text into tokens.

    Args:
        raw_text: Complete content of a customer file
        pattern: Scanner pattern (default: compile_token_pattern())

    Yields:
        Tokens in input order, including NOISE tokens for unrecognised text
    """
    if pattern is None:
        pattern = compile_token_pattern()

    position = 0
    for match in pattern.finditer(raw_text):
        yield from _noise(raw_text, position, match.start())
        position = match.end()

        if match.group("line_break") is not None:
            yield Token(TokenKind.LINE_BREAK, None, None, match.start())
        elif match.group("number") is not None:
            yield Token(
                TokenKind.NUMBER_FIELD,
                match.group("number_key"),
                match.group("number"),
                match.start(),
            )
        else:
            yield Token(
                TokenKind.UUID_FIELD,
                match.group("uuid_key"),
                match.group("uuid"),
                match.start(),
            )

    yield from _noise(raw_text, position, len(raw_text))


class ProcessResult(NamedTuple):
    """Customers within range, sorted by identifier, and the session's warnings."""

    customers: List[CustomerRecord]
    warnings: WarningLog

    @property
    def customer_count(self) -> int:
        return len(self.customers)


class ParseSession:
    """
    Parses one customer file and owns the warnings raised while doing so.

    Fields are collected per line and the block boundaries are decided when
    the line ends:
    - a line with two or more fields is a block of its own; any pending
      block ends first
    - a line with a single field continues the pending block, unless the
      block already has that field or the field is an id, which start a new
      block; the block ends as soon as it is complete
    - an empty line ends the pending block, a line holding only
      unrecognised text leaves it alone
    - within a line, a repeated field starts a new block
    - the end of the input ends the pending block
    """

    def __init__(self, config: Optional[CustomerRangeConfig] = None):
        self.config = config or CustomerRangeConfig()
        self.warnings = WarningLog()
        self.candidates: List[CustomerRecord] = []
        self.block_count = 0
        self.noise_count = 0
        self._pattern = compile_token_pattern(self.config.min_fraction_digits)
        self._builder = CustomerBuilder()
        self._line_fields: List[Tuple[FieldSpec, Token]] = []
        self._line_has_tokens = False
        self._used = False

    def parse(self, raw_text: str) -> List[CustomerRecord]:
        """
        Parse raw text into validated customer records.

        Args:
            raw_text: Complete content of a customer file

        Returns:
            Records of all complete blocks, in input order

        Raises:
            RuntimeError: If the session has already parsed a file
        """
        if self._used:
            raise RuntimeError("ParseSession instances parse a single file only")
        self._used = True

        for token in tokenize(raw_text, self._pattern):
            self._TOKEN_HANDLERS[token.kind](self, token)

        self._end_line()
        if not self._builder.is_empty():
            self._finish_block()

        logger.debug(
            f"Parsed {len(self.candidates)} customers from {self.block_count} blocks "
            f"({len(self.warnings)} warnings, {self.noise_count} noise tokens)"
        )
        return list(self.candidates)

    def process(
        self,
        raw_text: str,
        reference: Optional[GeoPoint] = None,
        threshold_km: Optional[float] = None,
    ) -> ProcessResult:
        """
        Parse, sort, annotate with distances and filter by range.

        Args:
            raw_text: Complete content of a customer file
            reference: Point distances are measured from (default: from config)
            threshold_km: Maximum distance in km (default: from config)

        Returns:
            ProcessResult with the customers within range and the warnings
        """
        if reference is None:
            reference = self.config.reference
        if threshold_km is None:
            threshold_km = self.config.threshold_km

        customers = sort_customers(self.parse(raw_text))
        annotate_distances(customers, reference, self.config)
        return ProcessResult(filter_by_distance(customers, threshold_km), self.warnings)

    def _on_line_break(self, token: Token) -> None:
        self._end_line()

    def _on_field(self, token: Token) -> None:
        self._line_has_tokens = True
        field_spec = FIELDS.get(token.key)
        if field_spec is None or field_spec.token_kind != token.kind:
            logger.debug(f"Ignoring field '{token.key}' at offset {token.position}")
            return
        self._line_fields.append((field_spec, token))

    def _on_noise(self, token: Token) -> None:
        self._line_has_tokens = True
        self.noise_count += 1
        logger.debug(f"Skipping unrecognised text at offset {token.position}: {token.value!r}")

    def _end_line(self) -> None:
        fields, self._line_fields = self._line_fields, []
        had_tokens, self._line_has_tokens = self._line_has_tokens, False

        if len(fields) > 1:
            if not self._builder.is_empty():
                self._finish_block()
            for field_spec, token in fields:
                if self._builder.has(field_spec.attribute):
                    self._finish_block()
                self._set_field(field_spec, token)
            self._finish_block()
        elif fields:
            field_spec, token = fields[0]
            starts_new_block = self._builder.has(field_spec.attribute) or (
                field_spec.attribute == "identifier" and not self._builder.is_empty()
            )
            if starts_new_block:
                self._finish_block()
            self._set_field(field_spec, token)
            if self._builder.is_complete():
                self._finish_block()
        elif not had_tokens and not self._builder.is_empty():
            self._finish_block()

    def _set_field(self, field_spec: FieldSpec, token: Token) -> None:
        self._builder.set(field_spec.attribute, field_spec.convert(token.value))

    def _finish_block(self) -> None:
        self.block_count += 1
        record = self._builder.finalize(self.warnings, self.config.messages)
        if record is not None:
            self.candidates.append(record)
        self._builder = CustomerBuilder()

    _TOKEN_HANDLERS = {
        TokenKind.LINE_BREAK: _on_line_break,
        TokenKind.NUMBER_FIELD: _on_field,
        TokenKind.UUID_FIELD: _on_field,
        TokenKind.NOISE: _on_noise,
    }


def sort_customers(customers: List[CustomerRecord]) -> List[CustomerRecord]:
    """Sort customers by identifier using ordinal string comparison."""
    return sorted(customers, key=lambda customer: customer.identifier)


def annotate_distances(
    customers: List[CustomerRecord],
    reference: GeoPoint,
    config: Optional[CustomerRangeConfig] = None,
) -> None:
    """Set distance_km on every customer, measured from the reference point."""
    config = config or CustomerRangeConfig()
    for customer in customers:
        customer.distance_km = calculate_distance(
            reference, customer.location, config.method, config.ellipsoid
        )


def filter_by_distance(
    customers: List[CustomerRecord], threshold_km: float
) -> List[CustomerRecord]:
    """
    Keep the customers within threshold_km.

    Customers whose distance is nan are never within range.
    """
    return [customer for customer in customers if customer.distance_km <= threshold_km]


def process(
    raw_text: str,
    reference: Optional[GeoPoint] = None,
    threshold_km: Optional[float] = None,
    config: Optional[CustomerRangeConfig] = None,
) -> ProcessResult:
    """
    Find the customers in raw_text that are within range of the reference point.

    Args:
        raw_text: Complete content of a customer file
        reference: Point distances are measured from (default: 52.493256, 13.446082)
        threshold_km: Maximum distance in km (default: 100)
        config: Parser and distance configuration

    Returns:
        ProcessResult(customers, warnings); customers are sorted by identifier
    """
    return ParseSession(config).process(raw_text, reference, threshold_km)
