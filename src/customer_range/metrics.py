"""
Module for collecting and logging metrics of a customer processing run.
"""

import logging
from typing import Dict, NamedTuple

from .customer import WarningKind
from .parser import ParseSession, ProcessResult

logger = logging.getLogger(__name__)


class CustomerMetrics(NamedTuple):
    """Container for customer processing metrics."""

    total_blocks: int
    parsed_customers: int
    customers_in_range: int
    noise_tokens: int
    warning_counts: Dict[str, int]

    @property
    def customers_out_of_range(self) -> int:
        return self.parsed_customers - self.customers_in_range


def collect_metrics(session: ParseSession, result: ProcessResult) -> CustomerMetrics:
    """
    Collect metrics from a finished parse session.

    Args:
        session: The session that produced the result
        result: The ProcessResult returned by the session

    Returns:
        CustomerMetrics containing all collected counts
    """
    warning_counts = {
        kind.value: result.warnings.count(kind) for kind in WarningKind
    }
    return CustomerMetrics(
        total_blocks=session.block_count,
        parsed_customers=len(session.candidates),
        customers_in_range=result.customer_count,
        noise_tokens=session.noise_count,
        warning_counts=warning_counts,
    )


def log_metrics(metrics: CustomerMetrics, enabled: bool) -> None:
    """
    Log metrics as key=value lines between start and end markers.

    Args:
        metrics: CustomerMetrics to log
        enabled: Whether metrics output was requested
    """
    if not enabled:
        return

    logger.debug("=== CUSTOMER_RANGE_METRICS ===")
    logger.debug(f"total_blocks={metrics.total_blocks}")
    logger.debug(f"parsed_customers={metrics.parsed_customers}")
    logger.debug(f"customers_in_range={metrics.customers_in_range}")
    logger.debug(f"customers_out_of_range={metrics.customers_out_of_range}")
    logger.debug(f"noise_tokens={metrics.noise_tokens}")
    for kind, count in metrics.warning_counts.items():
        logger.debug(f"warnings[{kind}]={count}")
    logger.debug("=== END_CUSTOMER_RANGE_METRICS ===")
