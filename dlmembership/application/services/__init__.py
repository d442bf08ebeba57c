"""Application services.

Usage:
    from dlmembership.application.services import PayloadNormalizer, BatchExecutor
"""

from dlmembership.application.services.batch_executor import BatchExecutor
from dlmembership.application.services.payload_normalizer import PayloadNormalizer
from dlmembership.application.services.result_aggregator import (
    aggregate,
    aggregate_failure,
    derive_overall_status,
)

__all__ = [
    "BatchExecutor",
    "PayloadNormalizer",
    "aggregate",
    "aggregate_failure",
    "derive_overall_status",
]
