"""
Input validation — reject malformed calls before any network interaction.

Every validator returns a Result so the operations can chain them with
flat_map; nothing here raises.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from railway import Result, ResultFailures

from revocation_client.domain.models import DownloadFilter, RevocationResult
from revocation_client.protocol import MAX_REQUESTS_MAX_VALUE


def validate_transaction_id(transaction_id: Any) -> Result[str]:
    """Fail with INVALID_ARGUMENT unless transaction_id is a non-blank string."""
    if not isinstance(transaction_id, str) or not transaction_id.strip():
        return ResultFailures.invalid_argument("transaction_id is required")
    return Result.success(transaction_id)


def validate_max_requests(max_requests: Any) -> Result[int]:
    """
    Fail with INVALID_ARGUMENT for non-integers and OUT_OF_RANGE outside
    [1, MAX_REQUESTS_MAX_VALUE].
    """
    if isinstance(max_requests, bool) or not isinstance(max_requests, int):
        return ResultFailures.invalid_argument(
            f"max_requests must be an integer, got {type(max_requests).__name__}"
        )
    if not 1 <= max_requests <= MAX_REQUESTS_MAX_VALUE:
        return ResultFailures.out_of_range("max_requests", 1, MAX_REQUESTS_MAX_VALUE, max_requests)
    return Result.success(max_requests)


def validate_results(results: Iterable[RevocationResult] | None) -> Result[list[RevocationResult]]:
    """
    Fail with INVALID_ARGUMENT for a missing or empty batch.

    Uploading nothing is a caller error, not a no-op. Order is preserved.
    """
    if not isinstance(results, Iterable) or isinstance(results, (str, bytes, dict)):
        return ResultFailures.invalid_argument("results are required")
    batch = list(results)
    if not batch:
        return ResultFailures.invalid_argument("results must contain at least one item")
    for index, item in enumerate(batch):
        if not isinstance(item, RevocationResult):
            return ResultFailures.invalid_argument(
                f"results[{index}] must be a RevocationResult, got {type(item).__name__}"
            )
    return Result.success(batch)


def validate_download_filter(
    certificate_provider_name: Any,
    issuer_name: Any,
) -> Result[DownloadFilter]:
    """Fail with INVALID_ARGUMENT when a filter is given but is not a string."""
    for name, value in (
        ("certificate_provider_name", certificate_provider_name),
        ("issuer_name", issuer_name),
    ):
        if value is not None and not isinstance(value, str):
            return ResultFailures.invalid_argument(
                f"{name} must be a string, got {type(value).__name__}"
            )
    return Result.success(DownloadFilter(certificate_provider_name, issuer_name))
