"""Check-then-create reconciliation for AWS resources.

Every resource the provisioner manages goes through the same routine: look it
up, stop if it is present, create it if it is absent. A lookup has three
outcomes, and only ``NotFound`` leads to creation. A failed lookup (access
denied, throttling, no network) aborts the run instead of being mistaken for
a missing resource.
"""

import logging
import time
from collections.abc import Callable, Collection
from dataclasses import dataclass
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from cicd_provisioner.config.models import PropagationConfig
from cicd_provisioner.core.provisioning.errors import (
    PropagationTimeoutError,
    ReconcileError,
    ResourceCreationError,
)

logger = logging.getLogger(__name__)

Attrs = dict[str, Any]
Reporter = Callable[[str], None]


@dataclass(frozen=True)
class Found:
    """The resource exists and is usable."""

    attrs: Attrs


@dataclass(frozen=True)
class NotFound:
    """The resource is absent, or present in a state that counts as absent."""

    reason: str = "not found"


@dataclass(frozen=True)
class LookupFailed:
    """The lookup itself failed."""

    cause: BaseException


LookupResult = Found | NotFound | LookupFailed


@dataclass
class Reconciled:
    """Outcome of reconciling a single resource."""

    kind: str
    name: str
    attrs: Attrs
    created: bool


def error_code(exc: ClientError) -> str:
    """Return the AWS error code carried by a client error."""
    return str(exc.response.get("Error", {}).get("Code", ""))


def lookup_call(
    call: Callable[[], Any],
    present: Callable[[Any], LookupResult],
    not_found_codes: Collection[str] = (),
) -> LookupResult:
    """Run a describe/get call and classify the outcome.

    Args:
        call: Zero-argument callable issuing the AWS request.
        present: Maps a successful response to ``Found`` or ``NotFound``.
        not_found_codes: Error codes that mean the resource does not exist.

    Returns:
        The classified lookup result.
    """
    try:
        response = call()
    except ClientError as exc:
        code = error_code(exc)
        if code in not_found_codes:
            return NotFound(code)
        return LookupFailed(exc)
    except BotoCoreError as exc:
        return LookupFailed(exc)
    return present(response)


def reconcile(
    kind: str,
    name: str,
    lookup: Callable[[], LookupResult],
    create: Callable[[], Attrs],
    reporter: Reporter,
) -> Reconciled:
    """Ensure a resource exists, creating it only when the lookup says it is absent.

    Args:
        kind: Human-readable resource kind, e.g. "ECR repository".
        name: Identifying name of the resource.
        lookup: Returns the lookup result for the resource.
        create: Creates the resource and returns its identifying attributes.
        reporter: Progress callback.

    Returns:
        The resource attributes and whether this call created it.
    """
    result = lookup()

    if isinstance(result, LookupFailed):
        logger.error(f"Lookup of {kind} {name} failed: {result.cause}")
        raise ReconcileError(kind, name, result.cause) from result.cause

    if isinstance(result, Found):
        logger.info(f"{kind} {name} found: {result.attrs}")
        reporter(f"{kind} {name} already exists")
        return Reconciled(kind=kind, name=name, attrs=result.attrs, created=False)

    logger.info(f"{kind} {name} absent ({result.reason}), creating")
    reporter(f"Creating {kind} {name}")
    try:
        attrs = create()
    except (ClientError, BotoCoreError) as exc:
        raise ResourceCreationError(f"Failed to create {kind} {name}: {exc}") from exc
    reporter(f"{kind} {name} created")
    return Reconciled(kind=kind, name=name, attrs=attrs, created=True)


def wait_until(
    predicate: Callable[[], bool],
    description: str,
    policy: PropagationConfig,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Poll a readiness predicate with exponential backoff.

    Args:
        predicate: Returns True once the awaited condition holds.
        description: What is being waited for, used in messages.
        policy: Delay and attempt limits.
        sleep: Sleep function, replaceable in tests.

    Returns:
        The number of attempts it took.
    """
    delay = policy.initial_delay_seconds
    for attempt in range(1, policy.max_attempts + 1):
        if predicate():
            logger.info(f"{description} ready after {attempt} attempt(s)")
            return attempt
        if attempt == policy.max_attempts:
            break
        logger.info(f"{description} not ready, retrying in {delay:.1f}s")
        sleep(delay)
        delay = min(delay * policy.backoff_factor, policy.max_delay_seconds)

    raise PropagationTimeoutError(
        f"Timed out waiting for {description} after {policy.max_attempts} attempts."
    )
