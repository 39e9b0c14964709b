"""
Compliance check for service placement.

A service is compliant when the set of instances running it equals the
set of its preferred instances. Order is ignored on both sides; the
ordered forms are kept only for display and for action tie-breaking.
"""

from operator_placement.types import ServiceDesired, ServiceObserved


def evaluate(desired: ServiceDesired, observed: ServiceObserved) -> bool:
    """
    Check whether a service runs exactly on its preferred instances.

    Args:
        desired: Declared placement for the service
        observed: Current runtime placement for the service

    Returns:
        True if the running set equals the preferred set, False otherwise.
        A down service is never compliant.
    """
    if observed.down:
        return False
    return set(observed.running) == set(desired.preferred)
