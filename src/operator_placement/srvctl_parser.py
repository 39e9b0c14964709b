"""
Parsers for srvctl text output.

This is the only module that reads free-form tool output. Each parser
returns structured values, or None when the text does not match any known
layout, leaving the caller to raise the matching acquisition error.

Supported layouts:
- `srvctl config database`: one database unique name per line
- `srvctl config service -d DB`: blocks starting with "Service name: <svc>"
- `srvctl config service -d DB -s SVC`: "Preferred instances: a,b" and
  "Available instances: c" lines, or the short form "svc PREF: a b AVAIL: c"
- `srvctl status service -d DB -s SVC`:
  "Service svc is running on instance(s) a,b" / "Service svc is not running."
- `srvctl status instance -d DB -i INST`:
  "Instance a is running on node n1" / "Instance a is not running on node n1"
"""

import re
from dataclasses import dataclass

from operator_placement.types import InstanceHealth, InstanceId

SERVICE_NAME_PATTERN = re.compile(r"^\s*Service name:\s*(\S+)\s*$", re.IGNORECASE)

PREFERRED_PATTERN = re.compile(r"^\s*Preferred instances:\s*(.*?)\s*$", re.IGNORECASE)
AVAILABLE_PATTERN = re.compile(r"^\s*Available instances:\s*(.*?)\s*$", re.IGNORECASE)

# Short form: "oltp PREF: orcl1 orcl2 AVAIL: orcl3"
SHORT_CONFIG_PATTERN = re.compile(r"^\s*(\S+)\s+PREF:\s*(.*?)\s*AVAIL:\s*(.*?)\s*$")

RUNNING_PATTERN = re.compile(
    r"^\s*Service\s+(\S+)\s+is\s+running\s+on\s+instance\(s\)\s+(.+?)\s*$",
    re.IGNORECASE,
)
NOT_RUNNING_PATTERN = re.compile(r"^\s*Service\s+(\S+)\s+is\s+not\s+running\.?\s*$", re.IGNORECASE)

INSTANCE_PATTERN = re.compile(
    r"^\s*Instance\s+(\S+)\s+is\s+(not\s+)?running\b",
    re.IGNORECASE,
)


@dataclass
class ServiceConfig:
    """
    Preferred/available instances as printed by srvctl.

    Attributes:
        preferred: Preferred instances in declared order
        available: Available instances in declared order
    """

    preferred: list[InstanceId]
    available: list[InstanceId]


@dataclass
class ServiceStatus:
    """
    Running state of a service as printed by srvctl.

    Attributes:
        running: Instances reported as running the service, in order
    """

    running: list[InstanceId]

    @property
    def down(self) -> bool:
        return not self.running


def split_instances(value: str) -> list[InstanceId]:
    """Split a comma and/or whitespace separated instance list."""
    return [part for part in re.split(r"[,\s]+", value.strip()) if part]


def parse_databases(output: str) -> list[str]:
    """Parse `srvctl config database` output into database names."""
    return [line.strip() for line in output.splitlines() if line.strip()]


def parse_service_names(output: str) -> list[str]:
    """
    Parse `srvctl config service -d DB` output into service names.

    Falls back to the short form (first token of each "PREF:" line) when
    no "Service name:" lines are present.
    """
    names = []
    for line in output.splitlines():
        match = SERVICE_NAME_PATTERN.match(line)
        if match:
            names.append(match.group(1))
    if names:
        return names

    for line in output.splitlines():
        match = SHORT_CONFIG_PATTERN.match(line)
        if match:
            names.append(match.group(1))
    return names


def parse_service_config(output: str) -> ServiceConfig | None:
    """
    Parse `srvctl config service -d DB -s SVC` output.

    Returns:
        ServiceConfig, or None if no preferred instance line was found.
        An empty preferred list is returned as-is; rejecting it is the
        engine's job.
    """
    preferred: list[InstanceId] | None = None
    available: list[InstanceId] = []

    for line in output.splitlines():
        match = PREFERRED_PATTERN.match(line)
        if match:
            preferred = split_instances(match.group(1))
            continue
        match = AVAILABLE_PATTERN.match(line)
        if match:
            available = split_instances(match.group(1))
            continue
        match = SHORT_CONFIG_PATTERN.match(line)
        if match:
            preferred = split_instances(match.group(2))
            available = split_instances(match.group(3))

    if preferred is None:
        return None
    return ServiceConfig(preferred=preferred, available=available)


def parse_service_status(output: str) -> ServiceStatus | None:
    """
    Parse `srvctl status service -d DB -s SVC` output.

    Returns:
        ServiceStatus, or None if the output matches neither the running
        nor the not-running layout.
    """
    for line in output.splitlines():
        match = RUNNING_PATTERN.match(line)
        if match:
            running = split_instances(match.group(2))
            if not running:
                return None
            return ServiceStatus(running=running)
        if NOT_RUNNING_PATTERN.match(line):
            return ServiceStatus(running=[])
    return None


def parse_instance_status(output: str, instance: InstanceId) -> InstanceHealth | None:
    """
    Parse `srvctl status instance -d DB -i INST` output for one instance.

    Returns:
        InstanceHealth, or None if the instance is not mentioned.
    """
    for line in output.splitlines():
        match = INSTANCE_PATTERN.match(line)
        if match and match.group(1) == instance:
            return InstanceHealth.DOWN if match.group(2) else InstanceHealth.UP
    return None
