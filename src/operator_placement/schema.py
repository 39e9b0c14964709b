"""
Pydantic models for cluster placement snapshots.

A snapshot is a JSON export of a cluster's service configuration and
status, used to audit a cluster offline or from a central inventory.

Example snapshot:
{
    "databases": [
        {
            "name": "ORCL",
            "instances": {"orcl1": "Up", "orcl2": "Up", "orcl3": "Down"},
            "services": [
                {
                    "name": "oltp",
                    "preferred": ["orcl1", "orcl2"],
                    "available": ["orcl3"],
                    "running": ["orcl1"]
                }
            ]
        }
    ]
}

These are external data models. Internal types are the dataclasses in
operator_placement.types.
"""

from pydantic import BaseModel, ConfigDict, Field

from operator_placement.types import InstanceHealth


class ServiceSnapshot(BaseModel):
    """
    Configuration and status of one service.

    An empty running list means the service is down.
    """

    model_config = ConfigDict(extra="ignore")

    name: str
    preferred: list[str] = Field(default_factory=list)
    available: list[str] = Field(default_factory=list)
    running: list[str] = Field(default_factory=list)


class DatabaseSnapshot(BaseModel):
    """One database with its instances and services."""

    model_config = ConfigDict(extra="ignore")

    name: str
    instances: dict[str, InstanceHealth] = Field(default_factory=dict)
    services: list[ServiceSnapshot] = Field(default_factory=list)


class ClusterSnapshot(BaseModel):
    """Top-level snapshot document."""

    model_config = ConfigDict(extra="ignore")

    databases: list[DatabaseSnapshot] = Field(default_factory=list)
