"""
Literal command rendering for action plans.

Each Action becomes one line naming the operation and the srvctl command
an operator (or a script) can run to carry it out. Commands are only
rendered, never executed.
"""

from operator_placement.types import (
    Action,
    RelocateService,
    ServiceKey,
    StartOnInstance,
    StartService,
)


class CommandFormatter:
    """Renders actions as "<summary> USING: <command>" lines."""

    def __init__(self, srvctl: str = "srvctl") -> None:
        self.srvctl = srvctl

    def start_command(self, key: ServiceKey) -> str:
        return f"{self.srvctl} start service -d {key.database} -s {key.service}"

    def relocate_command(self, key: ServiceKey) -> str:
        return f"{self.srvctl} relocate service -d {key.database} -s {key.service}"

    def render(self, key: ServiceKey, action: Action) -> str:
        """
        Render one action for a service.

        Raises:
            TypeError: If action is not a known Action variant.
        """
        if isinstance(action, StartService):
            return f"Start {key.service} USING: {self.start_command(key)}"
        if isinstance(action, StartOnInstance):
            return (
                f"Start {key.service} on {action.target} USING: "
                f"{self.start_command(key)} -i {action.target}"
            )
        if isinstance(action, RelocateService):
            return (
                f"Relocate {key.service} from {action.source} to {action.target} USING: "
                f"{self.relocate_command(key)} -i {action.source} -t {action.target}"
            )
        raise TypeError(f"Unknown action: {action!r}")

    def render_plan(self, key: ServiceKey, plan: tuple[Action, ...]) -> list[str]:
        return [self.render(key, action) for action in plan]
