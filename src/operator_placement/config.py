"""
Configuration types for the placement auditor.

Configuration is explicit: every setting is passed into the constructor
that needs it. Nothing below the CLI reads the process environment,
except that SrvctlSettings.command_env() starts from the parent
environment when building the environment for child processes.

Example:
    ```python
    from pathlib import Path

    from operator_placement.config import AuditSettings, SrvctlSettings

    srvctl = SrvctlSettings(oracle_home=Path("/u01/app/19.0.0/grid"), timeout_s=20)
    audit = AuditSettings(database_filter="ORCL", show_plan=True)
    ```
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from operator_placement.synthesizer import RelocationSourceMode

DEFAULT_SRVCTL = "srvctl"


@dataclass
class SrvctlSettings:
    """
    How to invoke the cluster-control tool.

    Attributes:
        oracle_home: Home directory of the database or grid installation.
            Exported as ORACLE_HOME to child processes when set.
        srvctl_path: Executable to run. When left at the default and
            oracle_home is set, <oracle_home>/bin/srvctl is used.
        timeout_s: Seconds a single invocation may take before it is
            treated as an acquisition failure.
        extra_env: Additional variables exported to child processes.
    """

    oracle_home: Path | None = None
    srvctl_path: str = DEFAULT_SRVCTL
    timeout_s: float = 30.0
    extra_env: dict[str, str] = field(default_factory=dict)

    def executable(self) -> str:
        """Resolve the srvctl binary to run."""
        if self.srvctl_path == DEFAULT_SRVCTL and self.oracle_home is not None:
            return str(self.oracle_home / "bin" / "srvctl")
        return self.srvctl_path

    def command_env(self, base: dict[str, str] | None = None) -> dict[str, str]:
        """
        Build the environment for a child process.

        Args:
            base: Starting environment, defaults to a copy of os.environ.

        Returns:
            Environment with ORACLE_HOME and extra_env applied.
        """
        env = dict(os.environ if base is None else base)
        if self.oracle_home is not None:
            env["ORACLE_HOME"] = str(self.oracle_home)
        env.update(self.extra_env)
        return env


@dataclass
class AuditSettings:
    """
    Options for one audit run.

    Attributes:
        database_filter: Only audit services of this database
            (case-insensitive match). None audits every database.
        show_plan: Emit the corrective command lines.
        relocation_source_mode: How relocation sources are named.
    """

    database_filter: str | None = None
    show_plan: bool = False
    relocation_source_mode: RelocationSourceMode = RelocationSourceMode.SINGLE
