"""Configuration for the Hyper-V backend."""

from pydantic import BaseModel


class HyperVConfig(BaseModel):
    """Configuration for the Hyper-V backend.

    Cmdlets are run through PowerShell against ``server``; the harness
    host needs the Hyper-V PowerShell module and rights on that server.
    """

    server: str = "localhost"
    powershell: str = "powershell"
    command_timeout: float = 300
