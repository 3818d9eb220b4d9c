"""Configuration for the HTTP management gateway backend."""

from pydantic import BaseModel, SecretStr


class HttpGatewayConfig(BaseModel):
    """Configuration for a JSON management gateway in front of a host.

    ``api_token`` is sent as a bearer token; ``server`` selects the
    virtualization host behind the gateway.
    """

    api_base_url: str
    api_token: SecretStr
    server: str = "localhost"
    request_timeout: float = 60
