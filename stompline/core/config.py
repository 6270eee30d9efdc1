"""Configuration models for stompline producers."""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class Endpoint(BaseModel):
    """One broker address."""

    hostname: str
    port: int = 61613

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    @field_validator("hostname")
    @classmethod
    def validate_hostname(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("hostname must not be empty")
        return v

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        if not 0 < v < 65536:
            raise ValueError(f"port must be between 1 and 65535, got {v}")
        return v

    @property
    def address(self) -> str:
        return f"{self.hostname}:{self.port}"


class EndpointGroup(BaseModel):
    """Failover-equivalent broker addresses, tried in order by a connection.

    Accepts the single-host shorthand ``{"hostname": ..., "port": ...}`` as
    well as ``{"hosts": [...], "connect_headers": {...}}``.
    """

    hosts: list[Endpoint]
    connect_headers: dict[str, str] = Field(default_factory=dict)

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    @model_validator(mode="before")
    @classmethod
    def expand_single_host(cls, data: Any) -> Any:
        if isinstance(data, dict) and "hostname" in data:
            data = dict(data)
            host = {"hostname": data.pop("hostname")}
            if "port" in data:
                host["port"] = data.pop("port")
            data["hosts"] = [host]
        return data

    @field_validator("hosts")
    @classmethod
    def validate_hosts(cls, v: list[Endpoint]) -> list[Endpoint]:
        if not v:
            raise ValueError("an endpoint group needs at least one host")
        return v

    @property
    def name(self) -> str:
        return ",".join(host.address for host in self.hosts)


class ProducerConfig(BaseModel):
    """Everything needed to build a producer, apart from the connection factory.

    Attributes:
        servers: Endpoint groups in failover order.
        default_headers: Headers merged into every frame.
        connect_headers: Headers sent with every connect handshake.
        transformer_args: Keyword arguments for class-ref transformers.
        max_attempts: Delivery attempts before giving up; None retries forever.
    """

    servers: list[EndpointGroup]
    default_headers: dict[str, Any] = Field(default_factory=dict)
    connect_headers: dict[str, str] = Field(default_factory=dict)
    transformer_args: dict[str, Any] = Field(default_factory=dict)
    max_attempts: int | None = None

    model_config = {
        "extra": "forbid",
        "frozen": True,
    }

    @field_validator("servers")
    @classmethod
    def validate_servers(cls, v: list[EndpointGroup]) -> list[EndpointGroup]:
        if not v:
            raise ValueError("servers must contain at least one endpoint group")
        return v

    @field_validator("max_attempts")
    @classmethod
    def validate_max_attempts(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError(f"max_attempts must be at least 1, got {v}")
        return v
