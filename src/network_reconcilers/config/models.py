"""Pydantic models for resource properties and handler settings."""

import ipaddress
import os
from typing import Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Prefix the EKS control plane puts on the cluster security group name
DRIFT_PREFIX_TEMPLATE = "eks-cluster-sg-{cluster_name}"


class ResourceProperties(BaseModel):
    """Common base for custom resource property bags."""

    # CloudFormation adds ServiceToken and friends; those are ignored
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    vpc_id: str = Field(..., alias="vpcId", pattern=r"^vpc-[0-9a-f]+$")
    region: Optional[str] = Field(
        None, pattern=r"^[a-z]{2}(-[a-z]+)+-\d$", description="Region of the VPC"
    )


class RoutePeeringProperties(ResourceProperties):
    """Properties of the peering routes custom resource."""

    peering_connection_id: str = Field(
        ..., alias="peeringConnectionId", pattern=r"^pcx-[0-9a-f]+$"
    )
    destination_cidr_block: str = Field(
        ..., alias="destinationCidrBlock", description="IPv4 CIDR on the far side of the peering"
    )

    @field_validator("destination_cidr_block")
    @classmethod
    def validate_cidr(cls, v: str) -> str:
        """Validate and normalize the destination CIDR block."""
        try:
            network = ipaddress.IPv4Network(v.strip(), strict=False)
        except ValueError as e:
            raise ValueError(f"Invalid IPv4 CIDR block: {v}") from e
        return str(network)


class ClusterCleanupProperties(ResourceProperties):
    """Properties of the EKS cleanup custom resource."""

    cluster_name: str = Field(
        ..., alias="clusterName", min_length=1, max_length=100,
        pattern=r"^[0-9A-Za-z][A-Za-z0-9\-_]*$"
    )

    @property
    def drift_prefix(self) -> str:
        """Group-name prefix marking resources owned by this cluster."""
        return drift_prefix(self.cluster_name)


def drift_prefix(cluster_name: str) -> str:
    """Build the drift marker prefix for a cluster name."""
    return DRIFT_PREFIX_TEMPLATE.format(cluster_name=cluster_name)


class HandlerSettings(BaseModel):
    """Runtime settings of the Lambda handlers."""

    log_level: str = Field("info", pattern="^(debug|info|warning|error)$")
    log_format: str = Field("json", pattern="^(json|console)$")
    ec2_max_retries: int = Field(5, ge=0, le=10)
    response_timeout: float = Field(10.0, gt=0, le=60)

    @field_validator("log_level", "log_format", mode="before")
    @classmethod
    def lowercase(cls, v):
        """Accept LOG_LEVEL=INFO style values."""
        return v.lower() if isinstance(v, str) else v

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "HandlerSettings":
        """Build settings from environment variables.

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            Validated settings; unset variables keep their defaults
        """
        environ = os.environ if environ is None else environ
        names = {
            "log_level": "LOG_LEVEL",
            "log_format": "LOG_FORMAT",
            "ec2_max_retries": "EC2_MAX_RETRIES",
            "response_timeout": "RESPONSE_TIMEOUT",
        }
        values = {field: environ[var] for field, var in names.items() if environ.get(var)}
        return cls(**values)
