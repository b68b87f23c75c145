"""Snapshots of EC2 networking resources read during a reconciliation pass."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

DEFAULT_ROUTE = "0.0.0.0/0"
INTERNET_GATEWAY_PREFIX = "igw"


class RouteTableClass(Enum):
    """Role of a route table, derived from its routes."""
    PUBLIC = "public"
    PRIVATE = "private"
    ISOLATED = "isolated"


@dataclass(frozen=True)
class Association:
    """Link between a route table and a subnet, or the VPC main association."""
    route_table_association_id: Optional[str]
    main: bool = False
    subnet_id: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Association":
        return cls(
            route_table_association_id=data.get("RouteTableAssociationId"),
            main=data.get("Main") is True,
            subnet_id=data.get("SubnetId"),
        )


@dataclass(frozen=True)
class Route:
    """A single route entry.

    Several target fields may be present at once in the API payload;
    which one is authoritative depends on the route's origin.
    """
    destination_cidr_block: Optional[str]
    gateway_id: Optional[str] = None
    nat_gateway_id: Optional[str] = None
    instance_id: Optional[str] = None
    instance_owner_id: Optional[str] = None
    network_interface_id: Optional[str] = None
    vpc_peering_connection_id: Optional[str] = None
    state: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Route":
        return cls(
            destination_cidr_block=data.get("DestinationCidrBlock"),
            gateway_id=data.get("GatewayId"),
            nat_gateway_id=data.get("NatGatewayId"),
            instance_id=data.get("InstanceId"),
            instance_owner_id=data.get("InstanceOwnerId"),
            network_interface_id=data.get("NetworkInterfaceId"),
            vpc_peering_connection_id=data.get("VpcPeeringConnectionId"),
            state=data.get("State"),
        )

    @property
    def is_default_route(self) -> bool:
        return self.destination_cidr_block == DEFAULT_ROUTE

    @property
    def is_internet_gateway_route(self) -> bool:
        return bool(self.gateway_id) and self.gateway_id.startswith(INTERNET_GATEWAY_PREFIX)

    @property
    def is_instance_route(self) -> bool:
        """True for legacy NAT-instance routes (instance, owner and ENI all set)."""
        return (
            self.instance_id is not None
            and self.instance_owner_id is not None
            and self.network_interface_id is not None
        )

    @property
    def is_nat_gateway_route(self) -> bool:
        return self.nat_gateway_id is not None


@dataclass(frozen=True)
class RouteTable:
    """Route table snapshot."""
    route_table_id: str
    vpc_id: Optional[str] = None
    routes: Tuple[Route, ...] = ()
    associations: Tuple[Association, ...] = ()

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RouteTable":
        return cls(
            route_table_id=data["RouteTableId"],
            vpc_id=data.get("VpcId"),
            routes=tuple(Route.from_api(r) for r in data.get("Routes") or []),
            associations=tuple(Association.from_api(a) for a in data.get("Associations") or []),
        )

    @property
    def is_main(self) -> bool:
        """Whether this is the VPC's main (implicit) route table."""
        return any(association.main for association in self.associations)

    def find_route(self, destination_cidr_block: str) -> Optional[Route]:
        """Return the first route to a destination, if any."""
        for route in self.routes:
            if route.destination_cidr_block == destination_cidr_block:
                return route
        return None


@dataclass(frozen=True)
class SecurityGroupRef:
    """Security group as referenced from a network interface."""
    group_id: str
    group_name: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "SecurityGroupRef":
        return cls(group_id=data["GroupId"], group_name=data.get("GroupName") or "")


@dataclass(frozen=True)
class NetworkInterface:
    """Elastic network interface snapshot."""
    network_interface_id: str
    vpc_id: Optional[str] = None
    groups: Tuple[SecurityGroupRef, ...] = ()
    status: Optional[str] = None
    description: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "NetworkInterface":
        return cls(
            network_interface_id=data["NetworkInterfaceId"],
            vpc_id=data.get("VpcId"),
            groups=tuple(SecurityGroupRef.from_api(g) for g in data.get("Groups") or []),
            status=data.get("Status"),
            description=data.get("Description") or "",
        )

    def has_group_prefixed(self, prefix: str) -> bool:
        return any(group.group_name.startswith(prefix) for group in self.groups)


@dataclass(frozen=True)
class SecurityGroup:
    """Security group snapshot."""
    group_id: str
    group_name: str
    vpc_id: Optional[str] = None
    description: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "SecurityGroup":
        return cls(
            group_id=data["GroupId"],
            group_name=data.get("GroupName") or "",
            vpc_id=data.get("VpcId"),
            description=data.get("Description") or "",
        )


@dataclass
class ClassifiedRouteTables:
    """Non-main route tables of a VPC grouped by role."""
    public: list = field(default_factory=list)
    private: list = field(default_factory=list)
    isolated: list = field(default_factory=list)

    def ordered(self):
        """Yield (class, table) pairs: public, then private, then isolated."""
        for table in self.public:
            yield RouteTableClass.PUBLIC, table
        for table in self.private:
            yield RouteTableClass.PRIVATE, table
        for table in self.isolated:
            yield RouteTableClass.ISOLATED, table

    def route_table_ids(self) -> Dict[str, list]:
        return {
            RouteTableClass.PUBLIC.value: [t.route_table_id for t in self.public],
            RouteTableClass.PRIVATE.value: [t.route_table_id for t in self.private],
            RouteTableClass.ISOLATED.value: [t.route_table_id for t in self.isolated],
        }

    def __len__(self) -> int:
        return len(self.public) + len(self.private) + len(self.isolated)
