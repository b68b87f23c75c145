"""Classification of VPC route tables into public, private and isolated."""

from typing import Iterable, Optional

from network_reconcilers.network.models import ClassifiedRouteTables, RouteTable, RouteTableClass


def is_public(route_table: RouteTable) -> bool:
    """Any route through an internet gateway."""
    return any(route.is_internet_gateway_route for route in route_table.routes)


def is_private(route_table: RouteTable) -> bool:
    """A default route through a NAT instance or a NAT gateway."""
    return any(
        route.is_default_route and (route.is_instance_route or route.is_nat_gateway_route)
        for route in route_table.routes
    )


def classify_route_table(route_table: RouteTable) -> Optional[RouteTableClass]:
    """Classify a single route table.

    Public is checked before private, so a table matching both is public.

    Returns:
        The table's class, or None for the VPC main route table
    """
    if route_table.is_main:
        return None
    if is_public(route_table):
        return RouteTableClass.PUBLIC
    if is_private(route_table):
        return RouteTableClass.PRIVATE
    return RouteTableClass.ISOLATED


def classify_route_tables(route_tables: Iterable[RouteTable]) -> ClassifiedRouteTables:
    """Partition route tables by class, preserving input order in each class.

    The main route table is left out entirely.
    """
    classified = ClassifiedRouteTables()
    buckets = {
        RouteTableClass.PUBLIC: classified.public,
        RouteTableClass.PRIVATE: classified.private,
        RouteTableClass.ISOLATED: classified.isolated,
    }
    for route_table in route_tables:
        table_class = classify_route_table(route_table)
        if table_class is not None:
            buckets[table_class].append(route_table)
    return classified
