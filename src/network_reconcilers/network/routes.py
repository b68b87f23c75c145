"""Convergence of VPC peering routes across a VPC's route tables."""

from typing import Optional

from network_reconcilers.network.classifier import classify_route_tables
from network_reconcilers.network.ec2 import EC2NetworkService
from network_reconcilers.network.models import ClassifiedRouteTables, RouteTable
from network_reconcilers.network.results import OutcomeStatus, ReconcileSummary, ResourceOutcome
from network_reconcilers.utils.errors import ErrorContext, RouteNotFound, error_handler
from network_reconcilers.utils.logging import get_logger

logger = get_logger(__name__)

ROUTE_RESOURCE_TYPE = 'AWS::EC2::Route'


class RouteReconciler:
    """Upserts or removes a peering route on every non-main route table of a VPC."""

    def __init__(self, service: EC2NetworkService):
        """Initialize route reconciler.

        Args:
            service: EC2 operations bound to the VPC's region
        """
        self.service = service

    def get_route_tables(self, vpc_id: str) -> ClassifiedRouteTables:
        """List and classify the VPC's route tables.

        Args:
            vpc_id: VPC to inspect

        Returns:
            Public, private and isolated tables; the main table is excluded
        """
        classified = classify_route_tables(self.service.list_route_tables(vpc_id))
        logger.info(f"{len(classified)} route tables of {vpc_id}: {classified.route_table_ids()}")
        return classified

    def upsert_route(
        self,
        route_table: RouteTable,
        destination_cidr_block: str,
        peering_connection_id: str
    ) -> ResourceOutcome:
        """Make sure the table routes a destination through a peering connection.

        A route to the destination bound to another target is left over from an
        earlier peering that was not cleaned up; it is deleted and recreated.
        Errors are not caught here.

        Args:
            route_table: Snapshot of the table to converge
            destination_cidr_block: Destination CIDR
            peering_connection_id: Peering connection the route must use

        Returns:
            CREATED, REPLACED or SKIPPED outcome
        """
        table_id = route_table.route_table_id
        existing_route = route_table.find_route(destination_cidr_block)

        if existing_route is None:
            logger.info(
                f"No route on route table {table_id} to {destination_cidr_block}; "
                f"creating route through {peering_connection_id}"
            )
            self.service.create_route(table_id, destination_cidr_block, peering_connection_id)
            return ResourceOutcome(table_id, ROUTE_RESOURCE_TYPE, OutcomeStatus.CREATED)

        if existing_route.vpc_peering_connection_id != peering_connection_id:
            logger.info(
                f"Route on route table {table_id} to {destination_cidr_block} targets "
                f"{existing_route.vpc_peering_connection_id or 'another gateway'} instead of "
                f"{peering_connection_id}; a previous cleanup failed. Replacing route"
            )
            try:
                self.service.delete_route(table_id, destination_cidr_block)
            except RouteNotFound:
                logger.info(f"Stale route on {table_id} disappeared before it was deleted")
            self.service.create_route(table_id, destination_cidr_block, peering_connection_id)
            return ResourceOutcome(
                table_id, ROUTE_RESOURCE_TYPE, OutcomeStatus.REPLACED,
                message=f"replaced route via {existing_route.vpc_peering_connection_id}"
            )

        logger.info(
            f"Route to {destination_cidr_block} through {peering_connection_id} already "
            f"exists on route table {table_id}; skipping"
        )
        return ResourceOutcome(table_id, ROUTE_RESOURCE_TYPE, OutcomeStatus.SKIPPED)

    def delete_route(
        self,
        route_table: RouteTable,
        destination_cidr_block: str,
        peering_connection_id: Optional[str] = None
    ) -> ResourceOutcome:
        """Remove the route to a destination from one table.

        Never raises for EC2 errors: a route that is already gone counts as
        skipped, anything else is returned as a FAILED outcome.

        Args:
            route_table: Snapshot of the table to converge
            destination_cidr_block: Destination CIDR
            peering_connection_id: Only used for log output

        Returns:
            DELETED, SKIPPED or FAILED outcome
        """
        table_id = route_table.route_table_id
        existing_route = route_table.find_route(destination_cidr_block)

        if existing_route is None:
            logger.debug(f"No route to {destination_cidr_block} on route table {table_id}")
            return ResourceOutcome(table_id, ROUTE_RESOURCE_TYPE, OutcomeStatus.SKIPPED)

        try:
            self.service.delete_route(table_id, destination_cidr_block)
        except RouteNotFound:
            logger.info(
                f"Route to {destination_cidr_block} was listed on route table {table_id} "
                f"but EC2 reports it as already deleted"
            )
            return ResourceOutcome(
                table_id, ROUTE_RESOURCE_TYPE, OutcomeStatus.SKIPPED, message="already deleted"
            )
        except Exception as e:
            error = error_handler.handle_exception(
                e,
                ErrorContext(
                    resource_id=table_id,
                    resource_type=ROUTE_RESOURCE_TYPE,
                    operation='delete_route'
                )
            )
            error_handler.log_error(error)
            return ResourceOutcome(
                table_id, ROUTE_RESOURCE_TYPE, OutcomeStatus.FAILED, message=error.message, error=e
            )

        logger.info(
            f"Deleted route to {destination_cidr_block} "
            f"({peering_connection_id or existing_route.vpc_peering_connection_id}) "
            f"from route table {table_id}"
        )
        return ResourceOutcome(table_id, ROUTE_RESOURCE_TYPE, OutcomeStatus.DELETED)

    def upsert_peering_routes(
        self,
        vpc_id: str,
        peering_connection_id: str,
        destination_cidr_block: str
    ) -> ReconcileSummary:
        """Converge every route table of the VPC towards the peering route.

        Fails fast: the first error aborts the pass.
        """
        summary = ReconcileSummary(operation='upsert_peering_routes')
        for table_class, route_table in self.get_route_tables(vpc_id).ordered():
            logger.debug(f"Upserting route on {table_class.value} route table {route_table.route_table_id}")
            summary.add(self.upsert_route(route_table, destination_cidr_block, peering_connection_id))
        return summary

    def delete_peering_routes(
        self,
        vpc_id: str,
        peering_connection_id: str,
        destination_cidr_block: str
    ) -> ReconcileSummary:
        """Remove the peering route from every route table of the VPC.

        Every table is attempted; failures are collected in the summary.
        """
        summary = ReconcileSummary(operation='delete_peering_routes')
        for table_class, route_table in self.get_route_tables(vpc_id).ordered():
            logger.debug(f"Deleting route on {table_class.value} route table {route_table.route_table_id}")
            summary.add(self.delete_route(route_table, destination_cidr_block, peering_connection_id))
        return summary
