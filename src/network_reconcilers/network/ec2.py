"""EC2 operations used by the reconcilers."""

from functools import partial
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from network_reconcilers.network.models import NetworkInterface, RouteTable, SecurityGroup
from network_reconcilers.network.pagination import describe_pages, paginate
from network_reconcilers.utils.errors import ErrorContext, RouteNotFound, error_code
from network_reconcilers.utils.logging import get_logger
from network_reconcilers.utils.retry import RetryStrategy

logger = get_logger(__name__)


class EC2NetworkService:
    """Thin wrapper over a boto3 EC2 client.

    Listings always return fresh data; nothing is cached between calls.
    Throttling and availability errors are retried, everything else
    surfaces as the original botocore ClientError.
    """

    def __init__(self, ec2_client, retry_strategy: Optional[RetryStrategy] = None):
        """Initialize the service.

        Args:
            ec2_client: boto3 EC2 client, already bound to the target region
            retry_strategy: Backoff used for every call
        """
        self.ec2_client = ec2_client
        self.retry = retry_strategy or RetryStrategy()

    def _call(self, operation: str, **params) -> Dict[str, Any]:
        return self.retry.execute_with_retry(getattr(self.ec2_client, operation), **params)

    def _list(self, operation: str, result_key: str, **params) -> List[Dict[str, Any]]:
        describe = partial(self._call, operation)
        return list(paginate(describe_pages(describe, result_key, **params)))

    @staticmethod
    def _vpc_filter(vpc_id: str) -> List[Dict[str, Any]]:
        return [{'Name': 'vpc-id', 'Values': [vpc_id]}]

    def list_route_tables(self, vpc_id: str) -> List[RouteTable]:
        """List every route table of a VPC.

        Args:
            vpc_id: VPC to list

        Returns:
            Route tables in API order
        """
        items = self._list('describe_route_tables', 'RouteTables', Filters=self._vpc_filter(vpc_id))
        logger.debug(f"Found {len(items)} route tables in {vpc_id}")
        return [RouteTable.from_api(item) for item in items]

    def create_route(
        self,
        route_table_id: str,
        destination_cidr_block: str,
        peering_connection_id: str
    ) -> None:
        """Create a route through a VPC peering connection."""
        self._call(
            'create_route',
            RouteTableId=route_table_id,
            DestinationCidrBlock=destination_cidr_block,
            VpcPeeringConnectionId=peering_connection_id
        )

    def delete_route(self, route_table_id: str, destination_cidr_block: str) -> None:
        """Delete the route to a destination.

        Raises:
            RouteNotFound: If EC2 reports the route as already absent
        """
        try:
            self._call(
                'delete_route',
                RouteTableId=route_table_id,
                DestinationCidrBlock=destination_cidr_block
            )
        except ClientError as e:
            if error_code(e) == 'InvalidRoute.NotFound':
                raise RouteNotFound(
                    route_table_id,
                    destination_cidr_block,
                    context=ErrorContext(
                        resource_id=route_table_id,
                        resource_type='AWS::EC2::Route',
                        aws_operation='DeleteRoute'
                    ),
                    cause=e
                ) from e
            raise

    def list_network_interfaces(self, vpc_id: Optional[str] = None) -> List[NetworkInterface]:
        """List network interfaces, optionally filtered server-side by VPC.

        Args:
            vpc_id: VPC filter; None scans every interface in the region

        Returns:
            Network interfaces in API order
        """
        params = {'Filters': self._vpc_filter(vpc_id)} if vpc_id else {}
        items = self._list('describe_network_interfaces', 'NetworkInterfaces', **params)
        logger.debug(f"Found {len(items)} network interfaces")
        return [NetworkInterface.from_api(item) for item in items]

    def delete_network_interface(self, network_interface_id: str) -> None:
        self._call('delete_network_interface', NetworkInterfaceId=network_interface_id)

    def list_security_groups(self, vpc_id: str) -> List[SecurityGroup]:
        """List every security group of a VPC."""
        items = self._list('describe_security_groups', 'SecurityGroups', Filters=self._vpc_filter(vpc_id))
        logger.debug(f"Found {len(items)} security groups in {vpc_id}")
        return [SecurityGroup.from_api(item) for item in items]

    def delete_security_group(self, group_id: str) -> None:
        self._call('delete_security_group', GroupId=group_id)
