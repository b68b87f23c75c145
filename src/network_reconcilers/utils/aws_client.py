"""AWS client management and session handling."""

import boto3
from botocore.config import Config
from typing import Optional, Dict, Any
from network_reconcilers.utils.logging import get_logger

logger = get_logger(__name__)


class AWSClientManager:
    """Manages a boto3 session and caches clients per service and region."""

    def __init__(
        self,
        profile: Optional[str] = None,
        region: Optional[str] = None,
        max_pool_connections: int = 10,
        max_attempts: int = 5
    ):
        """Initialize AWS client manager.

        Args:
            profile: AWS profile name to use (None inside Lambda)
            region: Default AWS region; the runtime's region when None
            max_pool_connections: Maximum number of connections in the connection pool
            max_attempts: botocore-level attempts per API call
        """
        self.profile = profile
        self.region = region
        self._session: Optional[boto3.Session] = None
        self._clients: Dict[str, Any] = {}

        self._boto_config = Config(
            max_pool_connections=max_pool_connections,
            retries={
                'mode': 'adaptive',
                'max_attempts': max_attempts
            },
            connect_timeout=10,
            read_timeout=30
        )

    @property
    def session(self) -> boto3.Session:
        """Get or create boto3 session.

        Returns:
            Configured boto3 session
        """
        if self._session is None:
            kwargs = {}
            if self.profile:
                kwargs['profile_name'] = self.profile
            if self.region:
                kwargs['region_name'] = self.region

            self._session = boto3.Session(**kwargs)
            logger.debug(f"Created AWS session - Region: {self._session.region_name}, "
                         f"Profile: {self.profile or 'default'}")

        return self._session

    def get_client(self, service_name: str, region: Optional[str] = None):
        """Get boto3 client for a service, cached per region.

        Args:
            service_name: AWS service name (e.g., 'ec2')
            region: Region override; the session region when None

        Returns:
            Boto3 client for the service
        """
        region_name = region or self.session.region_name
        cache_key = f"{service_name}:{region_name}"

        if cache_key in self._clients:
            return self._clients[cache_key]

        client = self.session.client(
            service_name,
            region_name=region_name,
            config=self._boto_config
        )
        self._clients[cache_key] = client

        logger.debug(f"Created {service_name} client (cached: {cache_key})")

        return client
