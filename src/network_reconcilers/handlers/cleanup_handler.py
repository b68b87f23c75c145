"""Lambda entry point for the EKS drift cleanup custom resource."""

import json
from functools import lru_cache

from network_reconcilers.config.models import ClusterCleanupProperties, HandlerSettings
from network_reconcilers.handlers.lifecycle import LifecycleHandler, LifecycleRequest
from network_reconcilers.network.drift import DriftCleaner
from network_reconcilers.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


class DriftCleanerHandler(LifecycleHandler):
    """Deletes leaked cluster interfaces and security groups on stack teardown.

    Create and Update succeed without touching EC2. On Delete, individual
    deletion failures are logged and the invocation still succeeds.
    """

    properties_model = ClusterCleanupProperties
    resource_noun = "drifted cluster network resources"

    def on_create(self, request: LifecycleRequest, properties: ClusterCleanupProperties) -> None:
        logger.info(f"Nothing to do on {request.request_type.value} for cluster {properties.cluster_name}")

    def on_delete(self, request: LifecycleRequest, properties: ClusterCleanupProperties) -> None:
        logger.info(
            f"Cleaning up resources prefixed {properties.drift_prefix} in vpc {properties.vpc_id}"
        )
        cleaner = DriftCleaner(self.service_factory(properties.region))
        summary = cleaner.clean(properties.vpc_id, properties.cluster_name)
        logger.info(f"Cleanup summary: {json.dumps(summary.to_dict())}")


@lru_cache(maxsize=None)
def get_handler() -> DriftCleanerHandler:
    """Build the handler once per execution environment."""
    settings = HandlerSettings.from_env()
    setup_logging(settings.log_level, settings.log_format)
    return DriftCleanerHandler(settings=settings)


def handler(event, context):
    return get_handler()(event, context)
