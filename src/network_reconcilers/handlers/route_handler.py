"""Lambda entry point for the VPC peering routes custom resource."""

import json
from functools import lru_cache

from network_reconcilers.config.models import HandlerSettings, RoutePeeringProperties
from network_reconcilers.handlers.lifecycle import LifecycleHandler, LifecycleRequest, RequestType
from network_reconcilers.network.routes import RouteReconciler
from network_reconcilers.utils.errors import ErrorCategory, ReconcileError
from network_reconcilers.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)


class RouteReconcilerHandler(LifecycleHandler):
    """Creates, updates or removes peering routes on a VPC's route tables."""

    properties_model = RoutePeeringProperties
    resource_noun = "vpc peering routes"

    def reconciler(self, properties: RoutePeeringProperties) -> RouteReconciler:
        return RouteReconciler(self.service_factory(properties.region))

    def physical_resource_id(self, properties: RoutePeeringProperties) -> str:
        # Moving the routes to another vpc or cidr replaces the resource
        region = self.resolve_region(properties.region) or 'default'
        return f"{region}:{properties.vpc_id}:{properties.destination_cidr_block}"

    def on_create(self, request: LifecycleRequest, properties: RoutePeeringProperties) -> None:
        verb = "Creating" if request.request_type == RequestType.CREATE else "Updating"
        logger.info(
            f"{verb} peering routes between vpc {properties.vpc_id} and "
            f"{properties.destination_cidr_block} for peering connection "
            f"{properties.peering_connection_id}"
        )
        summary = self.reconciler(properties).upsert_peering_routes(
            properties.vpc_id,
            properties.peering_connection_id,
            properties.destination_cidr_block
        )
        logger.info(f"Upsert summary: {json.dumps(summary.to_dict())}")

    def on_delete(self, request: LifecycleRequest, properties: RoutePeeringProperties) -> None:
        logger.info(
            f"Deleting peering routes between vpc {properties.vpc_id} and "
            f"{properties.destination_cidr_block} for peering connection "
            f"{properties.peering_connection_id}"
        )
        summary = self.reconciler(properties).delete_peering_routes(
            properties.vpc_id,
            properties.peering_connection_id,
            properties.destination_cidr_block
        )
        logger.info(f"Delete summary: {json.dumps(summary.to_dict())}")

        if summary.has_failures():
            failed = [outcome.resource_id for outcome in summary.failed]
            raise ReconcileError(
                f"Could not delete route to {properties.destination_cidr_block} "
                f"from route tables: {', '.join(failed)}",
                category=ErrorCategory.AWS
            )


@lru_cache(maxsize=None)
def get_handler() -> RouteReconcilerHandler:
    """Build the handler once per execution environment."""
    settings = HandlerSettings.from_env()
    setup_logging(settings.log_level, settings.log_format)
    return RouteReconcilerHandler(settings=settings)


def handler(event, context):
    return get_handler()(event, context)
