"""Route table classification, route convergence and drift cleanup."""

from .models import (
    Association,
    Route,
    RouteTable,
    RouteTableClass,
    ClassifiedRouteTables,
    SecurityGroupRef,
    NetworkInterface,
    SecurityGroup,
)
from .pagination import Page, paginate, describe_pages
from .ec2 import EC2NetworkService
from .classifier import classify_route_table, classify_route_tables
from .results import OutcomeStatus, ResourceOutcome, ReconcileSummary
from .routes import RouteReconciler
from .drift import DriftCleaner

__all__ = [
    'Association',
    'Route',
    'RouteTable',
    'RouteTableClass',
    'ClassifiedRouteTables',
    'SecurityGroupRef',
    'NetworkInterface',
    'SecurityGroup',
    'Page',
    'paginate',
    'describe_pages',
    'EC2NetworkService',
    'classify_route_table',
    'classify_route_tables',
    'OutcomeStatus',
    'ResourceOutcome',
    'ReconcileSummary',
    'RouteReconciler',
    'DriftCleaner',
]
