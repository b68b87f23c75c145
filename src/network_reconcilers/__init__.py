"""Reconciliation handlers for VPC peering routes and EKS network drift."""

__version__ = "0.1.0"
