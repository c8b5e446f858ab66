"""Contracts (protocols) implemented by domain and application components."""

from school_routes.domain.contracts.fare_policy import FarePolicyProtocol

__all__ = ["FarePolicyProtocol"]
