"""Architectural boundary tests using pytest-archon.

These tests verify that the codebase follows clean architecture principles:
- Domain layer has no dependencies on adapters or application services
- Application services don't depend on adapters
- Adapters can depend on domain but not on application services
- Only the CLI wires adapters and services together
"""

from pytest_archon import archrule


def test_domain_models_have_no_dependencies() -> None:
    """Domain models should only import the standard library and each other."""
    (
        archrule("domain models", comment="Domain models should be independent")
        .match("school_routes.domain.models*")
        .should_not_import("school_routes.adapters*")
        .should_not_import("school_routes.application*")
        .should_not_import("school_routes.domain.contracts*")
        .should_not_import("school_routes.domain.ports*")
        .should_not_import("school_routes.domain.route_state")
        .may_import("school_routes.domain.models*")
        .check("school_routes")
    )


def test_domain_contracts_have_no_dependencies() -> None:
    """Domain contracts should not import adapters or application."""
    (
        archrule("domain contracts", comment="Domain contracts should be independent")
        .match("school_routes.domain.contracts*")
        .should_not_import("school_routes.adapters*")
        .should_not_import("school_routes.application*")
        .may_import("school_routes.domain.contracts*")
        .may_import("school_routes.domain.models*")
        .check("school_routes")
    )


def test_domain_ports_have_no_dependencies() -> None:
    """Domain ports should not import adapters or application."""
    (
        archrule("domain ports", comment="Domain ports should be independent")
        .match("school_routes.domain.ports*")
        .should_not_import("school_routes.adapters*")
        .should_not_import("school_routes.application*")
        .may_import("school_routes.domain.ports*")
        .may_import("school_routes.domain.models*")
        .check("school_routes")
    )


def test_domain_has_no_outward_dependencies() -> None:
    """Route state, geometry and fare rules should stay inside the domain."""
    (
        archrule("domain layer", comment="Domain should not depend on outer layers")
        .match("school_routes.domain*")
        .should_not_import("school_routes.adapters*")
        .should_not_import("school_routes.application*")
        .should_not_import("school_routes.cli")
        .should_not_import("aiohttp*")
        .should_not_import("pydantic*")
        .may_import("school_routes.domain*")
        .check("school_routes", only_direct_imports=True)
    )


def test_application_services_dont_import_adapters() -> None:
    """Application services should not depend on adapters (infrastructure layer)."""
    (
        archrule(
            "application services", comment="Application services should not depend on adapters"
        )
        .match("school_routes.application*")
        .should_not_import("school_routes.adapters*")
        .should_not_import("aiohttp*")
        .may_import("school_routes.domain*")
        .may_import("school_routes.application*")
        .check("school_routes")
    )


def test_adapters_dont_import_application() -> None:
    """Adapters should not import application services (to avoid cycles)."""
    (
        archrule(
            "adapters independence", comment="Adapters should not depend on application services"
        )
        .match("school_routes.adapters*")
        .should_not_import("school_routes.application*")
        .should_not_import("school_routes.cli")
        .may_import("school_routes.domain*")
        .may_import("school_routes.adapters*")
        .check("school_routes", only_direct_imports=True)
    )


def test_persistence_does_not_import_routing_adapters() -> None:
    """Record encoding should work without the OSRM adapters."""
    (
        archrule("persistence independence", comment="Codec should not depend on OSRM")
        .match("school_routes.adapters.persistence*")
        .should_not_import("school_routes.adapters.osrm*")
        .should_not_import("aiohttp*")
        .may_import("school_routes.domain*")
        .may_import("school_routes.adapters.persistence*")
        .check("school_routes", only_direct_imports=True)
    )
