#!/usr/bin/env python3
"""Basic usage examples for Python AzTfViz."""

import json

from aztfviz import AzTfViz, LayoutOptions, TerraformResource, Theme


def sample_resources():
    """A small web application: network, VM, app service and database."""
    return [
        TerraformResource("azurerm_resource_group", "main", attributes={"name": "rg-webapp", "location": "westeurope"}),
        TerraformResource(
            "azurerm_virtual_network",
            "core",
            attributes={"resource_group_name": "azurerm_resource_group.main.name"},
            dependencies=["azurerm_resource_group.main"],
        ),
        TerraformResource(
            "azurerm_subnet",
            "app",
            attributes={
                "resource_group_name": "azurerm_resource_group.main.name",
                "virtual_network_name": "azurerm_virtual_network.core.name",
            },
            dependencies=["azurerm_virtual_network.core"],
        ),
        TerraformResource(
            "azurerm_network_interface",
            "web",
            attributes={"resource_group_name": "azurerm_resource_group.main.name", "subnet_id": "azurerm_subnet.app.id"},
            dependencies=["azurerm_subnet.app"],
        ),
        TerraformResource(
            "azurerm_linux_virtual_machine",
            "web_prod",
            attributes={"resource_group_name": "azurerm_resource_group.main.name"},
            tags={"environment": "production"},
            dependencies=["azurerm_network_interface.web"],
        ),
        TerraformResource(
            "azurerm_app_service",
            "frontend",
            attributes={"resource_group_name": "azurerm_resource_group.main.name"},
            dependencies=["azurerm_sql_database.orders"],
        ),
        TerraformResource(
            "azurerm_sql_database",
            "orders",
            attributes={"resource_group_name": "azurerm_resource_group.main.name"},
        ),
    ]


def main():
    """Demonstrate basic AzTfViz usage."""

    viz = AzTfViz()
    resources = sample_resources()

    # Example 1: Default layout (one container per resource group)
    print("Generating resource group diagram...")
    diagram = viz.generate(resources)
    print(f"  {len(diagram.nodes)} nodes, {len(diagram.connections)} connections")

    # Example 2: Zones layout in dark theme
    print("Generating zones diagram...")
    diagram = viz.generate(resources, LayoutOptions(layout="zones", group_by="zone", theme=Theme.DARK))
    for node in diagram.nodes:
        print(f"  - {node.display_name} ({node.type}) at {node.x:.0f},{node.y:.0f}")

    # Example 3: Options as a dict with camelCase keys, implicit references included
    print("Generating microservices diagram...")
    diagram = viz.generate(
        resources,
        {"layout": "microservices", "groupBy": "none", "hideImplicitDependencies": False},
    )
    for connection in diagram.connections:
        print(f"  - {connection.source} -> {connection.target} [{connection.type.value}] {connection.label}")

    # Example 4: Let the library pick options
    options = viz.get_recommended_layout(len(resources), [r.type for r in resources])
    print(f"Recommended layout: {options.layout.value}")

    # Example 5: Export for a renderer
    with open("diagram.json", "w", encoding="utf-8") as f:
        json.dump(viz.generate(resources, options).to_dict(), f, indent=2)

    print("All examples completed!")


if __name__ == "__main__":
    main()
