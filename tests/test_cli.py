"""Tests for the command-line interface."""

import json

from click.testing import CliRunner

from aztfviz import __version__
from aztfviz.cli import cli

RESOURCES = [
    {"type": "azurerm_resource_group", "name": "main"},
    {
        "type": "azurerm_virtual_network",
        "name": "core",
        "attributes": {"resource_group_name": "azurerm_resource_group.main.name"},
    },
    {
        "type": "azurerm_subnet",
        "name": "app",
        "attributes": {"resource_group_name": "azurerm_resource_group.main.name"},
        "dependencies": ["azurerm_virtual_network.core"],
    },
]


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_info():
    """Test the info command."""
    result = CliRunner().invoke(cli, ["info"])

    assert result.exit_code == 0
    assert "Supported Layouts" in result.output
    assert "microservices" in result.output


def test_version():
    """Test the version option."""
    result = CliRunner().invoke(cli, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_export_writes_diagram(tmp_path):
    """Test exporting a diagram to a file."""
    resources_file = _write(tmp_path / "resources.json", RESOURCES)
    output = tmp_path / "diagram.json"

    result = CliRunner().invoke(cli, ["export", resources_file, "-o", str(output)])

    assert result.exit_code == 0, result.output
    diagram = json.loads(output.read_text(encoding="utf-8"))
    containers = [node for node in diagram["nodes"] if node["is_group_container"]]
    assert [node["id"] for node in containers] == ["rg_container_main"]
    assert diagram["connections"][0]["source"] == "azurerm_subnet_app"
    assert diagram["connections"][0]["target"] == "azurerm_virtual_network_core"


def test_export_to_stdout(tmp_path):
    """Test exporting to stdout with a wrapped resource list."""
    resources_file = _write(tmp_path / "resources.json", {"resources": RESOURCES})

    result = CliRunner().invoke(
        cli, ["export", resources_file, "-o", "-", "--group-by", "zone", "--layout", "layered", "--theme", "dark"],
    )

    assert result.exit_code == 0, result.output
    diagram = json.loads(result.output)
    assert {node["id"] for node in diagram["nodes"] if node["is_group_container"]} == {
        "layer_Delivery",
        "layer_Management",
    }


def test_export_options_file_with_overrides(tmp_path):
    """Test that command-line values win over the options file."""
    resources_file = _write(tmp_path / "resources.json", RESOURCES)
    options_file = _write(tmp_path / "options.json", {"groupBy": "zone", "layout": "zones", "compactMode": True})

    result = CliRunner().invoke(
        cli, ["export", resources_file, "-o", "-", "--options-file", options_file, "--layout", "flow"],
    )

    assert result.exit_code == 0, result.output
    diagram = json.loads(result.output)
    assert not [node for node in diagram["nodes"] if node["type"] == "zone-title"]
    assert "zone_container_Edge" in {node["id"] for node in diagram["nodes"]}


def test_export_filters(tmp_path):
    """Test type exclusion from the command line."""
    resources_file = _write(tmp_path / "resources.json", RESOURCES)

    result = CliRunner().invoke(
        cli, ["export", resources_file, "-o", "-", "--group-by", "zone", "--exclude", "*subnet*"],
    )

    assert result.exit_code == 0, result.output
    ids = {node["id"] for node in json.loads(result.output)["nodes"]}
    assert "azurerm_subnet_app" not in ids
    assert "azurerm_virtual_network_core" in ids


def test_export_rejects_bad_input(tmp_path):
    """Test that malformed input exits with an error."""
    resources_file = _write(tmp_path / "resources.json", {"items": []})

    result = CliRunner().invoke(cli, ["export", resources_file, "-o", "-"])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_export_rejects_degenerate_canvas(tmp_path):
    """Test that padding larger than the canvas exits with an error."""
    resources_file = _write(tmp_path / "resources.json", RESOURCES)

    result = CliRunner().invoke(cli, ["export", resources_file, "-o", "-", "--padding", "5000"])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_preview(tmp_path):
    """Test the classification preview table."""
    resources_file = _write(tmp_path / "resources.json", RESOURCES)

    result = CliRunner().invoke(cli, ["preview", resources_file])

    assert result.exit_code == 0, result.output
    assert "core" in result.output
    assert "Edge" in result.output


def test_recommend_json(tmp_path):
    """Test recommended options for a small network."""
    resources_file = _write(tmp_path / "resources.json", RESOURCES)

    result = CliRunner().invoke(cli, ["recommend", resources_file, "--json"])

    assert result.exit_code == 0, result.output
    assert json.loads(result.output) == {
        "layout": "flow",
        "flowDirection": "left-right",
        "showZones": True,
        "compactMode": True,
        "groupBy": "zone",
    }
