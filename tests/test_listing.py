"""Tests for the extension selection listing."""

from extension_planner import EXPERIMENTAL_PACKAGE
from extension_planner import ExtensionInfo
from extension_planner import build_catalog
from extension_planner import build_listing


def test_listing_skips_hidden_and_enabled():
    """Test that only visible, not-yet-enabled extensions are listed."""
    catalog = build_catalog(
        [
            ExtensionInfo(name="views"),
            ExtensionInfo(name="secret", hidden=True),
            ExtensionInfo(name="node"),
        ],
        enabled_names=["node"],
    )

    listing = build_listing(catalog)

    assert listing.row_names() == ["views"]


def test_groups_sorted_with_core_first_and_testing_collapsed():
    """Test package group ordering and open state."""
    catalog = build_catalog(
        [
            ExtensionInfo(name="t", package="Testing"),
            ExtensionInfo(name="a", package="Administration"),
            ExtensionInfo(name="c", package="Core"),
            ExtensionInfo(name="x", package=EXPERIMENTAL_PACKAGE),
        ]
    )

    listing = build_listing(catalog)

    assert [group.title for group in listing.groups] == ["Core", "Administration", EXPERIMENTAL_PACKAGE, "Testing"]
    assert listing.get_group("Testing").open is False
    assert listing.get_group("Core").open is True


def test_required_extension_row():
    """Test that required extensions are locked and name the distribution."""
    catalog = build_catalog([ExtensionInfo(name="base", required=True, explanation="Theme needs it")])

    row = build_listing(catalog, distribution="Standard").get_row("base")

    assert row.disabled
    assert row.required_by == ["Standard (Theme needs it)"]


def test_incompatible_rows():
    """Test core and Python incompatibility reasons."""
    catalog = build_catalog(
        [
            ExtensionInfo(name="old", description="Old stuff", core_version_requirement="<9"),
            ExtensionInfo(name="future", python=">=4.0"),
        ],
        core_version="10.2.0",
    )

    listing = build_listing(catalog, core_version="10.2.0", python_version="3.12.1")
    old = listing.get_row("old")
    future = listing.get_row("future")

    assert old.disabled and old.incompatible
    assert "not compatible with core 10.2.0" in old.description
    assert old.requires["core"] == "Core (<9) (incompatible with version 10.2.0)"
    assert future.disabled and future.incompatible
    assert "requires Python version >=4.0" in future.incompatible_reasons[0]


def test_dependency_labels():
    """Test requires labels for each dependency state."""
    catalog = build_catalog(
        [
            ExtensionInfo(
                name="app",
                dependencies={"gone": "", "lib": ">=2.0", "legacy": "", "node": "", "views": "", "internal": ""},
            ),
            ExtensionInfo(name="lib", display_name="Lib", version="1.5"),
            ExtensionInfo(name="legacy", display_name="Legacy", core_version_requirement="<9"),
            ExtensionInfo(name="node", display_name="Node"),
            ExtensionInfo(name="views", display_name="Views"),
            ExtensionInfo(name="internal", hidden=True),
        ],
        enabled_names=["node"],
        core_version="10.0",
    )

    row = build_listing(catalog).get_row("app")

    assert row.requires == {
        "gone": "gone (missing)",
        "lib": "Lib (>=2.0) (incompatible with version 1.5)",
        "legacy": "Legacy (incompatible with this version of core)",
        "node": "Node",
        "views": "Views (disabled)",
    }
    assert row.disabled


def test_selectable_row_with_disabled_dependency():
    """Test that a disabled dependency alone doesn't lock the row."""
    catalog = build_catalog(
        [
            ExtensionInfo(name="views_ui", display_name="Views UI", dependencies={"views": ""}),
            ExtensionInfo(name="views", display_name="Views"),
        ]
    )

    listing = build_listing(catalog)

    assert not listing.get_row("views_ui").disabled
    assert listing.get_row("views").required_by == ["Views UI (disabled)"]


def test_filter_text():
    """Test case-insensitive filtering by name or description."""
    catalog = build_catalog(
        [
            ExtensionInfo(name="views", description="Query builder"),
            ExtensionInfo(name="node", description="Content items"),
        ]
    )

    assert build_listing(catalog, filter_text="QUERY").row_names() == ["views"]
    assert build_listing(catalog, filter_text="nod").row_names() == ["node"]
    assert build_listing(catalog, filter_text="nothing").groups == []


def test_incompatible_row_without_known_core_version():
    """Test that an unknown host version is left out of the reason and label."""
    catalog = build_catalog([ExtensionInfo(name="old", core_version_requirement="<9")], core_version="10.0")

    row = build_listing(catalog).get_row("old")

    assert row.disabled and row.incompatible
    assert "None" not in row.description
    assert row.incompatible_reasons == ["This version is not compatible with the running core and should be replaced."]
    assert row.requires["core"] == "Core (<9) (incompatible)"
