"""Shared test fixtures for Conditionals."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from conditionals.resolver import MappingPropertyResolver

if TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture()
def app_resolver() -> MappingPropertyResolver:
    """Resolver holding a small nested ``app`` configuration."""
    return MappingPropertyResolver(
        {
            "app": {
                "mode": "PROD",
                "region": "eu-west-1",
                "workers": 8,
                "ratio": "0.300001",
                "threshold": 2.5,
                "level": "info",
                "label": "  Primary  ",
                "broken": "not-a-number",
                "empty": None,
            },
            "os": {"name": "Windows 11"},
        }
    )


@pytest.fixture()
def tmp_project(tmp_path: Path) -> Path:
    """Create a project with a conditions file and a properties file."""
    (tmp_path / "conditions.yml").write_text(
        "version: 1\n"
        "conditions:\n"
        "  - name: prod-mode\n"
        '    description: "Production mode enabled"\n'
        "    kind: string_property\n"
        "    rule: { prefix: app, name: mode, having_value: prod, ignore_case: true }\n"
        "  - name: enough-workers\n"
        "    kind: integer_property\n"
        "    rule: { prefix: app, name: workers, having_value: 4, match_type: greater_than }\n"
        "  - name: ratio-set\n"
        '    description: "Ratio must be configured"\n'
        "    kind: double_property\n"
        "    rule: { prefix: app, name: ratio, having_value: 0.5 }\n"
    )
    (tmp_path / "app.yml").write_text(
        "app:\n"
        "  mode: PROD\n"
        "  workers: 8\n"
    )
    return tmp_path
