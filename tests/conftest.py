"""Shared test fixtures for permission-to-rest."""

import pytest

from permission_to_rest.abilities import AbilityBuilder
from permission_to_rest.config import PermissionConfig


@pytest.fixture
def builder():
    return AbilityBuilder()


@pytest.fixture
def sample_config():
    return PermissionConfig()


@pytest.fixture
def permissions_file(tmp_path):
    """A permissions.yaml with one rule of each shape."""
    path = tmp_path / "permissions.yaml"
    path.write_text(
        "subjects:\n"
        "  Ordered: 'collections:OrderedDict'\n"
        "abilities:\n"
        "  - permission: can\n"
        "    action: retrieve\n"
        "  - permission: can\n"
        "    action: update\n"
        "    subject: Article\n"
        "    where: {id: 1}\n"
        "    blacklist: [owner]\n"
        "  - permission: cannot\n"
        "    action: retrieve\n"
        "    where:\n"
        "      - {secret: true}\n"
        "      - published: !absent\n"
        "  - permission: can\n"
        "    action: delete\n"
        "    subject: Ordered\n"
    )
    return path
