"""YAML permissions file loading with env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError

from permission_to_rest.abilities.models import ABSENT

from .models import PermissionConfig

logger = logging.getLogger(__name__)


class _PermissionsLoader(yaml.SafeLoader):
    """SafeLoader that understands the ``!absent`` tag."""


def _construct_absent(loader: yaml.SafeLoader, node: yaml.Node) -> object:
    return ABSENT


_PermissionsLoader.add_constructor("!absent", _construct_absent)


def load_config(cli_path: str | None = None) -> PermissionConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    if cli_path and not Path(cli_path).exists():
        raise ValueError(f"Config file not found: {cli_path}")

    config_paths = [
        Path(cli_path) if cli_path else None,
        Path("./permissions.yaml"),
        Path.home() / ".permission-to-rest" / "config.yaml",
    ]

    for path in config_paths:
        if path and path.exists():
            try:
                with open(path) as f:
                    raw = yaml.load(f, Loader=_PermissionsLoader)
                if raw is None:
                    continue
                if not isinstance(raw, dict):
                    raise ValueError(
                        f"Invalid config in {path}: expected a mapping at the top level, got {type(raw).__name__}"
                    )
                raw = _expand_env_vars(raw)
                config = PermissionConfig(**raw)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
            except ValidationError as e:
                raise ValueError(f"Invalid config in {path}: {e}") from e
            logger.info("Loaded %d rule(s) from %s", len(config.abilities), path)
            return config

    return PermissionConfig()


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `permission-to-rest config init`
DEFAULT_CONFIG_TEMPLATE = """\
# permissions.yaml

# Subject tags mapped to importable classes. Tags without a mapping
# only match when the caller passes the tag as the subject override.
subjects: {}
#  Article: "myapp.models:Article"

# Rules in declaration order; the last matching rule wins.
abilities:
  - permission: can
    action: retrieve
    subject: ALL
  # - permission: can
  #   action: update
  #   subject: Article
  #   where: {owner_id: "${USER_ID}"}
  #   blacklist: [owner_id]
  # - permission: cannot
  #   action: delete
  #   subject: Article
  #   where:
  #     - {locked: true}
  #     - archived_at: !absent

# Logging
log_level: "info"              # debug | info | warn | error
log_format: "text"             # text | json
"""
