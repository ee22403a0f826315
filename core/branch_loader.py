"""
Branch loader for Sprout.

Discovers branches (feature folders under branches/), generates their
config.yml from the branch's DEFAULT_CONFIG on first run, and tells the bot
which extension path to load.
"""

import yaml
import logging
import importlib
from pathlib import Path
from typing import Optional, Dict, Any

from constants import BRANCHES_DIR, BRANCH_CONFIG_FILE
from utils import merge_config

logger = logging.getLogger(__name__)


class BranchLoader:
    """Finds branches and manages their config files."""

    def __init__(self, branches_dir: str = BRANCHES_DIR, package: str = BRANCHES_DIR):
        self.branches_dir = Path(branches_dir)
        self.package = package

    def discover_branches(self) -> list[str]:
        """Return the names of all folders under branches/ that contain a branch.py."""
        if not self.branches_dir.is_dir():
            logger.warning(f"Branches directory {self.branches_dir} not found")
            return []

        branch_names = []
        for item in self.branches_dir.iterdir():
            # Skip private folders
            if item.name.startswith(("_", ".")):
                continue

            if item.is_dir() and (item / "branch.py").exists():
                branch_names.append(item.name)
                logger.debug(f"Discovered branch: {item.name}")

        return sorted(branch_names)

    def get_config_path(self, branch_name: str) -> Path:
        return self.branches_dir / branch_name / BRANCH_CONFIG_FILE

    def get_default_config(self, branch_name: str) -> Dict[str, Any]:
        """Get the DEFAULT_CONFIG declared in the branch's branch.py."""
        try:
            module = importlib.import_module(f"{self.package}.{branch_name}.branch")
        except ImportError as e:
            logger.error(f"Could not import branch {branch_name}: {e}")
            return {"enabled": True, "version": "1.0.0", "settings": {}}

        return getattr(module, "DEFAULT_CONFIG", {"enabled": True, "version": "1.0.0", "settings": {}})

    def load_config(self, branch_name: str) -> Dict[str, Any]:
        """Load config for a branch, writing the defaults to disk if it has none yet."""
        config_path = self.get_config_path(branch_name)
        defaults = self.get_default_config(branch_name)

        if not config_path.exists():
            self.save_config(branch_name, defaults)
            return merge_config(defaults, {})

        try:
            with open(config_path, "r") as f:
                config = yaml.safe_load(f) or {}
            logger.info(f"Loaded config for {branch_name}")
            return merge_config(defaults, config)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config for {branch_name}: {e}")
            return merge_config(defaults, {})

    def save_config(self, branch_name: str, config: Dict[str, Any]) -> None:
        config_path = self.get_config_path(branch_name)
        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(config_path, "w") as f:
                yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)
            logger.info(f"Saved default config for {branch_name}")
        except OSError as e:
            logger.error(f"Failed to save config for {branch_name}: {e}")

    def get_load_path(self, branch_name: str) -> Optional[str]:
        """Get the extension path for a branch (loaded through its __init__.py)."""
        if not (self.branches_dir / branch_name).is_dir():
            return None
        return f"{self.package}.{branch_name}"


# Global loader instance
_loader: Optional[BranchLoader] = None


def get_branch_loader() -> BranchLoader:
    """Get the global branch loader instance."""
    global _loader
    if _loader is None:
        _loader = BranchLoader()
    return _loader
