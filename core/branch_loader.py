"""
Branch loader for Segvento.

Discovers branches (discord.py extensions living in branches/<name>/), and
manages their YAML configs: defaults are written on first run and user
edits are merged over the defaults on every load.
"""

import yaml
import logging
import importlib
from pathlib import Path
from typing import Optional, Dict, Any

from constants import BRANCH_CONFIG_FILE
from utils import merge_config

logger = logging.getLogger(__name__)

BRANCHES_DIR = Path(__file__).resolve().parent.parent / "branches"


class BranchLoader:
    """Finds branches and loads their configs."""

    def __init__(self, branches_dir: Optional[Path] = None):
        self.branches_dir = Path(branches_dir) if branches_dir else BRANCHES_DIR

    def discover_branches(self) -> list[str]:
        """
        Discover all folder-based branches.

        A branch is a folder with an __init__.py exposing setup(bot).
        Returns list of branch names.
        """
        branch_names = []

        for item in self.branches_dir.iterdir():
            # Skip private files/folders
            if item.name.startswith("_") or item.name.startswith("."):
                continue

            if item.is_dir() and (item / "__init__.py").exists():
                branch_names.append(item.name)
                logger.debug(f"Discovered branch: {item.name}")

        return sorted(branch_names)

    def get_config_path(self, branch_name: str) -> Optional[Path]:
        """Get the config path for a branch."""
        branch_folder = self.branches_dir / branch_name
        if not branch_folder.is_dir():
            return None
        return branch_folder / BRANCH_CONFIG_FILE

    def load_config(self, branch_name: str) -> Dict[str, Any]:
        """Load config for a branch, generating the default file if it doesn't exist."""
        defaults = self.get_default_config(branch_name)
        config_path = self.get_config_path(branch_name)

        if not config_path or not config_path.exists():
            if config_path:
                self.save_config(branch_name, defaults)
            return defaults

        try:
            with open(config_path, "r") as f:
                loaded = yaml.safe_load(f) or {}
            logger.info(f"Loaded config for {branch_name}")
            return merge_config(defaults, loaded)
        except Exception as e:
            logger.error(f"Failed to load config for {branch_name}: {e}")
            return defaults

    def save_config(self, branch_name: str, config: Dict[str, Any]):
        """Save config for a branch."""
        config_path = self.get_config_path(branch_name)
        if not config_path:
            logger.error(f"Cannot save config for {branch_name}: no valid path")
            return

        try:
            with open(config_path, "w") as f:
                yaml.safe_dump(config, f, default_flow_style=False, sort_keys=False, allow_unicode=True)

            logger.info(f"✅ Saved config for {branch_name}")
        except Exception as e:
            logger.error(f"Failed to save config for {branch_name}: {e}")

    def get_default_config(self, branch_name: str) -> Dict[str, Any]:
        """
        Get default config for a branch.

        Reads DEFAULT_CONFIG from the branch's branch.py, or returns a
        minimal config that only enables the branch.
        """
        try:
            module = importlib.import_module(f"branches.{branch_name}.branch")
            if hasattr(module, "DEFAULT_CONFIG"):
                return merge_config(module.DEFAULT_CONFIG, {})
        except Exception as e:
            logger.debug(f"Could not load branch-defined defaults for {branch_name}: {e}")

        return {"enabled": True, "version": "1.0.0", "settings": {}}

    def get_load_path(self, branch_name: str) -> Optional[str]:
        """Get the extension path for a branch (loaded through its __init__.py)."""
        if not (self.branches_dir / branch_name).is_dir():
            return None
        return f"branches.{branch_name}"


# Global loader instance
_loader: Optional[BranchLoader] = None


def get_branch_loader() -> BranchLoader:
    """Get the global branch loader instance."""
    global _loader
    if _loader is None:
        _loader = BranchLoader()
    return _loader
