from __future__ import annotations

import datetime as dt
import logging
import shutil
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import yaml  # PyYAML
except ImportError as exc:  # pragma: no cover
    raise RuntimeError("PyYAML is required. Install with: pip install PyYAML") from exc

from kubeconfig_pruner.prompt import Prompt, make_console

logger = logging.getLogger(__name__)
console = make_console()

BACKUP_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"

# kind -> top-level list holding entries of that kind
SECTIONS = {
    "cluster": "clusters",
    "user": "users",
}


@dataclass
class RemovedContext:
    index: int
    name: str
    cluster_name: str
    user_name: str

    def reference(self, kind: str) -> str:
        return {"cluster": self.cluster_name, "user": self.user_name}[kind]


def default_kubeconfig() -> Path:
    return Path.home() / ".kube" / "config"


def load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"kubeconfig root must be a mapping (dict): {path}")
    return data


YAML_DUMP_OPTIONS: dict[str, Any] = {
    "default_flow_style": False,
    "sort_keys": False,
    "allow_unicode": True,
}


def dump_yaml(data: dict[str, Any]) -> str:
    return yaml.safe_dump(data, **YAML_DUMP_OPTIONS)


def write_yaml(path: Path, data: dict[str, Any]) -> None:
    with path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, **YAML_DUMP_OPTIONS)
    logger.info(f"Wrote {path.stat().st_size} bytes to {path}")


def backup_path_for(path: Path, now: dt.datetime | None = None) -> Path:
    timestamp = (now or dt.datetime.now()).strftime(BACKUP_TIMESTAMP_FORMAT)
    return Path(f"{path}.backup.{timestamp}")


def backup_file(path: Path) -> Path:
    backup_path = backup_path_for(path)
    shutil.copy2(path, backup_path)
    logger.info(f"Backup created at {backup_path}")
    return backup_path


def offer_backup(path: Path, prompt: Prompt) -> Path | None:
    """Ask whether to back up ``path`` (default yes) and copy it if so."""
    if not prompt.yes_or_no(f"Create backup of '{path}'?", default_yes=True):
        return None
    backup_path = backup_file(path)
    console.print(f"Created backup: {backup_path}", markup=False)
    return backup_path


def offer_write(path: Path, data: dict[str, Any], prompt: Prompt) -> bool:
    """Ask whether to overwrite ``path`` with ``data`` (default no)."""
    if not prompt.yes_or_no(f"Write updated config back to '{path}'?", default_yes=False):
        logger.info("Leaving kubeconfig unchanged")
        return False
    write_yaml(path, data)
    return True


def count_items(value: object) -> int:
    if isinstance(value, list):
        return len(value)
    return 0


def as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def remove_indexes(items: list[Any], indexes: Iterable[int]) -> None:
    """Remove positions from ``items`` in place; positions refer to the list before removal."""
    drop = set(indexes)
    items[:] = [item for idx, item in enumerate(items) if idx not in drop]


def prune_contexts(config: dict[str, Any], prompt: Prompt) -> list[RemovedContext]:
    """
    Ask about every context and remove the ones the user picks.

    Args:
        config: Loaded kubeconfig, modified in place
        prompt: Source of the yes/no answers

    Returns:
        One RemovedContext per deleted context, ordered by original index
    """
    contexts = config.get("contexts")
    if not isinstance(contexts, list):
        return []

    removed: list[RemovedContext] = []
    for idx, item in enumerate(contexts):
        if not isinstance(item, dict):
            continue
        ctx = item.get("context")
        if not isinstance(ctx, dict):
            ctx = {}

        name = as_text(item.get("name"))
        cluster_name = as_text(ctx.get("cluster"))
        user_name = as_text(ctx.get("user"))

        console.print()
        console.print(f"=== Context: '{name}' ===", markup=False)
        console.print(f"cluster: {cluster_name}", markup=False)
        console.print(f"user   : {user_name}", markup=False)

        if prompt.yes_or_no(f"Delete context '{name}'?", default_yes=False):
            removed.append(RemovedContext(idx, name, cluster_name, user_name))
            logger.info(f"Marked context '{name}' (#{idx}) for deletion")

    remove_indexes(contexts, (info.index for info in removed))
    return removed


def delete_orphans(config: dict[str, Any], removed: list[RemovedContext], kind: str) -> list[str]:
    """
    Delete the clusters or users referenced by removed contexts.

    Every entry whose name was referenced by a removed context goes, even if a
    surviving context still refers to the same name.

    Returns:
        Names of the deleted entries, in list order
    """
    if kind not in SECTIONS:
        raise ValueError(f"kind must be one of {sorted(SECTIONS)}: {kind!r}")

    names_to_delete = {info.reference(kind) for info in removed}
    names_to_delete.discard("")
    if not names_to_delete:
        return []

    items = config.get(SECTIONS[kind])
    if not isinstance(items, list):
        return []

    indexes: list[int] = []
    deleted: list[str] = []
    for idx, item in enumerate(items):
        if not isinstance(item, dict):
            continue
        name = as_text(item.get("name"))
        if name in names_to_delete:
            indexes.append(idx)
            deleted.append(name)
            console.print(f"Deleting {kind}: '{name}'", markup=False)

    remove_indexes(items, indexes)
    return deleted
