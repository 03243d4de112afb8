"""Command-line interface for kubeconfig-pruner."""

from __future__ import annotations

import argparse
import logging
from collections.abc import Callable
from pathlib import Path

from rich.markup import escape

from kubeconfig_pruner.kubeconfig import (
    count_items,
    default_kubeconfig,
    delete_orphans,
    dump_yaml,
    load_yaml,
    offer_backup,
    offer_write,
    prune_contexts,
)
from kubeconfig_pruner.prompt import Prompt, make_console

logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

console = make_console()
err_console = make_console(stderr=True)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="kubeconfig-pruner",
        description=(
            "Interactively delete contexts (and their clusters/users) from a kubeconfig file"
        ),
    )
    parser.add_argument(
        "kubeconfig",
        nargs="?",
        help="Path to the kubeconfig file to prune (default: ~/.kube/config)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 1.0.0")
    return parser.parse_args(argv)


def resolve_path(value: str | None) -> Path:
    path = Path(value) if value else default_kubeconfig()
    return path.expanduser().absolute()


def main(argv: list[str] | None = None, reader: Callable[[], str] | None = None) -> int:
    args = parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        config_path = resolve_path(args.kubeconfig)
        console.print(f"Reading '{config_path}'", markup=False)

        if not config_path.exists():
            err_console.print(f"Missing kubeconfig file: {config_path}", markup=False)
            return 1

        prompt = Prompt(reader=reader, console=console, error_console=err_console)

        offer_backup(config_path, prompt)

        config = load_yaml(config_path)
        logger.info(
            f"Loaded {config_path} with {count_items(config.get('contexts'))} context(s)"
        )

        removed = prune_contexts(config, prompt)
        delete_orphans(config, removed, "cluster")
        delete_orphans(config, removed, "user")

        console.print()
        console.print(
            "Contexts: {contexts} | Clusters: {clusters} | Users: {users}".format(
                contexts=count_items(config.get("contexts")),
                clusters=count_items(config.get("clusters")),
                users=count_items(config.get("users")),
            )
        )
        console.print("Final config is:")
        console.print(dump_yaml(config), markup=False)

        if offer_write(config_path, config, prompt):
            console.print("done.")
        return 0

    except (EOFError, KeyboardInterrupt):
        err_console.print("\n[yellow]Operation cancelled.[/yellow]")
        return 1
    except Exception as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        logger.exception("Unexpected error")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
