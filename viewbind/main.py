#!/usr/bin/env python3
"""viewbind/main.py — CLI entry-point for the binder generator.

Usage examples
--------------
    # Generate one binder module per target type
    python -m viewbind generate bindings.json -o build/generated

    # Generate every binder into a single module
    python -m viewbind generate bindings.json -o build --single binders.py

    # Use project-specific UI types
    python -m viewbind generate bindings.json -o build --config viewbind.json

    # Show the listener catalog
    python -m viewbind listeners

Exit codes
----------
    0   Success.
    1   The description or configuration was rejected.
    2   Infrastructure failure (missing file, unwritable output, etc.).
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from viewbind import __version__
from viewbind.config import BinderConfig
from viewbind.errors import DescriptionError, TypeResolutionError, ViewBindError
from viewbind.listeners import default_registry
from viewbind.loader import load_description
from viewbind.render import render_module, write_file

_log = logging.getLogger("viewbind")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``viewbind`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("viewbind")
    root.setLevel(level)
    root.addHandler(handler)


def _resolve_path(raw: str, label: str = "file") -> Path:
    """Resolve *raw* to an absolute ``Path``, raising on missing files."""
    p = Path(raw).expanduser().resolve()
    if not p.exists():
        _log.error("%s not found: %s", label, p)
        raise SystemExit(EXIT_INFRA)
    return p


def _load_config(raw: Optional[str]) -> BinderConfig:
    if raw is None:
        return BinderConfig()
    config = BinderConfig.load(_resolve_path(raw, "config file"))
    for warning in config.validate():
        _log.warning("config: %s", warning)
    return config


# ===========================================================================
# Sub-command implementations
# ===========================================================================

def cmd_generate(args: argparse.Namespace) -> int:
    """Load a binding description and write the generated binders."""
    description = _resolve_path(args.description, "description file")
    try:
        config = _load_config(args.config)
        binding_sets = load_description(description, default_registry(), config)
        files = [binding_set.brew(config) for binding_set in binding_sets]
    except (DescriptionError, TypeResolutionError) as exc:
        sys.stderr.write(exc.format() + "\n")
        return EXIT_ERROR

    outdir = Path(args.output).expanduser()
    written: List[Path] = []
    try:
        if args.single:
            path = outdir / args.single
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(render_module(files, config), encoding="utf-8")
            written.append(path)
        else:
            for binder_file in files:
                written.append(write_file(binder_file, outdir, config))
    except OSError as exc:
        _log.error("Cannot write generated code: %s", exc)
        return EXIT_INFRA

    for path in written:
        _log.info("Generated %s", path)
    _log.info("%d binder(s) generated", len(files))
    return EXIT_OK


def cmd_listeners(args: argparse.Namespace) -> int:
    """Print the listener catalog, one listener per line."""
    for listener in default_registry():
        methods = ", ".join(m.name for m in listener.listener_methods())
        line = f"@{listener.name:<18} {listener.setter}({listener.type}) [{methods}]"
        if listener.requires_removal:
            line += f" remover={listener.remover}"
        sys.stdout.write(line + "\n")
    return EXIT_OK


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="viewbind",
        description="Generate view binder classes from binding descriptions.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    # --- generate ----------------------------------------------------------
    p_generate = subparsers.add_parser(
        "generate",
        help="Generate binders from a JSON description.",
        description=(
            "Read a JSON binding description and write one Python module "
            "per generated binder."
        ),
    )
    p_generate.add_argument(
        "description",
        metavar="DESCRIPTION",
        help="JSON binding description.",
    )
    p_generate.add_argument(
        "-o", "--output",
        required=True,
        metavar="OUTDIR",
        help="Directory that receives the generated modules.",
    )
    p_generate.add_argument(
        "-c", "--config",
        default=None,
        metavar="FILE",
        help="JSON file with BinderConfig settings.",
    )
    p_generate.add_argument(
        "--single",
        default=None,
        metavar="FILE",
        help="Write every binder into this one module under OUTDIR.",
    )
    p_generate.set_defaults(func=cmd_generate)

    # --- listeners ---------------------------------------------------------
    p_listeners = subparsers.add_parser(
        "listeners",
        help="List the known listener classes.",
    )
    p_listeners.set_defaults(func=cmd_listeners)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the viewbind CLI.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    # No subcommand given → print help.
    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA
    except ViewBindError as exc:
        sys.stderr.write(exc.format() + "\n")
        return EXIT_INFRA
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
