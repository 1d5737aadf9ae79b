#!/usr/bin/env python3
"""
ETU CLI
-------
Command-line front end: parse, validate, diff and convert configuration
files. All real work happens in ConfigEngine; this module only maps flags
to options, renders results and chooses the exit status.

Exit status: 0 success, 1 failure (error or invalid configuration),
2 usage error.

Author: etu Team
Date: 2026-10-19
"""

import argparse
import logging
import sys
from typing import List, Optional

from rich.logging import RichHandler

from etu.cli.formatter import DIFF_OUTPUT_FORMATS, EtuFormatter, console, err_console
from etu.core.engine import STDIN_PATH, ConfigEngine, FileSnapshotSource
from etu.core.errors import EtuError
from etu.core.exporter import EXPORT_FORMATS, TreeExporter
from etu.core.models import DiffOptions, DiffScope, FormatType, ParseOptions
from etu.core.settings import LOG_LEVELS, Settings, load_settings

VERSION = "0.1.0"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def configure_logging(level: str):
    """Routes every 'etu.*' logger to stderr through rich."""
    handler = RichHandler(console=err_console, show_time=False, show_path=False)
    logging.basicConfig(level=level.upper(), format="%(message)s", handlers=[handler], force=True)


class EtuCLI:
    """
    CLI wrapper that translates user commands into Engine actions.
    """

    def __init__(self, formatter: Optional[EtuFormatter] = None,
                 engine: Optional[ConfigEngine] = None):
        self.parser = argparse.ArgumentParser(
            prog="etu",
            description="etu - parse, validate and diff etcd configuration files",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="Formats: etcdctl (flat blocks), json, yaml",
        )
        self.formatter = formatter or EtuFormatter()
        self.engine = engine or ConfigEngine()
        self._setup_args()

    def _add_input_args(self, sub: argparse.ArgumentParser, required: bool = True):
        sub.add_argument("-f", "--file", required=required,
                         default=None if required else STDIN_PATH,
                         help="path to configuration file ('-' for stdin)")
        sub.add_argument("--format", default=None, metavar="FORMAT",
                         help=f"input format: {', '.join(FormatType.tokens())} (overrides config)")

    def _setup_args(self):
        """Configures the command-line flags and subcommands."""
        self.parser.add_argument("-v", "--version", action="version", version=f"etu v{VERSION}")
        self.parser.add_argument("--log-level", choices=LOG_LEVELS, default=None,
                                 help="logging verbosity (overrides config)")
        self.parser.add_argument("--config", default=None,
                                 help="config file (default: $ETUCONFIG or ~/.config/etu/config.yaml)")
        subparsers = self.parser.add_subparsers(dest="command", metavar="Command")

        parse_parser = subparsers.add_parser("parse", help="Parse and display configuration")
        self._add_input_args(parse_parser)
        view = parse_parser.add_mutually_exclusive_group()
        view.add_argument("--json", action="store_true", help="output as JSON")
        view.add_argument("--tree", action="store_true", help="display as tree view")

        validate_parser = subparsers.add_parser("validate", help="Validate configuration without applying")
        self._add_input_args(validate_parser)
        validate_parser.add_argument("--strict", action="store_const", const=True, default=None,
                                     help="treat validation warnings as errors (overrides config)")
        validate_parser.add_argument("-o", "--output", choices=("simple", "json"), default="simple")

        diff_parser = subparsers.add_parser("diff", help="Compare a local file with a store snapshot")
        self._add_input_args(diff_parser)
        diff_parser.add_argument("--remote", required=True, metavar="SNAPSHOT",
                                 help="store snapshot file (e.g. 'etcdctl get / --prefix' output)")
        diff_parser.add_argument("--remote-format", default=None, metavar="FORMAT",
                                 help="format of the snapshot file (default: auto)")
        diff_parser.add_argument("--prefix", default=None, help="only consider remote keys under this prefix")
        diff_parser.add_argument("--full", action="store_true",
                                 help="report remote-only keys under --prefix as deleted")
        diff_parser.add_argument("--show-unchanged", action="store_true", help="show keys that are unchanged")
        diff_parser.add_argument("-o", "--output", choices=DIFF_OUTPUT_FORMATS, default="simple")

        convert_parser = subparsers.add_parser("convert", help="Convert configuration to hierarchical YAML/JSON")
        self._add_input_args(convert_parser, required=False)
        convert_parser.add_argument("--to", choices=EXPORT_FORMATS, default="yaml", help="output format")
        convert_parser.add_argument("--sort-keys", action="store_true", help="sort keys alphabetically")

    # --- Commands ---

    def _cmd_parse(self, args: argparse.Namespace, settings: Settings) -> int:
        loaded = self.engine.load(args.file, ParseOptions(format=settings.resolve_format(args.format)))
        if args.json:
            self.formatter.print_pairs_json(loaded.pairs)
        elif args.tree:
            self.formatter.print_tree(loaded.pairs)
        else:
            self.formatter.print_pairs_table(loaded.pairs)
        return EXIT_OK

    def _cmd_validate(self, args: argparse.Namespace, settings: Settings) -> int:
        loaded = self.engine.load(args.file, ParseOptions(format=settings.resolve_format(args.format)))
        result = self.engine.validate(loaded.pairs, strict=settings.resolve_strict(args.strict))

        if args.output == "json":
            self.formatter.print_document(self.formatter.validation_json(result))
        else:
            self.formatter.print_validation(result)
        return EXIT_OK if result.valid else EXIT_FAILURE

    def _cmd_diff(self, args: argparse.Namespace, settings: Settings) -> int:
        if args.full and not args.prefix:
            self.formatter.print_error("--full requires --prefix: a full deleted-key scan needs a key range")
            return EXIT_USAGE

        loaded = self.engine.load(args.file, ParseOptions(format=settings.resolve_format(args.format)))
        options = DiffOptions(
            scope=DiffScope.FULL if args.full else DiffScope.FILE_SCOPED,
            prefix=args.prefix,
            show_unchanged=args.show_unchanged,
        )
        source = FileSnapshotSource(args.remote, self.engine, fmt=args.remote_format)
        result = self.engine.diff(loaded.pairs, source, options)
        self.formatter.print_diff(result, fmt=args.output, show_unchanged=args.show_unchanged)
        return EXIT_OK

    def _cmd_convert(self, args: argparse.Namespace, settings: Settings) -> int:
        loaded = self.engine.load(args.file, ParseOptions(format=settings.resolve_format(args.format)))
        exporter = TreeExporter(sort_keys=args.sort_keys)
        self.formatter.print_document(exporter.export(loaded.pairs, fmt=args.to))
        return EXIT_OK

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary routing entry point."""
        args = self.parser.parse_args(argv)
        if not args.command:
            self.parser.print_help()
            return EXIT_OK

        try:
            settings = load_settings(args.config)
            configure_logging(settings.resolve_log_level(args.log_level))
            handler = getattr(self, f"_cmd_{args.command}")
            return handler(args, settings)
        except EtuError as e:
            self.formatter.print_error(str(e))
            return EXIT_FAILURE


def main(argv: Optional[List[str]] = None) -> int:
    """Application entry point with interrupt handling."""
    try:
        return EtuCLI().run(argv)
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        return 130


if __name__ == "__main__":
    sys.exit(main())
