"""
Command-line interface for OpenAPI to proto3 generation.
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.syntax import Syntax
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from . import __version__
from .codegen import GeneratorConfig, generate_from_document, load_config
from .codegen.core.config import AnyOfMode, ConfigError
from .logging_config import get_logger, setup_logging
from .utils import DocumentLoaderError, load_document, parse_document

logger = get_logger(__name__)


class CLIError(Exception):
    """Exception raised for CLI-related errors."""

    pass


# Status messages go to stderr so generated code can be piped
console = Console(stderr=True)
output_console = Console()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="oas-proto",
        description="Generate proto3 messages and enums from OpenAPI component schemas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  oas-proto openapi.yaml -o api/v1/api.proto
  oas-proto openapi.json --package petstore.v1 --anyof repeat
  oas-proto --url https://example.com/openapi.json --no-sort
  oas-proto --stdin < openapi.yaml
        """.strip(),
    )

    # Input options (mutually exclusive)
    input_group = parser.add_mutually_exclusive_group(required=False)
    input_group.add_argument(
        "file", nargs="?", help="OpenAPI v3 document (JSON or YAML)"
    )
    input_group.add_argument("--url", help="URL to fetch the document from")
    input_group.add_argument(
        "--stdin", action="store_true", help="Read the document from standard input"
    )

    parser.add_argument("--output", "-o", help="Output .proto file (default: stdout)")
    parser.add_argument("--config", help="Configuration file path (JSON)")

    # Generation options
    gen_group = parser.add_argument_group("generation options")
    gen_group.add_argument(
        "--package", "--pkg", dest="package_name", help="Proto package (default: api.v1)"
    )
    gen_group.add_argument(
        "--go-package",
        "--go_pkg",
        dest="go_package",
        help="go_package option value",
    )
    gen_group.add_argument(
        "--no-optional",
        action="store_true",
        help="Don't emit 'optional' for nullable scalars",
    )
    gen_group.add_argument(
        "--anyof",
        choices=[mode.value for mode in AnyOfMode],
        help="anyOf handling: oneof group or repeated first alternative",
    )
    gen_group.add_argument(
        "--no-sort",
        action="store_true",
        help="Keep schema and field declaration order instead of sorting",
    )
    gen_group.add_argument(
        "--no-comments",
        action="store_true",
        help="Don't copy descriptions into field comments",
    )

    # Diagnostics
    info_group = parser.add_argument_group("diagnostics")
    info_group.add_argument(
        "--verbose",
        action="store_true",
        help="Show generation result metadata",
    )
    info_group.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    info_group.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    return parser


def _get_input_document(args: argparse.Namespace) -> Dict[str, Any]:
    """Get the OpenAPI document from the selected input source."""
    try:
        if args.file:
            return load_document(file_path=args.file)[1]
        elif args.url:
            return load_document(url=args.url)[1]
        elif args.stdin:
            return parse_document(sys.stdin.read(), "<stdin>")
        else:
            raise CLIError("Input source required (file, --url, or --stdin)")
    except (DocumentLoaderError, FileNotFoundError) as e:
        raise CLIError(f"Failed to load input: {e}") from e


def _build_config(args: argparse.Namespace) -> GeneratorConfig:
    """Build configuration from the config file and CLI arguments."""
    overrides: Dict[str, Any] = {}

    if args.package_name:
        overrides["package_name"] = args.package_name
    if args.go_package:
        overrides["go_package"] = args.go_package
    if args.no_optional:
        overrides["use_optional"] = False
    if args.anyof:
        overrides["anyof_mode"] = args.anyof
    if args.no_sort:
        overrides["sort_fields"] = False
    if args.no_comments:
        overrides["add_comments"] = False

    try:
        return load_config(custom_config=overrides, config_file=args.config)
    except ConfigError as e:
        raise CLIError(f"Configuration error: {e}") from e


def _write_output(code: str, output_file: str) -> None:
    output_path = Path(output_file)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(code, encoding="utf-8")
    except OSError as e:
        raise CLIError(f"Failed to write to {output_path}: {e}") from e
    console.print(f"[green]✓[/green] Proto definitions saved to [cyan]{output_path}[/cyan]")


def _generate_and_output(
    document: Dict[str, Any], config: GeneratorConfig, args: argparse.Namespace
) -> int:
    """Generate code and handle output with rich formatting."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        gen_task = progress.add_task("[green]Generating proto definitions...", total=None)
        result = generate_from_document(document, config)
        progress.remove_task(gen_task)

    if not result.success:
        console.print(f"[red]✗ {result.error_message}[/red]")
        return 1

    if args.output:
        _write_output(result.code, args.output)
    else:
        if output_console.is_terminal:
            output_console.print(Syntax(result.code, "protobuf", theme="monokai"))
        else:
            sys.stdout.write(result.code)

    if args.verbose and result.metadata:
        metadata_table = Table(
            title="📊 Generation Metadata",
            box=box.SIMPLE,
            show_header=True,
            header_style="bold cyan",
        )
        metadata_table.add_column("Property", style="bold")
        metadata_table.add_column("Value", style="green")

        for key, value in result.metadata.items():
            metadata_table.add_row(key.replace("_", " ").title(), str(value))

        console.print()
        console.print(metadata_table)

    if result.warnings:
        console.print("\n[yellow]⚠️  Warnings:[/yellow]")
        for warning in result.warnings:
            console.print(f"  [yellow]•[/yellow] {warning}")

    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the command-line interface.

    Args:
        argv: Argument list (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for any error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        document = _get_input_document(args)
        config = _build_config(args)
        return _generate_and_output(document, config, args)
    except CLIError as e:
        logger.debug("CLI error", exc_info=True)
        console.print(f"[red]✗ Error:[/red] {e}")
        return 1
