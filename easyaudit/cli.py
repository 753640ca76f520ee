"""Command-line entry point for the EasyAudit scanner."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .config import ConfigError, ScanConfiguration, load_config_file, split_list
from .fixability import StaticFixability, external_tool_for
from .report import REPORTERS, get_reporter
from .result import ScanResult, format_summary_table
from .scanner import Scanner

DEFAULT_OUTPUT_DIR = "report"
DEFAULT_OUTPUT_NAME = "easyaudit-report"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="easyaudit",
        description="Static analysis scanner for Magento 2 code bases",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="File or directory to scan (defaults to the working directory).",
    )
    parser.add_argument(
        "--format",
        choices=sorted(REPORTERS),
        default="json",
        help="Report format (defaults to json).",
    )
    parser.add_argument(
        "--exclude",
        default="",
        help="Comma-separated list of full file paths to leave out.",
    )
    parser.add_argument(
        "--exclude-ext",
        dest="exclude_ext",
        default="",
        help="Comma-separated list of file extensions to leave out (e.g. js,phtml).",
    )
    parser.add_argument(
        "--out",
        "--output",
        dest="output_path",
        type=str,
        default=None,
        help="Path to write the report (defaults to report/easyaudit-report.<format>).",
    )
    parser.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="YAML configuration file with exclusions and fixable rules.",
    )
    parser.add_argument(
        "--fixable-only",
        action="store_true",
        help="Only run processors whose findings can be fixed automatically.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log output (-v for progress, -vv for debug).",
    )
    return parser


def configure_logging(verbosity: int) -> None:
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


def build_configuration(args: argparse.Namespace) -> Tuple[ScanConfiguration, StaticFixability]:
    """Merge command-line options with the optional YAML file."""

    file_config: Dict[str, Any] = load_config_file(args.config_path) if args.config_path else {}
    exclude = split_list(args.exclude) + tuple(file_config.get("exclude", ()))
    excluded_extensions = split_list(args.exclude_ext) + tuple(file_config.get("exclude_ext", ()))
    return ScanConfiguration.build(
        args.path,
        exclude=exclude,
        excluded_extensions=excluded_extensions,
        fixable_only=args.fixable_only,
        extra_excluded_dirs=file_config.get("excluded_dirs", ()),
        extra_excluded_files=file_config.get("excluded_files", ()),
    ), StaticFixability(file_config.get("fixable_rules", ()))


def run_scan(config: ScanConfiguration, fixability: Optional[StaticFixability] = None) -> ScanResult:
    return Scanner(config, fixability).run()


def default_output_path(report_format: str) -> str:
    extension = get_reporter(report_format).extension
    return str(Path(DEFAULT_OUTPUT_DIR) / f"{DEFAULT_OUTPUT_NAME}.{extension}")


def format_tool_suggestions(result: ScanResult) -> List[str]:
    lines: List[str] = []
    for rule_id, count in result.tool_suggestions.items():
        tool = external_tool_for(rule_id)
        if tool is None or count <= 0:
            continue
        lines.append(f"  {count} {tool.description} found - run: {tool.command}")
    if lines:
        lines.insert(0, "External tool suggestions:")
    return lines


def write_output(result: ScanResult, output_path: Optional[str], report_format: str) -> str:
    print(format_summary_table(result))

    suggestions = format_tool_suggestions(result)
    if suggestions:
        print()
        print("\n".join(suggestions))

    payload = get_reporter(report_format).generate(result.report)
    target = output_path or default_output_path(report_format)
    output_file = Path(target)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    output_file.write_text(payload, encoding="utf-8")
    print(f"\nReport written to {target}")
    return target


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)
    try:
        config, fixability = build_configuration(args)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1
    result = run_scan(config, fixability)
    write_output(result, args.output_path, args.format)
    return result.exit_code()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
