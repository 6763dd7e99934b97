"""
Command-line interface for docgen.

Usage:
    docgen generate enrollment data.json --output enrollment.pdf
    docgen inspect enrollment --json
    docgen map "$.applicants[0].name" data.json --type JSONPATH
    docgen version
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .config import GeneratorOptions
from .engine.composer import DocumentComposer
from .exceptions import DocGenError
from .loader.template_loader import TemplateLoader
from .mapping.base import convert_to_string
from .mapping.registry import MappingStrategyRegistry
from .models.template import MappingType
from .utils.logger import configure_logging
from .utils.rich_logger import setup_rich_logging


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="docgen",
        description="docgen - template-driven PDF document generation",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  docgen generate enrollment data.json -o enrollment.pdf
  docgen generate child-template data.json --template-root ./templates --var state=CA
  docgen inspect enrollment --json
  docgen map "applicants[type='PRIMARY'].name" data.json
        """,
    )
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        help="Log level (default: WARNING)")
    parser.add_argument("--log-file", help="Also write logs to this file (plain format)")
    parser.add_argument("--config", help="YAML/JSON settings file with generator options")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    generate_parser = subparsers.add_parser("generate", help="Generate a PDF document")
    generate_parser.add_argument("template_id", help="Template identifier")
    generate_parser.add_argument("data", help="JSON data file ('-' for stdin)")
    generate_parser.add_argument("-o", "--output", help="Output PDF path (default: <template_id>.pdf)")
    _add_template_options(generate_parser)

    inspect_parser = subparsers.add_parser("inspect", help="Show the resolved template")
    inspect_parser.add_argument("template_id", help="Template identifier")
    inspect_parser.add_argument("--json", action="store_true", help="Output as JSON")
    _add_template_options(inspect_parser)

    map_parser = subparsers.add_parser("map", help="Evaluate one mapping expression against data")
    map_parser.add_argument("expression", help="Expression to evaluate")
    map_parser.add_argument("data", help="JSON data file ('-' for stdin)")
    map_parser.add_argument("--type", default="JSONPATH", choices=[t.value for t in MappingType],
                            help="Mapping language (default: JSONPATH)")

    subparsers.add_parser("version", help="Show version information")
    return parser


def _add_template_options(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument("--template-root", action="append", dest="template_roots",
                           help="Directory searched for templates (repeatable)")
    subparser.add_argument("--var", action="append", dest="variables", default=[],
                           metavar="KEY=VALUE", help="Placeholder value (repeatable)")


def _parse_variables(pairs: List[str]) -> Dict[str, str]:
    variables = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Invalid --var '{pair}', expected KEY=VALUE")
        variables[key.strip()] = value
    return variables


def _read_data(source: str) -> Any:
    if source == "-":
        return json.load(sys.stdin)
    with open(source, "r", encoding="utf-8") as handle:
        return json.load(handle)


def build_options(args) -> GeneratorOptions:
    settings: Dict[str, Any] = {}
    if getattr(args, "config", None):
        with open(args.config, "r", encoding="utf-8") as handle:
            settings = yaml.safe_load(handle) or {}
    options = GeneratorOptions.from_mapping(settings)
    if getattr(args, "template_roots", None):
        options.template_roots = [Path(root) for root in args.template_roots]
    return options


def cmd_generate(args) -> int:
    """Handle generate command."""
    options = build_options(args)
    composer = DocumentComposer.create_default(options)
    data = _read_data(args.data)
    variables = _parse_variables(args.variables)

    pdf_bytes = composer.generate(args.template_id, data, variables)

    output_path = Path(args.output) if args.output else Path(f"{Path(args.template_id).name}.pdf")
    output_path.write_bytes(pdf_bytes)
    print(f"✅ Saved: {output_path} ({len(pdf_bytes):,} bytes)")
    return 0


def cmd_inspect(args) -> int:
    """Handle inspect command."""
    loader = TemplateLoader(build_options(args))
    template = loader.load(args.template_id, _parse_variables(args.variables))

    sections = [
        {
            "sectionId": section.section_id,
            "type": section.section_type.value if section.section_type else None,
            "templatePath": section.template_path,
            "mappingType": section.effective_mapping_type.value,
            "order": section.order,
            "condition": section.condition,
            "fields": len(section.field_mappings) + sum(len(g.field_mappings) for g in section.field_mapping_groups),
            "overflowConfigs": len(section.overflow_configs),
        }
        for section in template.sections
    ]

    if args.json:
        info = {"templateId": template.template_id, "description": template.description, "sections": sections}
        print(json.dumps(info, indent=2, ensure_ascii=False))
        return 0

    print(f"📄 Template: {template.template_id}")
    if template.description:
        print(f"   {template.description}")
    print()
    for info in sections:
        print(f"   [{info['order']:>3}] {info['sectionId']} ({info['type']}) -> {info['templatePath']}")
        if info["condition"]:
            print(f"         condition: {info['condition']}")
    return 0


def cmd_map(args) -> int:
    """Handle map command."""
    strategy = MappingStrategyRegistry.create_default().get(MappingType(args.type))
    value = strategy.evaluate_path(_read_data(args.data), args.expression)
    print(convert_to_string(value))
    return 0


def cmd_version(args=None) -> int:
    """Handle version command."""
    from .version import __version__
    print(f"docgen v{__version__}")
    return 0


COMMANDS = {
    "generate": cmd_generate,
    "inspect": cmd_inspect,
    "map": cmd_map,
    "version": cmd_version,
}


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.log_file:
        configure_logging(args.log_level, log_file=args.log_file)
    else:
        setup_rich_logging(args.log_level)

    try:
        return COMMANDS[args.command](args)
    except (DocGenError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main() or 0)
