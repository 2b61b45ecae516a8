#!/usr/bin/env python3
"""
CMS-1500 / HL7 Converter - Main Entry Point.

Command-line interface to the conversion service.

Usage:
    Command Line:
        python main.py encode --input claim.json
        python main.py decode --input claim.hl7 --output outputs/claim.json
        python main.py extract --input scanned_claim.pdf
        python main.py keyvalue --input form_export.txt

    Python:
        from main import run_conversion
        result = run_conversion("decode", "claim.hl7")
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from config import ConfigurationManager
from cms_converter.utils.logger import ROOT_LOGGER_NAME, setup_logger_from_config, get_logger
from cms_converter.utils.exceptions import ConverterError, InputError


COMMANDS = ("encode", "decode", "extract", "keyvalue")


def parse_arguments(argv=None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed argument namespace.
    """
    parser = argparse.ArgumentParser(
        description="CMS-1500 / HL7 claim converter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    Encode a canonical record:
        python main.py encode --input claim.json

    Decode a message:
        python main.py decode --input claim.hl7 --output outputs/claim.json

    Extract a scanned form:
        python main.py extract --input scanned_claim.pdf --variant cms1500_legacy
        """
    )

    parser.add_argument(
        "command",
        choices=COMMANDS,
        help="Conversion to run"
    )

    parser.add_argument(
        "--input", "-i",
        type=str,
        required=True,
        help="Input file (.json, .hl7, .txt, .pdf or image)"
    )

    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Output file (default: configured output directory)"
    )

    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to custom configuration file"
    )

    parser.add_argument(
        "--variant",
        type=str,
        default=None,
        help="Segment schema variant (default: schema.variant from config)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    return parser.parse_args(argv)


def initialize_system(args: argparse.Namespace) -> ConfigurationManager:
    """
    Initialize configuration and logging.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Initialized configuration manager.
    """
    ConfigurationManager.reset()
    config = ConfigurationManager(args.config)

    logger = setup_logger_from_config()

    if args.debug:
        logging.getLogger(ROOT_LOGGER_NAME).setLevel(logging.DEBUG)
        for handler in logging.getLogger(ROOT_LOGGER_NAME).handlers:
            handler.setLevel(logging.DEBUG)

    logger.info("=" * 60)
    logger.info("CMS-1500 / HL7 CONVERTER")
    logger.info("=" * 60)
    logger.info(f"Version: {config.get('project.version', '1.0.0')}")
    logger.info(f"Command: {args.command}")
    logger.info(f"Input: {args.input}")

    return config


def run_conversion(
    command: str,
    input_path: str,
    output_path: Optional[str] = None,
    variant: Optional[str] = None
) -> Path:
    """
    Run one conversion and write its output.

    Args:
        command: One of encode, decode, extract, keyvalue.
        input_path: Path to the input file.
        output_path: Output file. Defaults to the configured output directory.
        variant: Schema variant override.

    Returns:
        Path of the written output file.

    Raises:
        ConverterError: If loading, conversion or writing fails.
    """
    from cms_converter.converter import ConversionService
    from cms_converter.input_handler import InputHandler
    from cms_converter.output_handler import OutputHandler
    from cms_converter.schema import get_schema

    logger = get_logger(__name__)

    document = InputHandler().load(input_path)
    service = ConversionService(schema=get_schema(variant))

    if command == "encode":
        _expect_kind(document, "record")
        result = service.json_to_hl7(document.text)
    elif command == "decode":
        _expect_kind(document, "message")
        result = service.hl7_to_json(document.text)
    elif command == "extract":
        if document.kind == "text":
            result = service.text_to_hl7(document.text, source=document.filename)
        else:
            _expect_kind(document, "document")
            result = service.document_to_hl7(document.data, document.filename)
    else:
        _expect_kind(document, "text")
        result = service.key_value_to_hl7(document.text)

    for warning in result.warnings:
        logger.warning(warning)

    if output_path:
        target = Path(output_path)
        output_handler = OutputHandler(target.parent)
        filename = target.name
    else:
        output_handler = OutputHandler()
        filename = None

    if command == "decode":
        return output_handler.save_record(result.record, filename)
    return output_handler.save_message(result.wire_text, filename)


def _expect_kind(document, kind: str) -> None:
    """Reject an input whose kind does not fit the command."""
    if document.kind != kind:
        raise InputError(
            f"Expected a {kind} input, got {document.kind}: {document.filename}"
        )


def main(argv=None) -> int:
    """
    Main function - entry point for command-line execution.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    try:
        args = parse_arguments(argv)
        initialize_system(args)
        logger = get_logger(__name__)

        output_file = run_conversion(
            command=args.command,
            input_path=args.input,
            output_path=args.output,
            variant=args.variant
        )

        logger.info("=" * 60)
        logger.info(f"Conversion complete: {output_file}")
        logger.info("=" * 60)
        print(output_file)

        return 0

    except (ConverterError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130

    except Exception as e:
        print(f"Unexpected error: {e}", file=sys.stderr)
        if "--debug" in (sys.argv if argv is None else argv):
            import traceback
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
