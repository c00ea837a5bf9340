"""
Main commands for the sqlsession CLI.
"""
import argparse
import json
import logging
import os
import sys

from typing import Optional, List

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sqlsession.builder import SessionFactoryBuilder
from sqlsession.cli.common import LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL
from sqlsession.cli.utils import print_colored, parse_property_args, configuration_summary, environment_status
from sqlsession.core.common import SqlSessionError
from sqlsession.utils.encrypter import ConfigEncrypter, DEFAULT_KEY_PATH
from sqlsession.utils.logging import setup_logger


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sqlsession",
        description="Build and check sqlsession configuration files"
    )
    parser.add_argument("config", nargs="?", help="XML configuration file")
    parser.add_argument("-e", "--environment", help="Environment id to activate")
    parser.add_argument("-p", "--property", action="append", default=[], metavar="KEY=VALUE",
                        help="Property override (repeatable)")
    parser.add_argument("--show", action="store_true", help="Print the resolved configuration as JSON")
    parser.add_argument("--test-connection", action="store_true",
                        help="Open a session and run a trivial query")
    parser.add_argument("--encrypt", metavar="VALUE", help="Print VALUE in ENC(...) notation")
    parser.add_argument("--generate-key", action="store_true", help="Create a new secret key file")
    parser.add_argument("--key-file", help=f"Secret key file (default: {DEFAULT_KEY_PATH})")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="store_true", help="Show version")
    return parser


def main_cli(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the sqlsession CLI.

    Args:
        argv: List of command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0 for success, 1 for error)
    """
    if argv is None:
        argv = sys.argv[1:]

    args = _build_parser().parse_args(argv)

    if args.verbose:
        level = logging.DEBUG
    else:
        level_name = os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL).upper()
        level = getattr(logging, level_name, logging.WARNING)
    setup_logger(level=level)

    if args.version:
        from sqlsession import __version__
        print(f"sqlsession version {__version__}")
        return 0

    try:
        if args.generate_key:
            key_path = ConfigEncrypter.generate_key_file(args.key_file or DEFAULT_KEY_PATH)
            print_colored(f"✅ New secret key written to {key_path}", "green")
            return 0

        if args.encrypt is not None:
            print(ConfigEncrypter(key_path=args.key_file).encrypt_value(args.encrypt))
            return 0

        if not args.config:
            print_colored("Error: a configuration file is required", "red")
            return 1

        return check_configuration(args)
    except SqlSessionError as e:
        print_colored(f"❌ {e}", "red")
        return 1


def check_configuration(args: argparse.Namespace) -> int:
    """
    Builds a session factory from the configuration file given on the command line.

    Args:
        args: Parsed command line arguments

    Returns:
        Exit code
    """
    try:
        properties = parse_property_args(args.property)
    except ValueError as e:
        print_colored(f"Error: {e}", "red")
        return 1

    try:
        stream = open(args.config, "rb")
    except OSError as e:
        print_colored(f"Error: cannot open {args.config}: {e}", "red")
        return 1

    # The builder closes the stream
    factory = SessionFactoryBuilder().build(stream, args.environment, properties or None)
    configuration = factory.configuration

    environment_id, backend = environment_status(configuration)
    print_colored(f"✅ Session factory built (environment: {environment_id}, database: {backend})", "green")

    if args.show:
        print(json.dumps(configuration_summary(configuration), indent=2))

    if args.test_connection:
        try:
            with factory.open_session() as session:
                session.execute(text("SELECT 1"))
            print_colored("✅ Connection test succeeded", "green")
        except (SQLAlchemyError, SqlSessionError) as e:
            print_colored(f"❌ Connection test failed: {e}", "red")
            return 1
        finally:
            factory.dispose()

    return 0
