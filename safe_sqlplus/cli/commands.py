"""
Command-line interface for safe-sqlplus.

This module parses the command line, assembles the session configuration
and runs the session, exiting with the client's exit status.
"""

import argparse
import logging
import sys
from typing import Optional

from safe_sqlplus import __version__
from safe_sqlplus.config import DEFAULT_PORT, SessionConfig, load_config_file, resolve_config
from safe_sqlplus.exceptions import ConfigError, SafeSqlplusError
from safe_sqlplus.process.signals import install_fault_handlers
from safe_sqlplus.process.supervisor import ChildSupervisor
from safe_sqlplus.session.orchestrator import SessionOrchestrator

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"

EPILOG = """\
NOTE: username and password programs are executed directly, without a shell,
      so pipes, single and double quotes are not supported. Provide a single
      script or program (plus simple arguments) that prints only the username
      or password on stdout.
      example: -p /usr/local/bin/get_oracle_password

Example:
  safe-sqlplus -H db1 -c SERVICE_NAME=pluggable1 -o /opt/oracle \\
      -u /usr/local/bin/get_oracle_username -p /usr/local/bin/get_oracle_password
"""


def create_parser() -> argparse.ArgumentParser:
    """
    Create and configure the argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Configured argument parser
    """
    parser = argparse.ArgumentParser(
        prog="safe-sqlplus",
        description=(
            "Start sqlplus without putting the database username or password "
            "on the command line"
        ),
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    connection = parser.add_argument_group("connection")
    connection.add_argument(
        "--connectdata",
        "-c",
        metavar="DATA",
        help=(
            "Connect data passed to the connect command "
            "(e.g., SERVICE_NAME=pluggable1 or SID=oraclehost1)"
        ),
    )
    connection.add_argument(
        "--host",
        "-H",
        metavar="HOST",
        help="Oracle database host to connect to",
    )
    connection.add_argument(
        "--port",
        "-P",
        type=int,
        metavar="PORT",
        help=f"Oracle database port to connect to (default: {DEFAULT_PORT})",
    )
    connection.add_argument(
        "--template",
        "-t",
        metavar="TEMPLATE",
        help=(
            "Connection string template with {{username}} and {{password}} "
            "placeholders (replaces --host/--port/--connectdata)"
        ),
    )

    programs = parser.add_argument_group("programs")
    programs.add_argument(
        "--oraclehome",
        "-o",
        metavar="DIR",
        help="Path to Oracle home; ORACLE_HOME/bin/sqlplus is executed",
    )
    programs.add_argument(
        "--usernameprogram",
        "-u",
        metavar="PROGRAM",
        help="Path and arguments of a program that prints the database username",
    )
    programs.add_argument(
        "--passwordprogram",
        "-p",
        metavar="PROGRAM",
        help="Path and arguments of a program that prints the database password",
    )
    programs.add_argument(
        "--client",
        metavar="NAME",
        help="Client program under ORACLE_HOME/bin (default: sqlplus)",
    )
    programs.add_argument(
        "--client-args",
        "-a",
        metavar="ARGS",
        help="Extra whitespace-separated arguments for the client",
    )

    parser.add_argument(
        "--config",
        metavar="FILE",
        help="TOML configuration file; command-line options take precedence",
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        default=None,
        help="Print debug messages on stderr",
    )

    return parser


def configure_logging(debug: bool) -> None:
    """Send log records to stderr; stdout belongs to the client."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
        force=True,
    )


def build_config(args: argparse.Namespace) -> SessionConfig:
    """
    Build the session configuration from parsed arguments.

    Parameters
    ----------
    args : argparse.Namespace
        Parsed command-line arguments

    Returns
    -------
    SessionConfig
        Validated configuration

    Raises
    ------
    ConfigError
        If the configuration file is invalid or required values are missing
    """
    config_file = load_config_file(args.config) if args.config else None
    return resolve_config(
        config_file,
        template=args.template,
        host=args.host,
        port=args.port,
        connect_data=args.connectdata,
        oracle_home=args.oraclehome,
        username_program=args.usernameprogram,
        password_program=args.passwordprogram,
        client=args.client,
        client_args=args.client_args,
        debug=args.debug,
    )


def run_session(config: SessionConfig) -> int:
    """
    Run one client session.

    Parameters
    ----------
    config : SessionConfig
        Validated configuration

    Returns
    -------
    int
        Exit code: the client's status, or the failing stage's status
    """
    install_fault_handlers()
    try:
        with ChildSupervisor() as supervisor:
            return SessionOrchestrator(config, supervisor).run()
    except SafeSqlplusError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code


def main(args: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Parameters
    ----------
    args : list[str], optional
        Command-line arguments (defaults to sys.argv[1:])

    Returns
    -------
    int
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    parsed_args = parser.parse_args(args)

    configure_logging(bool(parsed_args.debug))

    try:
        config = build_config(parsed_args)
    except ConfigError as e:
        for problem in e.problems:
            print(f"Usage error: {problem}", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return 1

    if config.debug and not parsed_args.debug:
        configure_logging(True)

    logger.debug("Client: %s", config.client_executable)
    return run_session(config)


if __name__ == "__main__":
    sys.exit(main())
