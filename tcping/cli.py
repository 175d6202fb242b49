# tcping/cli.py
# Usage examples:
#   tcping google.com                # default port 80
#   tcping google.com 443
#   tcping -4 -n 5 8.8.8.8 443
#   tcping -c -v example.com 443

import argparse
import logging
import os
import sys
from typing import List, Optional, Tuple

from tcping.config import DEFAULT_PORT, PROGRAM_NAME, Settings
from tcping.engine.cancel import CancelToken
from tcping.engine.controller import ProbeLoop
from tcping.engine.shutdown import DEFAULT_SIGNALS, ShutdownCoordinator
from tcping.engine.state import Statistics
from tcping.errors import TcpingError, ValidationError
from tcping.output import Reporter, version_text
from tcping.prober.tcp import TcpProber
from tcping.resolver import resolve_target

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

EPILOG = """\
examples:
  tcping google.com                 basic usage (port 80)
  tcping google.com 80              explicit port
  tcping -p 443 google.com          port given with -p
  tcping -4 -n 5 8.8.8.8 443        IPv4 only, 5 attempts
  tcping -w 2000 example.com 22     2 second timeout
  tcping -c -v example.com 443      colored, verbose output
"""


class _ArgumentParser(argparse.ArgumentParser):
    # usage errors exit 1 through main() instead of argparse's exit 2
    def error(self, message):
        raise ValidationError(message)


def build_argparser(defaults: Optional[Settings] = None) -> argparse.ArgumentParser:
    d = defaults or Settings()
    ap = _ArgumentParser(
        prog="tcping",
        description=f"{PROGRAM_NAME} - test TCP connectivity to a host and port.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    ap.add_argument("host", nargs="?", help="Destination host name or IP address")
    ap.add_argument("port", nargs="?", help=f"Destination port (default: {DEFAULT_PORT})")

    fam = ap.add_mutually_exclusive_group()
    fam.add_argument("-4", "--ipv4", dest="family", action="store_const", const="v4",
                     help="Force IPv4")
    fam.add_argument("-6", "--ipv6", dest="family", action="store_const", const="v6",
                     help="Force IPv6")
    ap.set_defaults(family="auto")

    ap.add_argument("-n", "--count", type=int, default=d.count,
                    help="Number of attempts (default: unlimited)")
    ap.add_argument("-p", "--port", dest="port_opt", type=int, default=None,
                    help=f"Port to connect to when none is given positionally (default: {DEFAULT_PORT})")
    ap.add_argument("-t", "--interval", type=int, default=d.interval_ms,
                    help=f"Interval between attempts in ms (default: {d.interval_ms})")
    ap.add_argument("-w", "--timeout", type=int, default=d.timeout_ms,
                    help=f"Connect timeout in ms (default: {d.timeout_ms})")
    ap.add_argument("-c", "--color", action="store_true", default=d.color,
                    help="Colored output")
    ap.add_argument("-v", "--verbose", action="store_true", default=d.verbose,
                    help="Show local/remote endpoints and failure details")
    ap.add_argument("-V", "--version", action="version", version=version_text())
    ap.add_argument("--log-level", default=os.environ.get("TCPING_LOG_LEVEL", "WARNING"),
                    help="Diagnostic log level on stderr (default: WARNING)")
    return ap


def parse_settings(args: argparse.Namespace) -> Tuple[Settings, str, int]:
    """Validate parsed args into (settings, host, port)."""
    settings = Settings(
        family=args.family,
        count=args.count,
        interval_ms=args.interval,
        timeout_ms=args.timeout,
        color=args.color,
        verbose=args.verbose,
    )

    if not args.host:
        raise ValidationError(
            "a host is required\n\nusage: tcping [options] <host> [port]\n"
            "try 'tcping -h' for more information"
        )

    # positional port > -p > default
    if args.port is not None:
        raw_port = args.port
    elif args.port_opt is not None and args.port_opt > 0:
        raw_port = str(args.port_opt)
    else:
        raw_port = str(DEFAULT_PORT)

    # plain ASCII digits only: no sign, whitespace or underscores
    if not (raw_port.isascii() and raw_port.isdigit()):
        raise ValidationError(f"invalid port {raw_port!r}")
    port = int(raw_port)
    if port < 1 or port > 65535:
        raise ValidationError("port must be between 1 and 65535")

    return settings, args.host, port


def configure_logging(level: str) -> None:
    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        raise ValidationError(f"unknown log level {level!r}")
    logging.basicConfig(level=numeric, format=LOG_FORMAT, stream=sys.stderr)


def run(settings: Settings, host: str, port: int, reporter: Optional[Reporter] = None,
        signals=DEFAULT_SIGNALS):
    """Resolve, probe until done or interrupted, print the summary. Returns the snapshot."""
    logger.debug("settings: %s", settings)
    target = resolve_target(host, port, settings.family)
    reporter = reporter or Reporter(color=settings.color, verbose=settings.verbose)
    reporter.header(target)

    with CancelToken() as cancel:
        loop = ProbeLoop(
            prober=TcpProber(timeout_ms=settings.timeout_ms),
            target=target,
            settings=settings,
            stats=Statistics(),
            reporter=reporter,
            cancel=cancel,
        )
        return ShutdownCoordinator(loop, reporter, signals=signals).run()


def main(argv: Optional[List[str]] = None) -> int:
    try:
        defaults = Settings.from_env()
        args = build_argparser(defaults).parse_args(argv)
        configure_logging(args.log_level)
        settings, host, port = parse_settings(args)
        run(settings, host, port)
    except TcpingError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
