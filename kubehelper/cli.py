"""Command line entry point: version, run and k8sgpt subcommands."""

from __future__ import annotations

import argparse
import logging
import sys
import threading

from kubehelper.helper import KubeHelper
from kubehelper.k8sgpt import K8sGPTHelper
from kubehelper.kubeclient import KubeClient, KubeError, load_kubeconfig
from kubehelper.mcp import McpServer
from kubehelper.signals import setup_signal_event
from kubehelper.utils import COMMIT, VERSION, setup_logging

logger = logging.getLogger(__name__)

_POLL_SECONDS = 0.2

_shutdown_lock = threading.Lock()
_shutdown: threading.Event | None = None


class _Cancelled(Exception):
    """The process was asked to shut down."""


def get_version() -> str:
    """The version string, with the commit when one is known."""
    if COMMIT:
        return f"{VERSION} - {COMMIT}"
    return VERSION


def _shutdown_event() -> threading.Event:
    global _shutdown
    with _shutdown_lock:
        if _shutdown is None:
            _shutdown = setup_signal_event()
        return _shutdown


def _add_global_options(parser: argparse.ArgumentParser, suppress: bool) -> None:
    def default(value):
        return argparse.SUPPRESS if suppress else value

    parser.add_argument(
        "-c", "--kubeconfig", default=default(""), help="kube-config file (optional)"
    )
    parser.add_argument(
        "--debug", action="store_true", default=default(False), help="enable debug output"
    )
    parser.add_argument(
        "--hide-log-time",
        action="store_true",
        default=default(False),
        help=argparse.SUPPRESS,
    )


def _add_server_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--sse", action="store_true", default=False, help="Use SSE protocol instead of stdio"
    )
    parser.add_argument("-l", "--listen", default="127.0.0.1", help="SSE Listen Address")
    parser.add_argument("-p", "--port", type=int, default=8000, help="SSE Listen Port")


def _prerun(opts: argparse.Namespace) -> None:
    setup_logging(opts.hide_log_time)
    if opts.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug output enabled")


def _client(opts: argparse.Namespace) -> KubeClient:
    try:
        config = load_kubeconfig(opts.kubeconfig or None)
    except (KubeError, OSError, ValueError, KeyError) as exc:
        raise KubeError(f"building kubeconfig: {exc}") from exc
    return KubeClient(config)


def _serve(server: McpServer, opts: argparse.Namespace) -> None:
    event = _shutdown_event()
    failures: list[BaseException] = []

    def target() -> None:
        try:
            if opts.sse:
                url = f"http://{opts.listen}:{opts.port}"
                logger.info("SSE server listening on %r", url)
                server.serve_sse("", opts.port, url)
            else:
                server.serve_stdio()
        except BaseException as exc:  # handed back to the main thread
            failures.append(exc)

    thread = threading.Thread(target=target, name="mcp-server", daemon=True)
    thread.start()
    while thread.is_alive():
        if event.wait(_POLL_SECONDS):
            raise _Cancelled()
    if failures:
        raise failures[0]


def _version(opts: argparse.Namespace) -> int:
    _prerun(opts)
    print(f"version {get_version()}")
    return 0


def _run(opts: argparse.Namespace) -> int:
    _prerun(opts)
    _serve(KubeHelper(_client(opts)).server(), opts)
    return 0


def _k8sgpt(opts: argparse.Namespace) -> int:
    _prerun(opts)
    _serve(K8sGPTHelper(_client(opts)).server(), opts)
    return 0


def build_parser() -> argparse.ArgumentParser:
    """The argument parser for the helper command and its subcommands."""
    parser = argparse.ArgumentParser(prog="helper", description="Kubernetes MCP helper")
    parser.add_argument(
        "-v", "--version", action="version", version=f"%(prog)s version {get_version()}"
    )
    _add_global_options(parser, suppress=False)
    parser.set_defaults(command=None, func=None)

    commands = parser.add_subparsers(dest="command", metavar="command")

    version = commands.add_parser(
        "version", help="Show version", description="Show version", epilog="example:\n  helper version",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    _add_global_options(version, suppress=True)
    version.set_defaults(func=_version)

    run = commands.add_parser(
        "run",
        help="MCP server to make kubernetes resources API calls",
        description="MCP server to make kubernetes resources API calls",
    )
    _add_global_options(run, suppress=True)
    _add_server_options(run)
    run.set_defaults(func=_run)

    k8sgpt = commands.add_parser(
        "k8sgpt",
        help="MCP server to make K8sGPT operator actions",
        description="MCP server to make K8sGPT operator actions",
    )
    _add_global_options(k8sgpt, suppress=True)
    _add_server_options(k8sgpt)
    k8sgpt.set_defaults(func=_k8sgpt)

    return parser


def main(argv=None) -> int:
    """Run the helper command; returns the process exit status."""
    parser = build_parser()
    opts = parser.parse_args(sys.argv[1:] if argv is None else argv)
    if opts.func is None:
        parser.print_help()
        return 0
    try:
        return opts.func(opts)
    except _Cancelled:
        return 0
    except (KubeError, OSError, ValueError) as exc:
        logger.warning("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())