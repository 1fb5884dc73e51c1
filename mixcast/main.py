"""
Command line entrypoint.

    mixcast [options] [api_key] video_path_1 video_path_2 video_path_3

With three paths the mixed program is only rendered locally; a leading
credential additionally publishes it to the RTMP ingest. Exit status is 0
after a clean end-of-stream and 1 on any error.
"""

from __future__ import annotations

import argparse
import logging
import signal
import sys
from typing import List, NoReturn, Optional

from .api.server import StatusServer
from .api.state import PipelineStatus
from .config import MAX_SOURCES, StreamerConfig
from .errors import ArgumentError, ConfigError, StreamerError
from .graph.layout import LAYOUTS
from .pipeline import StreamerPipeline
from .utils.logging import configure_logging

LOG = logging.getLogger(__name__)

EXAMPLES = """\
examples:
  mixcast live_111111111_aaaabbbcccddddeeeeffffggghhhhh ../data/sintel_trailer-480p.webm \\
      ../data/big_buck_bunny_trailer-360p.mp4 ../data/the_daily_dweebs-720p.mp4
  mixcast ../data/sintel_trailer-480p.webm ../data/big_buck_bunny_trailer-360p.mp4 \\
      ../data/the_daily_dweebs-720p.mp4

A credential that starts with "-" must follow "--" so it is not read as an option:
  mixcast --profile low-bandwidth -- -live_111_abc a.webm b.mp4 c.mp4
"""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        raise ArgumentError(message)


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="mixcast",
        description="Mix video files into one program and optionally stream it to twitch.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        metavar="input",
        help=f"optional streaming credential followed by {MAX_SOURCES} media files",
    )
    parser.add_argument("--profile", default="default", help="session profile to load")
    parser.add_argument("--layout", choices=sorted(LAYOUTS), default=None, help="override the profile layout")
    parser.add_argument("--log-level", default=None, help="logging level (default INFO)")
    parser.add_argument("--status-port", type=int, default=None, help="serve the read-only status API on this port")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)


def build_config(args: argparse.Namespace) -> StreamerConfig:
    inputs = list(args.inputs)
    if len(inputs) not in (MAX_SOURCES, MAX_SOURCES + 1):
        raise ArgumentError(
            f"expected {MAX_SOURCES} video paths, optionally preceded by an api key; got {len(inputs)} arguments"
        )
    api_key = inputs[0] if len(inputs) == MAX_SOURCES + 1 else None
    return StreamerConfig.from_args(
        inputs[-MAX_SOURCES:],
        api_key=api_key,
        profile=args.profile,
        layout=args.layout,
    )


def run(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
        configure_logging(args.log_level)
        config = build_config(args)
    except (ArgumentError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        parser.print_help(sys.stderr)
        return 1
    except ConfigError as exc:
        LOG.error("%s", exc)
        return 1

    if config.streaming_enabled:
        LOG.info("Twitch streaming is enabled!")
    else:
        LOG.info("Twitch streaming is NOT enabled, because twitch API key was not specified!")

    status = PipelineStatus()
    server: Optional[StatusServer] = None
    if args.status_port is not None:
        server = StatusServer(status, port=args.status_port)
        server.start()

    try:
        with StreamerPipeline(config, status=status) as session:
            LOG.info("Creating pipeline...")
            session.build()
            LOG.info("Running pipeline...")
            session.run()
    except StreamerError as exc:
        LOG.error("%s", exc)
        return 1
    finally:
        if server is not None:
            server.stop()

    LOG.info("Done.")
    return 0


def main() -> None:
    # The bus wait blocks inside GStreamer, where Python signal handlers
    # cannot run; let Ctrl+C terminate the process directly.
    signal.signal(signal.SIGINT, signal.SIG_DFL)
    sys.exit(run())


if __name__ == "__main__":
    main()
