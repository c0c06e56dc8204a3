# scripts/send_log_event.py

import argparse
import json
import logging
from typing import List, Optional, Sequence

from src.common.attributes import Attribute
from src.common.aws import create_logs_client
from src.common.cloudwatch import CloudWatchHandler
from src.common.exceptions import LogRelayError
from src.common.records import Level, LogTarget

# Configure basic logging
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def parse_attribute(text: str) -> Attribute:
    """
    Parses a `key=value` command line attribute.

    The value is read as JSON when it parses (numbers, booleans, objects),
    otherwise kept as a plain string.
    """
    key, sep, raw = text.partition("=")
    if not sep or not key:
        raise argparse.ArgumentTypeError(f"expected key=value, got '{text}'")
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        value = raw
    return Attribute(key, value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Send one structured log event to CloudWatch Logs.")
    parser.add_argument("--log-group", required=True, help="The destination log group.")
    parser.add_argument("--message", required=True, help="The log message.")
    parser.add_argument("--level", default="info", help="debug, info, warn or error. Default is info.")
    parser.add_argument("--attr", dest="attributes", action="append", default=[], type=parse_attribute,
                        help="An attribute as key=value. May be repeated.")
    parser.add_argument("--retention-days", type=int, default=None,
                        help="Retention to apply if the log group gets created.")
    parser.add_argument("--threshold", default="debug", help="Minimum level that is sent. Default is debug.")
    parser.add_argument("--stream-name", default="log-stream", help="Base log stream name. Default is log-stream.")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main function to parse arguments and send the event."""
    args = build_parser().parse_args(argv)
    attributes: List[Attribute] = args.attributes

    handler = CloudWatchHandler(
        create_logs_client(), level=Level.parse(args.threshold), stream_name=args.stream_name
    )
    target = LogTarget(args.log_group, args.retention_days)

    logger.info(f"Sending a {args.level.upper()} event to {args.log_group}...")
    try:
        logged = handler.log(target, Level.parse(args.level), args.message, attributes)
    except LogRelayError as e:
        print(f" FAILED\n {e}")
        return 1

    if not logged:
        print(f" SKIPPED\n {args.level.upper()} is below the handler threshold")
        return 0

    stream_name = handler.cache.created_streams[f"{args.log_group}/{args.stream_name}"]
    print(f" SUCCESS!\n\nWritten to {args.log_group} / {stream_name}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
