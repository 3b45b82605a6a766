#!/usr/bin/env python3
"""Sample notification harness for end-to-end validation.

Fires STARTED, COMPLETED and FINALIZED notifications for a build descriptor
at a capture server on 127.0.0.1, then prints what was sent and what the
server received. No external network access is needed.

Usage:
    # Fixture build, JSON and XML endpoints
    python scripts/run_sample_notification.py

    # Custom descriptor and log excerpt size
    python scripts/run_sample_notification.py --build my-build.yaml --loglines 20
"""

import argparse
import sys
import threading
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from build_notifier.config.models import NotifierConfig
from build_notifier.domain.host import StreamLogSink, load_build_descriptor
from build_notifier.domain.models import Phase
from build_notifier.logging.config import configure_logging
from build_notifier.notifications.service import NotificationService


class CaptureHandler(BaseHTTPRequestHandler):
    def do_POST(self):
        body = self.rfile.read(int(self.headers.get("Content-Length", 0)))
        self.server.received.append((self.path, self.headers.get("Content-Type"), body))
        self.send_response(204)
        self.end_headers()

    def log_message(self, format, *args):
        pass


def print_header(title: str):
    """Print a formatted section header."""
    width = 80
    print("\n" + "=" * width)
    print(f" {title}")
    print("=" * width + "\n")


def print_summary_table(rows):
    """Print phase/endpoint/status rows as a table."""
    print_header("Notification Summary")

    widths = [max(len(str(row[i])) for row in rows) for i in range(len(rows[0]))]
    border = "─┼─".join("─" * w for w in widths)

    for index, row in enumerate(rows):
        print(" │ ".join(f"{str(cell):<{w}}" for cell, w in zip(row, widths)))
        if index == 0:
            print(border)


def main():
    """Main entry point for the sample notification harness."""
    parser = argparse.ArgumentParser(
        description="Send sample build notifications to a local capture server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--build",
        type=Path,
        default=Path("tests/fixtures/build.yaml"),
        help="Build descriptor (default: tests/fixtures/build.yaml)",
    )
    parser.add_argument(
        "--loglines",
        type=int,
        default=5,
        help="Console lines to include (default: 5, -1 for the full log)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (default: WARNING)",
    )
    args = parser.parse_args()

    load_dotenv()
    configure_logging(level=args.log_level, format_type="key-value", environment="validation")

    print_header("Build Notifier - Sample Notification Harness")
    print(f"Build descriptor: {args.build}")

    if not args.build.exists():
        print(f"\n❌ Error: Build descriptor not found: {args.build}")
        return 1

    build = load_build_descriptor(args.build)

    server = ThreadingHTTPServer(("127.0.0.1", 0), CaptureHandler)
    server.received = []
    threading.Thread(target=server.serve_forever, daemon=True).start()
    base = f"http://127.0.0.1:{server.server_address[1]}"
    print(f"Capture server: {base}")

    config = NotifierConfig.model_validate(
        {
            "root_url": "http://ci.example.com/",
            "jobs": {
                build.job.name: [
                    {"url": base + "/json/${BUILD_NUMBER}", "json": True, "loglines": args.loglines},
                    {"url": base + "/xml/${BUILD_NUMBER}", "format": "XML", "event": "completed"},
                ]
            },
        }
    )
    service = NotificationService.from_config(config)
    sink = StreamLogSink(sys.stdout)

    rows = [("Phase", "Endpoint", "Status", "Error")]
    try:
        print_header("Build Console")
        for phase in Phase:
            for result in service.handle(phase, build, sink):
                rows.append((phase.value, result.endpoint, result.status, result.error or ""))
    finally:
        server.shutdown()
        server.server_close()

    print_summary_table(rows)

    print_header("Received Payloads")
    for path, content_type, body in server.received:
        print(f"POST {path} (Content-Type: {content_type or '-'})")
        print(body.decode("utf-8"))
        print()

    return 1 if any(row[2] == "failed" for row in rows[1:]) else 0


if __name__ == "__main__":
    sys.exit(main())
