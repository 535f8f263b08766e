import argparse
import json
import logging
import sys
import time
from typing import Any, List, Optional

from geofilter.di.container import Container
from geofilter.models.models import BoundingBox
from geofilter.utils.logging import setup_logging
from geofilter.workflows.geofilter import Geofilter

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="geofilter", description="Geohash proximity index backed by Redis"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    set_cmd = sub.add_parser("set", help="Place a user at a position")
    set_cmd.add_argument("user_id")
    set_cmd.add_argument("lat", type=float)
    set_cmd.add_argument("lon", type=float)
    set_cmd.add_argument("precision", type=int)
    set_cmd.add_argument(
        "--options", default="{}", help="JSON object stored with the user"
    )

    for name, help_text in [
        ("delete", "Remove a user"),
        ("get", "Show a user's record"),
    ]:
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("user_id")

    neighbors_cmd = sub.add_parser("neighbors", help="Users in the 3x3 block of a cell")
    neighbors_cmd.add_argument("cell_id")
    neighbors_cmd.add_argument("--full", action="store_true", help="Include records")

    bbox_cmd = sub.add_parser("bbox", help="Bounding box of a cell")
    bbox_cmd.add_argument("cell_id")
    bbox_cmd.add_argument("--3x3", dest="block", action="store_true")

    generate_cmd = sub.add_parser("generate", help="Create synthetic users around a cell")
    generate_cmd.add_argument("cell_id")
    generate_cmd.add_argument("--count", type=int, default=100)

    sub.add_parser("cleanup", help="Evict expired users once")
    sweep_cmd = sub.add_parser("sweep", help="Evict expired users periodically")
    sweep_cmd.add_argument("--interval", type=float, default=60.0, help="Seconds")
    sub.add_parser("flushall", help="Wipe every record")
    return parser


def _bbox_json(box: BoundingBox) -> Any:
    return {"top_left": list(box.top_left), "bottom_right": list(box.bottom_right)}


def dispatch(args: argparse.Namespace, geofilter: Geofilter) -> Any:
    if args.command == "set":
        return {"cell_id": geofilter.set(
            args.user_id, args.lat, args.lon, args.precision, json.loads(args.options)
        )}
    if args.command == "delete":
        return {"result": geofilter.delete(args.user_id).value}
    if args.command == "get":
        record = geofilter.get(args.user_id)
        return record.as_mapping() if record else None
    if args.command == "neighbors":
        if args.full:
            return [r.as_mapping() for r in geofilter.neighbors_full(args.cell_id)]
        return geofilter.neighbors(args.cell_id)
    if args.command == "bbox":
        box = geofilter.bbox_3x3(args.cell_id) if args.block else geofilter.bbox(args.cell_id)
        return _bbox_json(box)
    if args.command == "generate":
        return geofilter.load_generator.run({"cell_id": args.cell_id, "count": args.count})
    if args.command == "cleanup":
        return geofilter.expiry_sweeper.run()
    if args.command == "flushall":
        return {"flushed": bool(geofilter.flushall())}
    raise ValueError(f"Unknown command: {args.command}")


def sweep_forever(geofilter: Geofilter, interval: float):
    logger.info(f"Sweeping expired users every {interval}s")
    try:
        while True:
            geofilter.cleanup_expired()
            time.sleep(interval)
    except KeyboardInterrupt:
        logger.info("Sweeper stopped")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    container = Container()
    setup_logging(container.settings().log_level)
    container.init_resources()
    try:
        geofilter = container.geofilter()
        if args.command == "sweep":
            sweep_forever(geofilter, args.interval)
            return 0
        print(json.dumps(dispatch(args, geofilter)))
        geofilter.wait_for_writes()
        return 0
    finally:
        container.shutdown_resources()


if __name__ == "__main__":
    sys.exit(main())
