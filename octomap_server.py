"""Serve a 3D OctoMap: binary map and per-level cube markers, built once from a .bt file."""

import argparse
import logging
import sys

from config import ServerConfig, parse_color
from logging_config import setup_logging
from map_server import MapServer
from octree import MapLoadError
from snapshot import save_snapshot

logger = logging.getLogger("octomap_server")


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="octomap-server", description=__doc__)
    p.add_argument("map_file", help="octomap 3D map file to read (.bt)")
    p.add_argument("--frame-id", default=None, help="frame the map is expressed in")
    p.add_argument("--no-height-map", dest="height_map", action="store_false", default=None,
                   help="color every cell with --color instead of by height")
    p.add_argument("--color-factor", type=float, default=None,
                   help="span of the hue sweep used for height coloring")
    p.add_argument("--color", type=parse_color, default=None, metavar="R,G,B,A",
                   help="fixed cell color, channels in [0, 1]")
    p.add_argument("--output", default=None, metavar="DIR",
                   help="also write the binary map and markers to DIR")
    p.add_argument("--plot", action="store_true", help="show a 3D preview of the markers")
    p.add_argument("--log-level", default=None)
    p.add_argument("--log-file", default=None)
    return p


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    setup_logging(level=args.log_level, log_file=args.log_file)

    try:
        config = ServerConfig.from_env().with_overrides(
            frame_id=args.frame_id,
            use_height_map=args.height_map,
            color_factor=args.color_factor,
            fixed_color=args.color,
        )
        server = MapServer.from_file(args.map_file, config)
    except (MapLoadError, ValueError) as e:
        logger.error("map_server exception: %s", e)
        return 1

    server.publish_latched(
        lambda binary_map: logger.info("Published binary map (%d bytes, frame %s)",
                                       len(binary_map.data), binary_map.frame_id),
        lambda markers: logger.info("Published %d marker levels, %d non-empty",
                                    len(markers), sum(1 for m in markers if len(m.points))),
    )

    if args.output:
        save_snapshot(server.get(), args.output)
    if args.plot:
        from utils import show_markers
        show_markers(server.get_markers(), title=args.map_file)
    return 0


if __name__ == "__main__":
    sys.exit(main())
