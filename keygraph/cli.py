"""CLI entry point for the key graph visualizer."""

import argparse
import logging
import sys
from pathlib import Path

from keygraph.config import Config, load_config
from keygraph.ingest import (
    DataLoadError,
    list_datasets,
    load_dataset,
    load_dataset_index,
    load_slug_mapping,
    resolve_dataset_key,
)
from keygraph.models import CycleDetected, Dataset
from keygraph.picker import Viewport
from keygraph.search import run_url
from keygraph.session import GraphSession

logger = logging.getLogger(__name__)


def _add_dataset_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--region", help="Region (default: first available)")
    parser.add_argument("--season", help="Season (default: first available for region)")
    parser.add_argument("--level", type=int, help="Key level (default: first available)")
    parser.add_argument(
        "--non-resil", action="store_true",
        help="Also follow non-resilient edges downward from the character",
    )


def _load_selected_dataset(args: argparse.Namespace, config: Config) -> Dataset:
    data_dir = config.resolved_data_dir
    index = load_dataset_index(data_dir)
    key = resolve_dataset_key(index, args.region, args.season, args.level)
    if key is None:
        raise DataLoadError(f"No datasets available in {data_dir}")
    return load_dataset(data_dir, key)


def _open_session(args: argparse.Namespace, config: Config, width: float = 0.0, height: float = 0.0) -> GraphSession:
    """Load data and search for the requested character."""
    session = GraphSession(config, width=width, height=height)
    session.include_non_resil = args.non_resil
    session.set_dataset(_load_selected_dataset(args, config))
    session.search(args.character, load_slug_mapping(config.resolved_slug_mapping))
    return session


def _report_failure(session: GraphSession) -> bool:
    """Print why no graph is available. Returns True if there was a failure."""
    if session.notice:
        print(session.notice)
        return True
    if session.graph is None:
        print("No character given.")
        return True
    return False


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Resilient key graph visualizer")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("--config", type=Path, default=None, help="Path to config.yaml")
    sub = parser.add_subparsers(dest="command")

    # configs command
    configs_parser = sub.add_parser("configs", help="List available datasets")
    configs_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    # graph command
    graph_parser = sub.add_parser("graph", help="Build and lay out the graph around a character")
    graph_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    graph_parser.add_argument("character", help="Name-Realm or raider.io character link")
    _add_dataset_args(graph_parser)
    graph_parser.add_argument(
        "--output", type=Path, default=None,
        help="Write a PNG rendering of the graph to this path",
    )

    # pick command
    pick_parser = sub.add_parser("pick", help="Report the edge under a screen point")
    pick_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    pick_parser.add_argument("character", help="Name-Realm or raider.io character link")
    pick_parser.add_argument("x", type=float, help="Screen x in pixels")
    pick_parser.add_argument("y", type=float, help="Screen y in pixels")
    _add_dataset_args(pick_parser)
    pick_parser.add_argument("--zoom", type=float, default=1.0)
    pick_parser.add_argument("--pan-x", type=float, default=0.0)
    pick_parser.add_argument("--pan-y", type=float, default=0.0)
    pick_parser.add_argument("--width", type=float, default=None, help="Viewport width (default: render.width)")
    pick_parser.add_argument("--height", type=float, default=None, help="Viewport height (default: render.height)")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = load_config(args.config)

    try:
        if args.command == "configs":
            index = load_dataset_index(config.resolved_data_dir)
            keys = list_datasets(index)
            if not keys:
                print("No datasets available.")
                return
            for key in keys:
                print(f"  {key.region}  {key.season}  +{key.level}")

        elif args.command == "graph":
            session = _open_session(args, config)
            if _report_failure(session):
                sys.exit(1)
            graph = session.graph
            print(f"Graph for {graph.target}: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
            for depth, layer in enumerate(graph.layers):
                print(f"  [{depth}] " + ", ".join(layer))

            if args.output:
                from keygraph.output.render import save_graph_image

                path = save_graph_image(graph, session.dataset.timestamps, args.output, config)
                print(f"Output: {path}")

        elif args.command == "pick":
            picker = config.picker
            if not picker.min_zoom <= args.zoom <= picker.max_zoom:
                pick_parser.error(f"--zoom must be between {picker.min_zoom} and {picker.max_zoom}")
            session = _open_session(
                args, config,
                width=args.width or config.render.width,
                height=args.height or config.render.height,
            )
            if _report_failure(session):
                sys.exit(1)
            session.viewport = Viewport(
                width=session.viewport.width,
                height=session.viewport.height,
                pan=(args.pan_x, args.pan_y),
                zoom=args.zoom,
            )
            edge = session.pointer_move((args.x, args.y))
            if edge is None:
                print("No edge under pointer.")
                return
            print(f"{edge.source} --[{edge.kind.value}]--> {edge.target}")
            if edge.labels:
                print(f"Runs ({len(edge.labels)}):")
                season = session.dataset.key.season
                for run_id in edge.labels:
                    print(f"  {run_id}  {run_url(run_id, season)}")

        else:
            parser.print_help()
    except DataLoadError as exc:
        logger.error("%s", exc)
        sys.exit(1)


if __name__ == "__main__":
    main()
