"""Dataset loading: discovers available datasets and loads edges and timestamps.

Layout on disk (relative to the data directory):

    config.json
    <region>/<season>/<season>-<region>-resi<level>_timestamps.json
    <region>/<season>/<season>-<region>-resi<level>_down_edges.json
    <region>/<season>/<season>-<region>-resi<level>_non_resil_edges.json

Every record is validated against the pydantic models before it reaches the
graph builder.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from keygraph.models import Dataset, DatasetIndex, DatasetKey, RawEdge

logger = logging.getLogger(__name__)

INDEX_FILE = "config.json"

_EDGE_LIST = TypeAdapter(list[RawEdge])
_SLUG_MAPPING = TypeAdapter(dict[str, str])


class DataLoadError(Exception):
    """A dataset file is missing, unreadable, or does not match its schema."""


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise DataLoadError(f"Missing data file: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DataLoadError(f"Unreadable data file {path}: {exc}") from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"Invalid JSON in {path}: {exc}") from exc


def load_dataset_index(data_dir: Path) -> DatasetIndex:
    """Read config.json listing the available regions, seasons and key levels."""
    path = data_dir / INDEX_FILE
    try:
        return DatasetIndex.model_validate(_read_json(path))
    except ValidationError as exc:
        raise DataLoadError(f"Invalid dataset index {path}: {exc}") from exc


def list_datasets(index: DatasetIndex) -> list[DatasetKey]:
    keys = []
    for region in index.regions:
        for season in index.seasons.get(region, []):
            for level in index.levels_for(region, season):
                keys.append(DatasetKey(region=region, season=season, level=level))
    return keys


def resolve_dataset_key(
    index: DatasetIndex,
    region: str | None = None,
    season: str | None = None,
    level: int | None = None,
) -> DatasetKey | None:
    """Fill unspecified parts of a dataset selection with the first available option.

    With no selection at all this is the default dataset: first region, its
    first season, and that pair's first key level.
    """
    region = region or (index.regions[0] if index.regions else None)
    if region is None:
        return None
    seasons = index.seasons.get(region, [])
    season = season or (seasons[0] if seasons else None)
    if season is None:
        return None
    if level is None:
        levels = index.levels_for(region, season)
        if not levels:
            return None
        level = levels[0]
    return DatasetKey(region=region, season=season, level=level)


def dataset_paths(data_dir: Path, key: DatasetKey) -> dict[str, Path]:
    base = data_dir / key.region / key.season
    return {
        "timestamps": base / f"{key.prefix}_timestamps.json",
        "resil_edges": base / f"{key.prefix}_down_edges.json",
        "non_resil_edges": base / f"{key.prefix}_non_resil_edges.json",
    }


def load_edges(path: Path) -> list[RawEdge]:
    try:
        return _EDGE_LIST.validate_python(_read_json(path))
    except ValidationError as exc:
        raise DataLoadError(f"Invalid edge list {path}: {exc}") from exc


def load_dataset(data_dir: Path, key: DatasetKey) -> Dataset:
    """Load timestamps and both edge collections for one dataset."""
    paths = dataset_paths(data_dir, key)
    logger.info("Loading dataset %s from %s", key, paths["timestamps"].parent)

    raw_timestamps = _read_json(paths["timestamps"])
    resil_edges = load_edges(paths["resil_edges"])
    non_resil_edges = load_edges(paths["non_resil_edges"])

    try:
        dataset = Dataset(
            key=key,
            timestamps=raw_timestamps,
            resil_edges=resil_edges,
            non_resil_edges=non_resil_edges,
        )
    except ValidationError as exc:
        raise DataLoadError(f"Invalid timestamps {paths['timestamps']}: {exc}") from exc

    logger.info(
        "Dataset %s: %d timestamps, %d resilient edges, %d non-resilient edges",
        key, len(dataset.timestamps), len(dataset.resil_edges), len(dataset.non_resil_edges),
    )
    return dataset


def load_slug_mapping(path: Path) -> dict[str, str]:
    """Realm slug -> realm display name. Empty mapping if the file is absent."""
    if not path.exists():
        logger.warning("Slug mapping not found at %s; realm names fall back to slugs", path)
        return {}
    try:
        return _SLUG_MAPPING.validate_python(_read_json(path))
    except ValidationError as exc:
        raise DataLoadError(f"Invalid slug mapping {path}: {exc}") from exc
