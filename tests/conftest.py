"""Shared test fixtures for keygraph tests."""

import json

import pytest

from keygraph.config import Config, DataConfig
from keygraph.models import RawEdge


def _edge(source: str, target: str, *labels: str) -> RawEdge:
    return RawEdge(source=source, target=target, labels=labels)


@pytest.fixture()
def config(tmp_path):
    """Default config pointed at a temp data directory."""
    return Config(
        data=DataConfig(
            data_dir=str(tmp_path / "data"),
            slug_mapping=str(tmp_path / "slug_mapping.json"),
        ),
    )


@pytest.fixture()
def ladder_edges():
    """Resilient and non-resilient edges around Thrall-Draenor.

    Resilient:      Jaina -> Thrall -> Sylvanas -> Anduin
                    Rexxar -> Thrall
    Non-resilient:  Varian -> Thrall      (lands on the focal node)
                    Sylvanas -> Malfurion (downward only with the toggle)
                    Illidan -> Varian     (upward through a non-resilient edge)
                    Tyrande -> Gul'dan    (unrelated)
    """
    resil = [
        _edge("Jaina-Proudmoore", "Thrall-Draenor", "1001"),
        _edge("Thrall-Draenor", "Sylvanas-Silvermoon", "1002", "1003"),
        _edge("Sylvanas-Silvermoon", "Anduin-Stormrage", "1004"),
        _edge("Rexxar-Draenor", "Thrall-Draenor", "1005"),
    ]
    non_resil = [
        _edge("Varian-Stormrage", "Thrall-Draenor", "2001"),
        _edge("Sylvanas-Silvermoon", "Malfurion-Kazzak", "2002"),
        _edge("Illidan-Kazzak", "Varian-Stormrage", "2003"),
        _edge("Tyrande-Kazzak", "Guldan-Kazzak", "2004"),
    ]
    return resil, non_resil


def _write(path, payload):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload))


@pytest.fixture()
def data_dir(config, ladder_edges):
    """Data directory with one eu/tww-season2/+12 dataset and a slug mapping."""
    root = config.resolved_data_dir
    resil, non_resil = ladder_edges

    _write(root / "config.json", {
        "regions": ["eu", "us"],
        "seasons": {"eu": ["tww-season2", "tww-season3"], "us": ["tww-season2"]},
        "keyLevels": {"eu-tww-season2": [12, 14], "eu-tww-season3": [10], "us-tww-season2": [12]},
    })

    base = root / "eu" / "tww-season2"
    prefix = "tww-season2-eu-resi12"
    _write(base / f"{prefix}_timestamps.json", {
        "Jaina-Proudmoore": "2025-03-01T10:00:00Z",
        "Thrall-Draenor": "2025-03-05T10:00:00Z",
        "Sylvanas-Silvermoon": "2025-03-09T10:00:00Z",
    })
    _write(base / f"{prefix}_down_edges.json", [e.model_dump(mode="json") for e in resil])
    _write(base / f"{prefix}_non_resil_edges.json", [e.model_dump(mode="json") for e in non_resil])

    _write(config.resolved_slug_mapping, {"draenor": "Draenor", "argent-dawn": "Argent Dawn"})
    return root
