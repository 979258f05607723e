"""Terrain export — JSON payload of a terrain mesh for external renderers.

Functions
---------
- :func:`export_terrain_payload` — build the full export dict
- :func:`export_terrain_json` — write payload to a JSON file
- :func:`validate_terrain_payload` — lightweight structural check

:data:`TERRAIN_PAYLOAD_SCHEMA` is the formal JSON Schema (draft 7) for
use with ``jsonschema``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import numpy as np

from .colours import TerrainColourConfig, colours_from_elevation_feet
from .terrain import TerrainMesh

_EXPORT_VERSION = "1.0"

_VEC3 = {"type": "array", "items": {"type": "number"}, "minItems": 3, "maxItems": 3}
_INT3 = {"type": "array", "items": {"type": "integer", "minimum": 0}, "minItems": 3, "maxItems": 3}

TERRAIN_PAYLOAD_SCHEMA: Dict[str, Any] = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "terrasphere terrain mesh",
    "type": "object",
    "required": ["metadata", "stats", "vertices", "indices"],
    "properties": {
        "metadata": {
            "type": "object",
            "required": [
                "version", "seed", "subdivisions", "ocean_fraction",
                "sea_level_feet", "vertex_count", "face_count",
            ],
            "properties": {
                "version": {"type": "string"},
                "generator": {"type": "string"},
                "seed": {"type": "integer", "minimum": 0, "maximum": 2147483647},
                "subdivisions": {"type": "integer", "minimum": 0},
                "reference_subdivisions": {"type": ["integer", "null"]},
                "ocean_fraction": {"type": "number", "minimum": 0, "maximum": 1},
                "sea_level_feet": {"type": "number"},
                "vertex_count": {"type": "integer", "minimum": 12},
                "face_count": {"type": "integer", "minimum": 20},
                "config": {"type": "object"},
            },
        },
        "stats": {"type": "object"},
        "vertices": {
            "type": "array",
            "items": {"type": "array", "items": {"type": "number"}, "minItems": 4, "maxItems": 4},
        },
        "indices": {"type": "array", "items": _INT3},
        "normals": {"type": "array", "items": _VEC3},
        "colors": {"type": "array", "items": _VEC3},
    },
}


def _rounded(arr: np.ndarray, digits: int) -> List[Any]:
    return np.round(np.asarray(arr, dtype=np.float64), digits).tolist()


def export_terrain_payload(
    mesh: TerrainMesh,
    *,
    include_normals: bool = True,
    include_colours: bool = True,
    colour_config: Optional[TerrainColourConfig] = None,
) -> Dict[str, Any]:
    """Build a JSON-serialisable export of a terrain mesh.

    The returned dict has these top-level keys:

    ``metadata``
        Seed, subdivision levels, ocean fraction, sea level, counts and
        the terrain configuration.
    ``stats``
        :meth:`TerrainStats.as_dict`.
    ``vertices``
        ``[x, y, z, elevation_feet]`` per vertex (render-scaled positions).
    ``indices``
        ``[a, b, c]`` per triangle, outward winding.
    ``normals`` / ``colors``
        Optional per-vertex unit normals and unshaded RGB in ``[0, 1]``.

    Parameters
    ----------
    mesh : TerrainMesh
    include_normals, include_colours : bool
    colour_config : TerrainColourConfig, optional

    Returns
    -------
    dict
    """
    metadata = {
        "version": _EXPORT_VERSION,
        "generator": "terrasphere.export",
        "seed": int(mesh.seed),
        "subdivisions": int(mesh.subdivisions),
        "reference_subdivisions": mesh.distribution.subdivisions,
        "ocean_fraction": float(mesh.ocean_fraction),
        "sea_level_feet": round(float(mesh.sea_level_feet), 3),
        "vertex_count": int(mesh.positions.shape[0]),
        "face_count": int(mesh.indices.shape[0]),
        "config": mesh.config.to_dict(),
    }

    payload: Dict[str, Any] = {
        "metadata": metadata,
        "stats": mesh.stats.as_dict(),
        "vertices": _rounded(mesh.vertices, 6),
        "indices": np.asarray(mesh.indices, dtype=np.int64).tolist(),
    }
    if include_normals:
        payload["normals"] = _rounded(mesh.normals, 6)
    if include_colours:
        colours = colours_from_elevation_feet(mesh.elevation_feet, mesh.sea_level_feet, colour_config)
        payload["colors"] = _rounded(colours, 4)
    return payload


def export_terrain_json(
    mesh: TerrainMesh,
    path: Union[str, Path],
    *,
    include_normals: bool = True,
    include_colours: bool = True,
    indent: Optional[int] = None,
) -> Path:
    """Export a terrain mesh to a JSON file and return the path."""
    payload = export_terrain_payload(
        mesh, include_normals=include_normals, include_colours=include_colours,
    )
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(payload, indent=indent))
    return out


def validate_terrain_payload(payload: Dict[str, Any]) -> List[str]:
    """Validate a terrain export payload against expected structure.

    Returns a list of error messages (empty = valid).  This checks the
    keys and cross-counts; use :data:`TERRAIN_PAYLOAD_SCHEMA` with
    ``jsonschema`` for formal validation.
    """
    errors: List[str] = []

    for key in ("metadata", "stats", "vertices", "indices"):
        if key not in payload:
            errors.append(f"Missing top-level key: {key}")

    meta = payload.get("metadata", {})
    for key in ("version", "seed", "subdivisions", "ocean_fraction", "vertex_count", "face_count"):
        if key not in meta:
            errors.append(f"Missing metadata key: {key}")

    vertices = payload.get("vertices", [])
    if not isinstance(vertices, list):
        errors.append("'vertices' must be a list")
        vertices = []
    elif "vertex_count" in meta and len(vertices) != meta["vertex_count"]:
        errors.append(f"vertex_count mismatch: metadata says {meta['vertex_count']}, got {len(vertices)}")

    for i, v in enumerate(vertices):
        if not isinstance(v, list) or len(v) != 4:
            errors.append(f"Vertex {i}: must be [x, y, z, elevation_feet]")
            break

    indices = payload.get("indices", [])
    if not isinstance(indices, list):
        errors.append("'indices' must be a list")
    else:
        if "face_count" in meta and len(indices) != meta["face_count"]:
            errors.append(f"face_count mismatch: metadata says {meta['face_count']}, got {len(indices)}")
        n = len(vertices)
        for i, tri in enumerate(indices):
            if not isinstance(tri, list) or len(tri) != 3:
                errors.append(f"Face {i}: must be [a, b, c]")
                break
            if any(not 0 <= k < n for k in tri):
                errors.append(f"Face {i}: index out of range")
                break

    for key in ("normals", "colors"):
        if key in payload and len(payload[key]) != len(vertices):
            errors.append(f"'{key}' length {len(payload[key])} does not match {len(vertices)} vertices")

    return errors
