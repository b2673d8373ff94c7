"""Wavefront OBJ mesh loading.

Only geometry is read: ``v x y z [w]`` vertex lines and ``f`` face lines.
Face corners may carry texture and normal references (``1/2/3``, ``1//3``);
only the vertex index is used. Indices are 1-based, and negative indices
count back from the most recently read vertex. Polygons are triangulated as
a fan around their first corner. Every other directive is skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from os import PathLike

from lumen.geometry.mesh import Mesh

logger = logging.getLogger(__name__)


def _resolve_index(token: str, vertex_count: int, line_number: int) -> int:
    reference = token.split("/", 1)[0]
    try:
        index = int(reference)
    except ValueError as exc:
        raise ValueError(f"line {line_number}: invalid vertex reference {token!r}") from exc

    if index > 0:
        resolved = index - 1
    elif index < 0:
        resolved = vertex_count + index
    else:
        raise ValueError(f"line {line_number}: vertex index 0 is not valid")

    if not 0 <= resolved < vertex_count:
        raise ValueError(f"line {line_number}: vertex index {index} out of range ({vertex_count} vertices)")
    return resolved


def parse_obj(lines: Iterable[str]) -> Mesh:
    """Build a mesh from the lines of an OBJ file.

    Args:
        lines: OBJ source, one directive per line.

    Returns:
        The parsed mesh.

    Raises:
        ValueError: If a ``v`` or ``f`` line is malformed or a face references
            a vertex that does not exist.
    """
    mesh = Mesh()
    for line_number, raw in enumerate(lines, start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        tokens = line.split()
        directive = tokens[0]

        if directive == "v":
            if len(tokens) < 4:
                raise ValueError(f"line {line_number}: vertex needs three coordinates")
            try:
                position = [float(c) for c in tokens[1:4]]
            except ValueError as exc:
                raise ValueError(f"line {line_number}: invalid vertex coordinate") from exc
            mesh.add_vertex(position)

        elif directive == "f":
            if len(tokens) < 4:
                raise ValueError(f"line {line_number}: face needs at least three vertices")
            corners = [_resolve_index(t, mesh.vertex_count, line_number) for t in tokens[1:]]
            for k in range(1, len(corners) - 1):
                mesh.add_triangle(corners[0], corners[k], corners[k + 1])

    return mesh


def load_obj(path: str | PathLike[str]) -> Mesh | None:
    """Load a mesh from an OBJ file.

    Returns:
        The mesh, or None if the file cannot be read or is malformed.
    """
    try:
        with open(path, encoding="utf-8") as f:
            mesh = parse_obj(f)
    except (OSError, UnicodeDecodeError, ValueError) as exc:
        logger.warning("Failed to load OBJ %s: %s", path, exc)
        return None
    logger.debug("Loaded %s: %d vertices, %d triangles", path, mesh.vertex_count, mesh.triangle_count)
    return mesh
