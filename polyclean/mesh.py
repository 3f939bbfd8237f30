"""Triangle meshes: text I/O, OBJ/PLY export and duplicate-vertex merging."""

from __future__ import annotations

import logging
import math
import random
import re
import struct
import time
from dataclasses import dataclass, field
from itertools import islice
from os import PathLike
from typing import Callable, Iterable, Sequence, Union

_log = logging.getLogger(__name__)

Point = tuple[float, float, float]
PathArg = Union[str, "PathLike[str]"]

_F32 = struct.Struct("<f")
_PLY_VERTEX = struct.Struct("<fff")
_PLY_FACE = struct.Struct("<BIII")

_FLOAT_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_INT_RE = re.compile(r"[+-]?\d+")


def _f32(value: float) -> float:
    """Round a Python float to the nearest single-precision value."""
    try:
        return _F32.unpack(_F32.pack(value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _c_round(value: float) -> float:
    """Round half away from zero."""
    if not math.isfinite(value):
        return value
    return math.copysign(math.floor(abs(value) + 0.5), value)


def _dist2(p: Sequence[float], q: Sequence[float]) -> float:
    return sum((a - b) ** 2 for a, b in zip(p, q))


@dataclass
class Vertex:
    """A mesh vertex; coordinates are stored with single precision."""

    p: Point = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        coords = tuple(_f32(float(c)) for c in self.p)
        if len(coords) != 3:
            raise ValueError(f"a vertex needs 3 coordinates, got {len(coords)}")
        self.p = coords


@dataclass
class Face:
    """A triangle given by three vertex indices."""

    v: tuple[int, int, int]

    def __post_init__(self) -> None:
        indices = tuple(int(i) for i in self.v)
        if len(indices) != 3:
            raise ValueError(f"a face needs 3 indices, got {len(indices)}")
        self.v = indices


class GridHash:
    """Uniform spatial grid mapping cells to the indices of points inside them."""

    def __init__(self, cell: float) -> None:
        self.cell = float(cell)
        self.buckets: dict[tuple[int, int, int], list[int]] = {}

    def _cell_of(self, p: Sequence[float]) -> tuple[int, int, int]:
        x, y, z = (math.floor(c / self.cell) for c in p)
        return x, y, z

    def insert(self, p: Sequence[float], idx: int) -> None:
        """Record that point ``idx`` lies at ``p``."""
        self.buckets.setdefault(self._cell_of(p), []).append(idx)

    def neighbors(self, p: Sequence[float]) -> list[int]:
        """Indices stored in the 3x3x3 block of cells around ``p``."""
        cx, cy, cz = self._cell_of(p)
        found: list[int] = []
        for dz in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    found.extend(self.buckets.get((cx + dx, cy + dy, cz + dz), ()))
        return found


def consolidate(vertices: Sequence[Vertex], eps: float) -> tuple[list[Vertex], list[int]]:
    """Merge vertices closer than ``eps``.

    Returns the merged vertices and, for every input vertex, the index of the
    merged vertex that represents it. The first vertex of a cluster is kept.
    """
    grid = GridHash(max(1e-12, eps))
    eps2 = eps * eps
    merged: list[Vertex] = []
    old2new: list[int] = []
    for i, vertex in enumerate(vertices):
        p = vertex.p
        match = next(
            (
                old2new[j]
                for j in grid.neighbors(p)
                if _dist2(p, merged[old2new[j]].p) <= eps2
            ),
            None,
        )
        if match is None:
            match = len(merged)
            merged.append(Vertex(p))
        old2new.append(match)
        grid.insert(p, i)
    return merged, old2new


def uniform_gen(
    num_samples: int,
    ctr: Sequence[float],
    half_side: float,
    rng: random.Random | None = None,
) -> list[Point]:
    """Sample points uniformly from the cube of half-side ``half_side`` around ``ctr``."""
    rng = rng if rng is not None else random.Random()
    return [
        tuple(_f32(rng.uniform(c - half_side, c + half_side)) for c in ctr)
        for _ in range(num_samples)
    ]


class MeshReadError(ValueError):
    """Raised when a mesh file holds fewer vertices or faces than it declares."""


def _parse_numbers(
    line: str, count: int, pattern: re.Pattern[str], conv: Callable[[str], float]
) -> list:
    """Read up to ``count`` leading numbers; values that cannot be read are 0."""
    values: list = []
    for token in line.split()[:count]:
        m = pattern.match(token)
        if m is None:
            break
        values.append(conv(m.group()))
        if m.end() != len(token):
            break
    return values + [0] * (count - len(values))


def _data_lines(lines: Iterable[str]):
    for line in lines:
        line = line.rstrip("\n")
        if line and not line.startswith("#"):
            yield line


@dataclass
class Mesh:
    """A triangle mesh made of vertices and index-triangles."""

    vertices: list[Vertex] = field(default_factory=list)
    faces: list[Face] = field(default_factory=list)

    def read(self, filename: PathArg) -> None:
        """Load vertex and face data from a text mesh file, replacing the current data.

        Raises OSError if the file cannot be opened and MeshReadError if it
        holds fewer vertices or faces than its header declares.
        """
        self.vertices = []
        self.faces = []
        with open(filename, encoding="utf-8") as fin:
            data = _data_lines(fin)
            header = next(data, None)
            n_vertices, n_faces = (
                _parse_numbers(header, 2, _INT_RE, int) if header is not None else (0, 0)
            )
            self.vertices = [
                Vertex(tuple(_parse_numbers(line, 3, _FLOAT_RE, float)))
                for line in islice(data, max(n_vertices, 0))
            ]
            if len(self.vertices) != n_vertices:
                raise MeshReadError(
                    f"{filename}: expected {n_vertices} vertices, read {len(self.vertices)}"
                )
            self.faces = [
                Face(tuple(i & 0xFFFFFFFF for i in _parse_numbers(line, 3, _INT_RE, int)))
                for line in islice(data, max(n_faces, 0))
            ]
            if len(self.faces) != n_faces:
                raise MeshReadError(
                    f"{filename}: expected {n_faces} faces, read {len(self.faces)}"
                )

    def write(self, filename: PathArg) -> None:
        """Save the mesh in the text format accepted by :meth:`read`."""
        with open(filename, "w", encoding="utf-8", newline="\n") as fout:
            fout.write("# Cleaned mesh\n")
            fout.write(f"{len(self.vertices)} {len(self.faces)}\n")
            fout.write("# Vertices\n")
            for v in self.vertices:
                fout.write(" ".join(f"{c:g}" for c in v.p) + "\n")
            fout.write("# Faces\n")
            for f in self.faces:
                fout.write(" ".join(str(i) for i in f.v) + "\n")

    def to_obj(self, filename: PathArg) -> None:
        """Export the mesh as a Wavefront OBJ file (1-based face indices)."""
        with open(filename, "w", encoding="utf-8", newline="\n") as out:
            for v in self.vertices:
                out.write("v " + " ".join(f"{c:g}" for c in v.p) + "\n")
            for f in self.faces:
                out.write("f " + " ".join(str(i + 1) for i in f.v) + "\n")

    def to_ply_bin(self, filename: PathArg) -> None:
        """Export the mesh as a little-endian binary PLY file."""
        header = (
            "ply\n"
            "format binary_little_endian 1.0\n"
            "comment generated by my triangulation tool\n"
            f"element vertex {len(self.vertices)}\n"
            "property float x\n"
            "property float y\n"
            "property float z\n"
            f"element face {len(self.faces)}\n"
            "property list uchar int vertex_indices\n"
            "end_header\n"
        )
        with open(filename, "wb") as out:
            out.write(header.encode("ascii"))
            for v in self.vertices:
                out.write(_PLY_VERTEX.pack(*v.p))
            for f in self.faces:
                out.write(_PLY_FACE.pack(3, *(i & 0xFFFFFFFF for i in f.v)))

    def merge_dup_verts(self, tol: float = 1.0e-10) -> int:
        """Merge vertices within ``tol`` of each other and reindex faces.

        Returns the number of vertices left.
        """
        start = time.perf_counter()
        merged, old2new = consolidate(self.vertices, tol)
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        _log.debug("Time to merge duplicate vertices = %.0f ms", elapsed_ms)
        self.vertices = merged
        self.faces = [Face(tuple(old2new[i] for i in f.v)) for f in self.faces]
        return len(merged)

    def randomize_vertices(
        self,
        num_per_vtx: int,
        half_len: float = 0.001,
        rng: random.Random | None = None,
    ) -> None:
        """Replace each vertex by ``num_per_vtx`` random points in a cube around it."""
        rng = rng if rng is not None else random.Random()
        self.vertices = [
            Vertex(p)
            for v in self.vertices
            for p in uniform_gen(num_per_vtx, v.p, half_len, rng)
        ]

    def round_values(self, digits: int = 0) -> None:
        """Round coordinates to integers, zeroing those below ``10**-digits`` in size."""
        threshold = 10.0 ** -digits

        def snap(c: float) -> float:
            r = _c_round(c)
            return 0.0 if abs(r) < threshold else r

        self.vertices = [Vertex(tuple(snap(c) for c in v.p)) for v in self.vertices]