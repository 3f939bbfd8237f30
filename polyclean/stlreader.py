"""Mesh factories; reading binary STL files into a :class:`Mesh`."""

from __future__ import annotations

import logging
import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from os import PathLike
from typing import Union

from polyclean.mesh import Face, Mesh, MeshReadError, Point, Vertex

_log = logging.getLogger(__name__)

PathArg = Union[str, "PathLike[str]"]

_HEADER_SIZE = 80
_COUNT = struct.Struct("<I")
_RECORD = struct.Struct("<12fH")


class MeshFactory(ABC):
    """Something that builds a :class:`Mesh`."""

    @abstractmethod
    def make(self) -> Mesh:
        """Build and return a mesh."""


@dataclass(frozen=True)
class TriangleRecord:
    """One triangle record of a binary STL file."""

    normal: Point
    v: tuple[Point, Point, Point]
    attr: int = 0


def _unpack_record(buf: bytes) -> TriangleRecord:
    values = _RECORD.unpack(buf)
    return TriangleRecord(
        normal=tuple(values[0:3]),
        v=(tuple(values[3:6]), tuple(values[6:9]), tuple(values[9:12])),
        attr=values[12],
    )


class StlReader(MeshFactory):
    """Builds a mesh from a binary STL file.

    Every triangle contributes three fresh vertices; shared corners are not
    merged here (see :meth:`Mesh.merge_dup_verts`).
    """

    def __init__(self, fname: PathArg) -> None:
        self.fname = fname

    def make(self) -> Mesh:
        """Read the file and return its triangles as a mesh.

        Raises OSError if the file cannot be opened and MeshReadError if it
        is truncated.
        """
        with open(self.fname, "rb") as fin:
            header = fin.read(_HEADER_SIZE)
            if len(header) < _HEADER_SIZE:
                raise MeshReadError(f"{self.fname}: File too short for STL header.")
            raw_count = fin.read(_COUNT.size)
            if len(raw_count) < _COUNT.size:
                raise MeshReadError(f"{self.fname}: File too short for triangle count.")
            (num_tris,) = _COUNT.unpack(raw_count)
            _log.debug("num triangles = %d", num_tris)

            mesh = Mesh()
            for it in range(num_tris):
                buf = fin.read(_RECORD.size)
                if len(buf) < _RECORD.size:
                    raise MeshReadError(f"{self.fname}: Unexpected EOF at triangle {it}")
                record = _unpack_record(buf)
                mesh.vertices.extend(Vertex(p) for p in record.v)
                mesh.faces.append(Face((3 * it, 3 * it + 1, 3 * it + 2)))
        return mesh