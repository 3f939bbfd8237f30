"""Command line entry: clean an STL mesh and save it as binary PLY."""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

from polyclean.mesh import Mesh, MeshReadError
from polyclean.stlreader import StlReader


def _prefixed(fname: str | Path, prefix: str) -> Path:
    path = Path(fname)
    return path.with_name(prefix + path.name)


def _read_for_demo(fname: str | Path) -> Mesh | None:
    """Read a text mesh; a missing file leaves the mesh empty, bad counts give None."""
    mesh = Mesh()
    try:
        mesh.read(fname)
    except MeshReadError:
        return None
    except OSError:
        pass
    return mesh


def merge_demo(fname: str | Path) -> bool:
    """Merge duplicate vertices of a text mesh and save it as ``merged_<name>``."""
    mesh = _read_for_demo(fname)
    if mesh is None:
        return False
    n_before = len(mesh.vertices)
    start = time.perf_counter()
    mesh.merge_dup_verts()
    elapsed_ms = int((time.perf_counter() - start) * 1000)
    print(
        f"Vertices merged from {n_before} to {len(mesh.vertices)} "
        f"; Time to merge = {elapsed_ms} ms"
    )
    mesh.write(_prefixed(fname, "merged_"))
    return True


def randomize_demo(fname: str | Path) -> bool:
    """Repeatedly scatter, merge and round a text mesh, saving every stage.

    For n = 2, 4, ..., 4096 the mesh is written as ``random_<n><name>`` after
    scattering and as ``merged_random_<n><name>`` after merging and rounding.
    """
    mesh = _read_for_demo(fname)
    if mesh is None:
        return False
    n_rand = 2
    while n_rand <= 4096:
        mesh.randomize_vertices(n_rand, 0.2)
        randomized = _prefixed(fname, f"random_{n_rand}")
        mesh.write(randomized)
        n_before = len(mesh.vertices)
        start = time.perf_counter()
        mesh.merge_dup_verts(0.5)
        elapsed_us = int((time.perf_counter() - start) * 1_000_000)
        mesh.round_values()
        print(
            f"Vertices merged from {n_before} to {len(mesh.vertices)} "
            f"; Time to merge = {elapsed_us}us"
        )
        mesh.write(_prefixed(randomized, "merged_"))
        n_rand *= 2
    return True


def main(argv: list[str] | None = None) -> int:
    """Read an STL file, merge duplicate vertices and write binary PLY."""
    parser = argparse.ArgumentParser(
        prog="polyclean", description="Merge duplicate vertices of an STL mesh."
    )
    parser.add_argument("input", nargs="?", default="Fairing.stl", help="binary STL file")
    parser.add_argument(
        "-o", "--output", default="Fairing-dedup-v.ply", help="binary PLY file to write"
    )
    parser.add_argument(
        "--tol", type=float, default=1.0e-6, help="merge distance (default: 1e-6)"
    )
    parser.add_argument(
        "--randomize-test",
        metavar="FILE",
        help="first run the scatter-and-merge check on a text mesh",
    )
    args = parser.parse_args(argv)

    if args.randomize_test is not None and not randomize_demo(args.randomize_test):
        print(f"error: randomize check failed for {args.randomize_test}", file=sys.stderr)
        return 1

    try:
        mesh = StlReader(args.input).make()
    except (OSError, MeshReadError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    print(f"num vertices - original = {len(mesh.vertices)}")
    mesh.merge_dup_verts(args.tol)
    print(f"num vertices - cleaned = {len(mesh.vertices)}")
    try:
        mesh.to_ply_bin(args.output)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())