# polyclean

polyclean reads a triangle mesh and merges vertices that lie within a small distance of each other. It then writes the result as binary PLY, Wavefront OBJ or a simple text format.

A binary STL file gives every triangle its own three corner points. When polyclean merges the shared corners, the result is an indexed mesh with far fewer vertices.

polyclean has no dependencies outside the Python standard library.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install ".[test]"
```

## Command line

```
polyclean [INPUT] [-o OUTPUT] [--tol TOL] [--randomize-test FILE]
```

The command runs in three steps:

1. It reads the binary STL file `INPUT`. The default is `Fairing.stl`.
2. It merges vertices that are within `--tol` of each other. The default is `1e-6`.
3. It writes the cleaned mesh as little-endian binary PLY to `OUTPUT`. The default is `Fairing-dedup-v.ply`.

It prints the vertex count before and after the merge. If a file cannot be read or written, it prints an error and exits with status 1.

`--randomize-test FILE` runs a stress check before the normal run, using a mesh in the text format. The check does the following for n = 2, 4, …, 4096:

1. It replaces each vertex with n random points inside a cube of half-side 0.2 around it.
2. It saves the scattered mesh as `random_<n><name>`.
3. It merges vertices with tolerance 0.5 and rounds the coordinates.
4. It saves the result as `merged_random_<n><name>`.

Run `polyclean --help` to see the options.

## Library use

```python
from polyclean.stlreader import StlReader

mesh = StlReader("part.stl").make()
print(len(mesh.vertices))
mesh.merge_dup_verts(1e-6)
print(len(mesh.vertices))
mesh.to_ply_bin("part-dedup.ply")
mesh.to_obj("part-dedup.obj")
```

### `polyclean.mesh`

- `Mesh` is a dataclass with two lists: `vertices` (of `Vertex`) and `faces` (of `Face`).
  - `read(filename)` loads the text format and replaces the current data. The file starts with a line holding the vertex and face counts. Vertex lines and face lines follow. Empty lines and lines starting with `#` are skipped. `read` raises `OSError` if the file cannot be opened. It raises `MeshReadError`, a subclass of `ValueError`, if the file has fewer vertices or faces than it declares.
  - `write(filename)` saves the mesh in the same text format.
  - `to_obj(filename)` exports Wavefront OBJ with 1-based face indices.
  - `to_ply_bin(filename)` exports binary little-endian PLY. Each vertex is written as three floats, and each face as a list of three ints.
  - `merge_dup_verts(tol=1e-10)` merges vertices that are within `tol` of each other. It renumbers the faces to match and returns the new vertex count. The first vertex of each cluster is the one kept.
  - `randomize_vertices(num_per_vtx, half_len=0.001, rng=None)` replaces each vertex with uniformly random points in a cube around it. You can pass a `random.Random` as `rng` to get repeatable results.
  - `round_values(digits=0)` rounds coordinates to whole numbers, with halves rounded away from zero. Any result smaller in size than `10**-digits` becomes 0.
- `Vertex` holds a point `p`. Its coordinates are stored at single precision. `Face` holds three vertex indices `v`.
- `consolidate(vertices, eps)` does the merging. It returns the merged vertices and a list that maps each old index to its new index. It uses `GridHash`, a uniform spatial grid, so that the merge stays close to linear time.
- `uniform_gen(num_samples, ctr, half_side, rng=None)` samples points uniformly from a cube.

The time each merge takes is logged at debug level through the `logging` module.

### `polyclean.stlreader`

- `StlReader(fname).make()` reads a binary STL file into a `Mesh`. Each triangle gets three new vertices, so call `merge_dup_verts` afterwards to join shared corners. `make()` raises `OSError` if the file cannot be opened. It raises `MeshReadError` if the header, the triangle count or any triangle record is cut short.
- `MeshFactory` is the abstract base class for mesh builders.
- `TriangleRecord` holds the normal, the three corners and the attribute word of one STL triangle.

## Limitations

- STL input must be binary. polyclean does not read ASCII STL.
- polyclean cannot read OBJ or PLY files. It only writes them.
- The command line always writes binary PLY. To get OBJ or text output, use the library.