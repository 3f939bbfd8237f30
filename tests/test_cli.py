import struct

from polyclean.cli import main, merge_demo, randomize_demo
from polyclean.mesh import Mesh


def _stl_bytes(triangles):
    data = b"\0" * 80 + struct.pack("<I", len(triangles))
    for tri in triangles:
        data += struct.pack("<3f", 0.0, 0.0, 1.0)
        for p in tri:
            data += struct.pack("<3f", *p)
        data += struct.pack("<H", 0)
    return data


TRIS = [
    ((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)),
    ((1.0, 0.0, 0.0), (1.0, 1.0, 0.0), (0.0, 1.0, 0.0)),
]

DUP_MESH = """# sample
4 2
0 0 0
1 0 0
0 1 0
1 0 0
0 1 2
3 1 2
"""


def test_merge_demo_writes_merged_mesh(tmp_path, capsys):
    src = tmp_path / "mesh.dat"
    src.write_text(DUP_MESH)
    assert merge_demo(src) is True
    merged = Mesh()
    merged.read(tmp_path / "merged_mesh.dat")
    assert [v.p for v in merged.vertices] == [(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)]
    assert [f.v for f in merged.faces] == [(0, 1, 2), (1, 1, 2)]
    assert "Vertices merged from 4 to 3" in capsys.readouterr().out


def test_merge_demo_rejects_short_file(tmp_path):
    src = tmp_path / "bad.dat"
    src.write_text("5 1\n0 0 0\n")
    assert merge_demo(src) is False
    assert not (tmp_path / "merged_bad.dat").exists()


def test_merge_demo_missing_file_writes_empty_mesh(tmp_path):
    src = tmp_path / "none.dat"
    assert merge_demo(src) is True
    merged = Mesh()
    merged.read(tmp_path / "merged_none.dat")
    assert merged.vertices == []
    assert merged.faces == []


def test_randomize_demo_restores_integer_vertex(tmp_path):
    src = tmp_path / "one.dat"
    src.write_text("1 0\n10 20 30\n")
    assert randomize_demo(src) is True
    for n in (2, 64, 4096):
        assert (tmp_path / f"random_{n}one.dat").exists()
        merged = Mesh()
        merged.read(tmp_path / f"merged_random_{n}one.dat")
        assert merged.vertices
        assert all(v.p == (10.0, 20.0, 30.0) for v in merged.vertices)


def test_randomize_demo_rejects_short_file(tmp_path):
    src = tmp_path / "bad.dat"
    src.write_text("2 0\n0 0 0\n")
    assert randomize_demo(src) is False


def test_main_cleans_stl_to_ply(tmp_path, capsys):
    stl = tmp_path / "part.stl"
    stl.write_bytes(_stl_bytes(TRIS))
    out = tmp_path / "part.ply"
    assert main([str(stl), "-o", str(out)]) == 0
    text = capsys.readouterr().out
    assert "num vertices - original = 6" in text
    assert "num vertices - cleaned = 4" in text
    data = out.read_bytes()
    assert data.startswith(b"ply\nformat binary_little_endian 1.0\n")
    assert b"element vertex 4\n" in data
    assert b"element face 2\n" in data


def test_main_missing_input_fails(tmp_path, capsys):
    code = main([str(tmp_path / "absent.stl"), "-o", str(tmp_path / "x.ply")])
    assert code == 1
    assert "error" in capsys.readouterr().err
    assert not (tmp_path / "x.ply").exists()


def test_main_randomize_failure_stops(tmp_path):
    bad = tmp_path / "bad.dat"
    bad.write_text("3 0\n")
    stl = tmp_path / "part.stl"
    stl.write_bytes(_stl_bytes(TRIS))
    out = tmp_path / "out.ply"
    assert main([str(stl), "-o", str(out), "--randomize-test", str(bad)]) == 1
    assert not out.exists()