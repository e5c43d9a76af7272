import tempfile
import unittest
from pathlib import Path

import numpy as np

from meshbake.__main__ import run
from meshbake.core.image_io import read_ppm
from meshbake.core.mesh_io import load_mesh, mesh_to_text

TRIANGLE = """\
# 1 triangles
v  0.0 0.0 0.0
v  1.0 0.0 0.0
v  0.0 1.0 0.0
vc 1.0 1.0 1.0
vn 0.0 0.0 1.0
vt 0.0 0.0
vt 1.0 0.0
vt 0.0 1.0
f 1/1/1/1 2/1/2/1 3/1/3/1
"""


class TestCommandLine(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)
        self.mesh_path = self.tmp / "triangle.tri"
        self.mesh_path.write_text(TRIANGLE)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_bakes_both_maps(self) -> None:
        out = self.tmp / "out"
        status = run([str(self.mesh_path), "--output-dir", str(out), "--size", "32"])

        self.assertEqual(status, 0)
        texture = read_ppm(out / "triangle_texture.ppm")
        normal = read_ppm(out / "triangle_normal.ppm")
        self.assertEqual(texture.shape, (32, 32, 3))
        # Bottom-left UV corner lands on the last row.
        self.assertEqual(texture[31, 0].tolist(), [255, 255, 255])
        self.assertEqual(normal[31, 0].tolist(), [128, 128, 255])
        self.assertEqual(texture[0, 31].tolist(), [0, 0, 0])

    def test_single_mode_png(self) -> None:
        out = self.tmp / "out"
        status = run([
            str(self.mesh_path), "--output-dir", str(out), "--size", "8",
            "--modes", "normal", "--format", "png",
        ])

        self.assertEqual(status, 0)
        self.assertTrue((out / "triangle_normal.png").is_file())
        self.assertFalse((out / "triangle_texture.png").exists())

    def test_rewrite_and_export(self) -> None:
        rewritten = self.tmp / "copy.tri"
        exported = self.tmp / "triangle.glb"
        status = run([
            str(self.mesh_path), "--output-dir", str(self.tmp / "out"), "--size", "8",
            "--rewrite", str(rewritten), "--export", str(exported),
        ])

        self.assertEqual(status, 0)
        self.assertEqual(
            mesh_to_text(load_mesh(rewritten)), mesh_to_text(load_mesh(self.mesh_path))
        )
        self.assertTrue(exported.is_file())

    def test_parse_error_exits_nonzero(self) -> None:
        self.mesh_path.write_text("v 0 0 zero\n")

        status = run([str(self.mesh_path), "--output-dir", str(self.tmp / "out")])

        self.assertEqual(status, 1)

    def test_bad_index_exits_nonzero(self) -> None:
        self.mesh_path.write_text(TRIANGLE.replace("3/1/3/1", "3/1/7/1"))

        status = run([str(self.mesh_path), "--output-dir", str(self.tmp / "out"), "--size", "8"])

        self.assertEqual(status, 1)

    def test_missing_file_exits_nonzero(self) -> None:
        status = run([str(self.tmp / "nope.tri")])

        self.assertEqual(status, 1)

    def test_preset_size(self) -> None:
        out = self.tmp / "out"
        status = run([
            str(self.mesh_path), "--output-dir", str(out),
            "--preset", "Low (512)", "--modes", "color",
        ])

        self.assertEqual(status, 0)
        raster = read_ppm(out / "triangle_texture.ppm")
        self.assertEqual(raster.shape, (512, 512, 3))
        self.assertTrue(np.any(raster))


if __name__ == "__main__":
    unittest.main()
