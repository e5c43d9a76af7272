import unittest

import numpy as np

from meshbake.core.errors import IndexOutOfRange
from meshbake.core.mesh import Mesh
from meshbake.core.pipeline import BakeMode
from meshbake.core.texture_baker import (
    bake,
    bake_all,
    bake_color_map,
    bake_normal_map,
    encode_channels,
    rasterize_triangles,
    uv_to_pixels,
)

SIZE = 64

# UVs chosen so u * 64 and (1 - v) * 64 are exact: corners land on
# pixels (8, 8), (48, 8) and (8, 48).
RIGHT_TRIANGLE_UVS = [
    [0.125, 0.875, 0.0],
    [0.75, 0.875, 0.0],
    [0.125, 0.25, 0.0],
]


def make_mesh(uvs, colors=None, normals=None, faces=None) -> Mesh:
    """
    Build a mesh whose triangle corners index uvs/colors/normals directly.

    faces: list of (corner, corner, corner) triples indexing every attribute;
    defaults to consecutive runs of three.
    """
    uvs = np.asarray(uvs, dtype=np.float64)
    if colors is None:
        colors = np.ones((len(uvs), 3))
    if normals is None:
        normals = np.tile([0.0, 0.0, 1.0], (len(uvs), 1))
    if faces is None:
        indices = np.arange(len(uvs), dtype=np.int64)
    else:
        indices = np.asarray(faces, dtype=np.int64).reshape(-1)

    mesh = Mesh(
        positions=np.asarray(uvs, dtype=np.float64).copy(),
        colors=np.asarray(colors, dtype=np.float64),
        normals=np.asarray(normals, dtype=np.float64),
        tex_coords=uvs,
        face_vertices=indices.copy(),
        face_colors=indices.copy(),
        face_normals=indices.copy(),
        face_tex_coords=indices.copy(),
    )
    mesh.update_bounds()
    return mesh


def covered(raster) -> np.ndarray:
    return np.any(raster > 0, axis=2)


class TestUvToPixels(unittest.TestCase):
    def test_flips_v_and_scales(self) -> None:
        pixels = uv_to_pixels(np.array([[0.0, 1.0], [0.5, 0.5], [0.0, 0.0]]), 10)

        self.assertEqual(pixels.tolist(), [[0, 0], [5, 5], [0, 10]])

    def test_truncates_fractions(self) -> None:
        pixels = uv_to_pixels(np.array([[0.19, 0.81, 0.0]]), 10)

        self.assertEqual(pixels.tolist(), [[1, 1]])


class TestRasterizeTriangles(unittest.TestCase):
    def test_barycentric_weights_partition_unity(self) -> None:
        pixels = np.array([[3, 2], [28, 9], [11, 30]])
        # Identity corner values make the canvas hold (alpha, beta, gamma).
        canvas, filled = rasterize_triangles(pixels, np.identity(3), 32)

        weights = canvas[filled]
        self.assertGreater(len(weights), 0)
        np.testing.assert_allclose(weights.sum(axis=1), 1.0, atol=1e-9)
        self.assertTrue(np.all(weights >= 0.0))

    def test_both_windings_fill_the_same_pixels(self) -> None:
        ccw = np.array([[2, 2], [20, 4], [6, 18]])
        cw = ccw[[0, 2, 1]]

        _, filled_ccw = rasterize_triangles(ccw, np.ones((3, 1)), 24)
        _, filled_cw = rasterize_triangles(cw, np.ones((3, 1)), 24)

        self.assertTrue(filled_ccw.any())
        np.testing.assert_array_equal(filled_ccw, filled_cw)

    def test_pixel_count_of_right_triangle(self) -> None:
        pixels = np.array([[8, 8], [48, 8], [8, 48]])
        _, filled = rasterize_triangles(pixels, np.ones((3, 3)), SIZE)

        # Integer points with x, y >= 8 and (x - 8) + (y - 8) <= 40.
        self.assertEqual(int(filled.sum()), 41 * 42 // 2)

    def test_collinear_corners_are_skipped(self) -> None:
        pixels = np.array([[0, 0], [5, 5], [10, 10]])
        canvas, filled = rasterize_triangles(pixels, np.ones((3, 3)), 16)

        self.assertFalse(filled.any())
        self.assertFalse(canvas.any())


class TestBakeColor(unittest.TestCase):
    def setUp(self) -> None:
        colors = [[1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 0.0, 1.0]]
        self.mesh = make_mesh(RIGHT_TRIANGLE_UVS, colors=colors)

    def test_corners_reproduce_their_colour(self) -> None:
        raster = bake(self.mesh, BakeMode.COLOR, SIZE)

        self.assertEqual(raster[8, 8].tolist(), [255, 0, 0])
        self.assertEqual(raster[8, 48].tolist(), [0, 255, 0])
        self.assertEqual(raster[48, 8].tolist(), [0, 0, 255])

    def test_edge_midpoint_blends_two_corners(self) -> None:
        raster = bake(self.mesh, BakeMode.COLOR, SIZE)

        # Halfway along the top edge: alpha = beta = 0.5, gamma = 0.
        self.assertEqual(raster[8, 28].tolist(), [128, 128, 0])

    def test_raster_shape_and_background(self) -> None:
        raster = bake_color_map(self.mesh, SIZE)

        self.assertEqual(raster.shape, (SIZE, SIZE, 3))
        self.assertEqual(raster.dtype, np.uint8)
        self.assertEqual(int(covered(raster).sum()), 41 * 42 // 2)
        self.assertEqual(raster[0, 0].tolist(), [0, 0, 0])
        self.assertEqual(raster[47, 47].tolist(), [0, 0, 0])

    def test_each_bake_returns_a_fresh_raster(self) -> None:
        first = bake(self.mesh, BakeMode.COLOR, SIZE)
        first[:] = 7
        second = bake(self.mesh, BakeMode.COLOR, SIZE)

        self.assertEqual(second[0, 0].tolist(), [0, 0, 0])
        self.assertEqual(second[8, 8].tolist(), [255, 0, 0])

    def test_progress_messages(self) -> None:
        messages = []
        bake(self.mesh, BakeMode.COLOR, SIZE, on_progress=messages.append)

        self.assertTrue(messages)
        self.assertTrue(any("pixels written" in m for m in messages))


class TestBakeNormal(unittest.TestCase):
    def test_normals_remap_and_saturate(self) -> None:
        normals = np.tile([0.5, -0.5, 1.0], (3, 1))
        mesh = make_mesh(RIGHT_TRIANGLE_UVS, normals=normals)

        raster = bake_normal_map(mesh, SIZE)

        # 128 + 128 * 1.0 = 256 saturates to 255.
        self.assertEqual(raster[8, 8].tolist(), [192, 64, 255])
        self.assertEqual(raster[20, 20].tolist(), [192, 64, 255])

    def test_normal_map_reads_normals_not_colours(self) -> None:
        normals = np.tile([-1.0, 0.0, 0.0], (3, 1))
        mesh = make_mesh(RIGHT_TRIANGLE_UVS, colors=np.ones((3, 3)), normals=normals)

        raster = bake(mesh, BakeMode.NORMAL, SIZE)

        self.assertEqual(raster[8, 8].tolist(), [0, 128, 128])

    def test_empty_pixels_stay_zero(self) -> None:
        mesh = make_mesh(RIGHT_TRIANGLE_UVS)

        raster = bake(mesh, BakeMode.NORMAL, SIZE)

        self.assertEqual(raster[60, 60].tolist(), [0, 0, 0])


class TestBakeEdgeCases(unittest.TestCase):
    def test_empty_mesh_bakes_all_zero(self) -> None:
        raster = bake(Mesh.empty(), BakeMode.COLOR, SIZE)

        self.assertEqual(raster.shape, (SIZE, SIZE, 3))
        self.assertFalse(raster.any())

    def test_identical_corners_write_nothing(self) -> None:
        mesh = make_mesh([[0.5, 0.5, 0.0]] * 3)

        raster = bake(mesh, BakeMode.COLOR, SIZE)

        self.assertFalse(raster.any())

    def test_later_triangle_wins_overlap(self) -> None:
        uvs = RIGHT_TRIANGLE_UVS * 2
        colors = [[1.0, 0.0, 0.0]] * 3 + [[0.0, 0.0, 1.0]] * 3
        mesh = make_mesh(uvs, colors=colors)

        raster = bake(mesh, BakeMode.COLOR, SIZE)

        self.assertEqual(raster[20, 20].tolist(), [0, 0, 255])
        self.assertEqual(raster[8, 8].tolist(), [0, 0, 255])

    def test_overlap_follows_face_order(self) -> None:
        uvs = RIGHT_TRIANGLE_UVS * 2
        colors = [[1.0, 0.0, 0.0]] * 3 + [[0.0, 0.0, 1.0]] * 3
        mesh = make_mesh(uvs, colors=colors, faces=[[3, 4, 5], [0, 1, 2]])

        raster = bake(mesh, BakeMode.COLOR, SIZE)

        self.assertEqual(raster[20, 20].tolist(), [255, 0, 0])

    def test_partially_off_raster_triangle_is_clipped(self) -> None:
        # Corners at pixels (32, 32), (96, 32) and (32, -32).
        uvs = [[0.5, 0.5, 0.0], [1.5, 0.5, 0.0], [0.5, 1.5, 0.0]]
        mesh = make_mesh(uvs)

        raster = bake(mesh, BakeMode.COLOR, SIZE)
        mask = covered(raster)

        self.assertTrue(mask[32, 32])
        self.assertTrue(mask[0, 63])
        self.assertFalse(mask[:, :32].any())
        self.assertFalse(mask[33:, :].any())

    def test_out_of_range_texcoord_index_fails_fast(self) -> None:
        mesh = make_mesh(RIGHT_TRIANGLE_UVS)
        mesh.face_tex_coords = np.array([0, 1, 3])

        with self.assertRaises(IndexOutOfRange) as ctx:
            bake(mesh, BakeMode.COLOR, SIZE)
        self.assertEqual(ctx.exception.attribute, "tex_coords")
        self.assertEqual(ctx.exception.index, 3)

    def test_out_of_range_normal_index_only_fails_normal_bake(self) -> None:
        mesh = make_mesh(RIGHT_TRIANGLE_UVS)
        mesh.face_normals = np.array([0, 1, 9])

        bake(mesh, BakeMode.COLOR, SIZE)
        with self.assertRaises(IndexOutOfRange):
            bake(mesh, BakeMode.NORMAL, SIZE)

    def test_invalid_arguments(self) -> None:
        mesh = make_mesh(RIGHT_TRIANGLE_UVS)

        with self.assertRaises(ValueError):
            bake(mesh, "albedo", SIZE)
        with self.assertRaises(ValueError):
            bake(mesh, BakeMode.COLOR, 0)
        with self.assertRaises(ValueError):
            bake_all(mesh, SIZE, modes=["albedo"])


class TestBakeAll(unittest.TestCase):
    def test_bakes_every_mode_in_order(self) -> None:
        rasters = bake_all(make_mesh(RIGHT_TRIANGLE_UVS), SIZE)

        self.assertEqual(list(rasters), [BakeMode.COLOR, BakeMode.NORMAL])
        self.assertIsNot(rasters[BakeMode.COLOR], rasters[BakeMode.NORMAL])

    def test_mode_selection(self) -> None:
        rasters = bake_all(make_mesh(RIGHT_TRIANGLE_UVS), SIZE, modes=[BakeMode.NORMAL])

        self.assertEqual(list(rasters), [BakeMode.NORMAL])


class TestEncodeChannels(unittest.TestCase):
    def test_colour_rounds_and_saturates(self) -> None:
        encoded = encode_channels([[0.5, 1.2, -0.1]], BakeMode.COLOR)

        self.assertEqual(encoded.tolist(), [[128, 255, 0]])

    def test_normal_range(self) -> None:
        encoded = encode_channels([[-1.0, 0.0, 1.0]], BakeMode.NORMAL)

        self.assertEqual(encoded.tolist(), [[0, 128, 255]])


if __name__ == "__main__":
    unittest.main()
