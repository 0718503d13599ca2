import os
import tempfile
import unittest
from unittest import mock

import numpy as np
from PIL import Image

import ray as raytracer
from ray import *
from framebuffer import pack_color
from scenes import SingleSphereExample, SCENES
import cli


def facing_mirrors(k_m=1.0):
    """Two big mirror triangles at z = -1 and z = +1 facing each other."""
    mirror = Material(vec([0, 0, 0]), k_m=k_m, k_a=vec([0, 0, 0]))
    front = Triangle(vec([[-10, -10, -1], [10, -10, -1], [0, 10, -1]]), mirror)
    back = Triangle(vec([[-10, -10, 1], [0, 10, 1], [10, -10, 1]]), mirror)
    return Scene([front, back], bg_color=vec([0.2, 0.4, 0.6]))


class TestPointLight(unittest.TestCase):

    def shading_test(self, p, n, v, l, material):
        # shading at p with normal n and view/illum directions v/l
        t = 1.3        # arbitrary value
        d = -2.3 * v   # arbitrary scale
        ray = Ray(p - t*d, d)  # ray consistent with hit
        light = PointLight(p + 2.7 * normalize(l))
        return light.illuminate(ray, p, n, material)

    def test_diffuse(self):
        # light directly overhead
        np.testing.assert_allclose(
            self.shading_test(
                vec([0,0,0]), vec([0,1,0]), vec([1, 1, 0]),  # p, n, v
                vec([0,1,0]),  # l
                Material(vec([0.2,0.4,0.6]))
            ),
            vec([0.2,0.4,0.6])
        )
        # light at 60 degrees
        np.testing.assert_allclose(
            self.shading_test(
                vec([0,0,0]), vec([0,1,0]), vec([1, 1, 0]),  # p, n, v
                vec([0,1,np.sqrt(3)]),  # l
                Material(vec([0.2,0.4,0.6]))
            ),
            0.5 * vec([0.2,0.4,0.6])
        )

    def test_light_below_surface(self):
        np.testing.assert_allclose(
            self.shading_test(
                vec([0,0,0]), vec([0,1,0]), vec([1, 1, 0]),
                vec([0,-1,0]),
                Material(vec([0.2,0.4,0.6]), k_s=0.)
            ),
            vec([0,0,0])
        )

    def test_specular_halfway(self):
        # view along the normal, light at 45 degrees: h is 22.5 degrees off n
        p = 30.
        np.testing.assert_allclose(
            self.shading_test(
                vec([0,0,0]), vec([0,1,0]), vec([0, 1, 0]),
                vec([1,1,0]),
                Material(vec([0,0,0]), k_s=vec([1,1,1]), p=p)
            ),
            np.cos(np.pi / 8) ** p * vec([1,1,1])
        )


class TestShade(unittest.TestCase):

    def setUp(self):
        self.material = Material(vec([0.5, 0.6, 0.7]), k_s=vec([0.2, 0.2, 0.2]), p=10.,
                                 k_a=vec([0.1, 0.05, 0.0]))
        self.target = Sphere(vec([0, 0, -5]), 1.0, self.material)
        # hit point is (0, 0, -4) with normal +z; the light is 45 degrees up
        self.light = PointLight(vec([0, 4, 0]))
        self.ray = Ray(vec([0, 0, 0]), vec([0, 0, -1]))
        self.config = RenderConfig(width=8, height=8, shadows=True, reflection=True, reflection_depth=2)

    def lit_color(self):
        l = normalize(vec([0, 4, 4]))
        h = normalize(vec([0, 0, 1]) + l)
        return (self.material.k_a + self.material.k_d * l[2]
                + self.material.k_s * h[2] ** self.material.p)

    def test_background_on_miss(self):
        scene = Scene([self.target], bg_color=vec([0.3, 0.2, 0.1]))
        color = shade(Ray(vec([0, 0, 0]), vec([0, 0, 1])), scene, self.light, self.config, 2)
        np.testing.assert_array_equal(color, vec([0.3, 0.2, 0.1]))

    def test_lit(self):
        scene = Scene([self.target])
        color = shade(self.ray, scene, self.light, self.config, 2)
        np.testing.assert_allclose(color, self.lit_color())

    def test_shadow_leaves_ambient_only(self):
        # occluder sits on the line from the hit point to the light
        occluder = Sphere(vec([0, 2, -2]), 0.5, Material(vec([1, 1, 1])))
        scene = Scene([self.target, occluder])
        color = shade(self.ray, scene, self.light, self.config, 2)
        np.testing.assert_array_equal(color, self.material.k_a)

    def test_shadow_skips_reflection(self):
        self.material.k_m = 1.0
        occluder = Sphere(vec([0, 2, -2]), 0.5, Material(vec([1, 1, 1])))
        scene = Scene([self.target, occluder], bg_color=vec([1, 1, 1]))
        color = shade(self.ray, scene, self.light, self.config, 2)
        np.testing.assert_array_equal(color, self.material.k_a)

    def test_shadows_disabled(self):
        occluder = Sphere(vec([0, 2, -2]), 0.5, Material(vec([1, 1, 1])))
        scene = Scene([self.target, occluder])
        self.config.shadows = False
        color = shade(self.ray, scene, self.light, self.config, 2)
        np.testing.assert_allclose(color, self.lit_color())

    def test_blocker_behind_light_still_shadows(self):
        occluder = Sphere(vec([0, 8, 4]), 0.5, Material(vec([1, 1, 1])))
        scene = Scene([self.target, occluder])
        color = shade(self.ray, scene, self.light, self.config, 2)
        np.testing.assert_array_equal(color, self.material.k_a)

    def test_colors_not_clamped(self):
        bright = Material(vec([3, 3, 3]), k_a=vec([2, 2, 2]))
        scene = Scene([Sphere(vec([0, 0, -5]), 1.0, bright)])
        color = shade(self.ray, scene, self.light, self.config, 0)
        self.assertTrue(np.all(color > 1))


class TestReflection(unittest.TestCase):

    def setUp(self):
        self.light = PointLight(vec([0, 0, 0]))
        self.ray = Ray(vec([0, 0, 0]), vec([0, 0, -1]))

    def test_single_bounce_to_background(self):
        mirror = Material(vec([0, 0, 0]), k_m=0.5, k_a=vec([0, 0, 0]))
        scene = Scene([Triangle(vec([[-10, -10, -1], [10, -10, -1], [0, 10, -1]]), mirror)],
                      bg_color=vec([0.2, 0.4, 0.6]))
        config = RenderConfig(shadows=False, reflection=True, reflection_depth=1)
        color = shade(self.ray, scene, self.light, config, 1)
        np.testing.assert_allclose(color, 0.5 * vec([0.2, 0.4, 0.6]))

    def test_depth_zero_adds_no_mirror_term(self):
        scene = facing_mirrors(k_m=1.0)
        with_depth_zero = shade(self.ray, scene, self.light,
                                RenderConfig(shadows=False, reflection=True, reflection_depth=0), 0)
        without = shade(self.ray, scene, self.light,
                        RenderConfig(shadows=False, reflection=False), 3)
        np.testing.assert_array_equal(with_depth_zero, without)
        np.testing.assert_array_equal(with_depth_zero, vec([0, 0, 0]))

    def test_depth_bounds_bounces(self):
        scene = facing_mirrors()
        for k in range(5):
            config = RenderConfig(shadows=False, reflection=True, reflection_depth=k)
            with mock.patch.object(raytracer, 'shade', wraps=raytracer.shade) as spy:
                raytracer.shade(self.ray, scene, self.light, config, k)
            self.assertEqual(spy.call_count, k + 1)

    def test_reflection_disabled(self):
        scene = facing_mirrors()
        config = RenderConfig(shadows=False, reflection=False, reflection_depth=4)
        with mock.patch.object(raytracer, 'shade', wraps=raytracer.shade) as spy:
            raytracer.shade(self.ray, scene, self.light, config, 4)
        self.assertEqual(spy.call_count, 1)


class TestJitter(unittest.TestCase):

    def test_wraps(self):
        jitter = Jitter([0.1, 0.2, 0.3])
        self.assertEqual([next(jitter) for _ in range(5)], [0.1, 0.2, 0.3, 0.1, 0.2])

    def test_table_is_in_unit_interval(self):
        self.assertTrue(all(0 <= j < 1 for j in JITTER))

    def test_cursor_shared_across_pixels(self):
        scene_def = SingleSphereExample()
        jitter = Jitter()
        config = RenderConfig(width=2, height=1, antialias=True)
        render_image(scene_def.view, scene_def.scene, scene_def.light, config, jitter=jitter)
        per_pixel = 2 * AA_SAMPLES * AA_SAMPLES
        self.assertEqual(jitter.cursor, (2 * per_pixel) % len(JITTER))

    def test_deterministic(self):
        scene_def = SingleSphereExample()
        config = RenderConfig(width=12, height=12, antialias=True)
        a = scene_def.render(config)
        b = scene_def.render(config)
        np.testing.assert_array_equal(a.pixels, b.pixels)


class TestSingleSphereRender(unittest.TestCase):

    def setUp(self):
        self.scene_def = SingleSphereExample()
        self.config = RenderConfig(width=32, height=32)

    def pixel(self, row, col, config=None, jitter=None):
        d = self.scene_def
        return trace_pixel(d.view, d.scene, d.light, config or self.config, row, col, jitter)

    def test_center_lit_outside_background(self):
        center = self.pixel(16, 16)
        outside = self.pixel(16, 24)
        self.assertTrue(np.all(center > 0))
        np.testing.assert_array_equal(outside, self.scene_def.scene.bg_color)
        self.assertTrue(np.all(center > outside))

    def test_framebuffer_matches(self):
        fb = self.scene_def.render(self.config)
        self.assertEqual(fb.shape, (32, 32, 4))
        np.testing.assert_array_equal(fb.get_pixel(16, 24), [0, 0, 0, 255])
        np.testing.assert_array_equal(fb.get_pixel(16, 16), pack_color(self.pixel(16, 16)))
        self.assertGreater(int(fb.get_pixel(16, 16)[0]), 0)
        # the lit top of the sphere is brighter than its underside, which faces away
        self.assertGreater(int(fb.get_pixel(20, 16)[0]), int(fb.get_pixel(12, 16)[0]))
        # row 0 is stored as the last array row
        np.testing.assert_array_equal(fb.pixels[0], [[0, 0, 0, 255]] * 32)

    def test_antialias_with_centered_jitter(self):
        # a 0.5 table puts each sample at the center of its 4x4 stratum,
        # which agrees with the pixel-center sample where shading is smooth
        aa_config = RenderConfig(width=32, height=32, antialias=True)
        for row, col in [(16, 16), (17, 15), (16, 24), (2, 3)]:
            plain = self.pixel(row, col)
            averaged = self.pixel(row, col, aa_config, Jitter([0.5]))
            np.testing.assert_allclose(averaged, plain, atol=1e-2)

    def test_antialias_blends_silhouette(self):
        # on the sphere's edge some strata see the background, so the
        # average is darker than the single center sample
        aa_config = RenderConfig(width=32, height=32, antialias=True)
        plain = self.pixel(22, 16)
        averaged = self.pixel(22, 16, aa_config, Jitter([0.5]))
        self.assertTrue(np.all(plain > 0))
        self.assertTrue(np.all(averaged < plain - 0.1))
        self.assertTrue(np.all(averaged > 0))


class TestFramebuffer(unittest.TestCase):

    def test_pack(self):
        np.testing.assert_array_equal(pack_color(vec([1, 0.5, 0])), [255, 127, 0, 255])
        np.testing.assert_array_equal(pack_color(vec([2, -1, 0.25])), [255, 0, 63, 255])

    def test_flip(self):
        fb = Framebuffer(3, 2)
        fb.set_pixel(0, 2, vec([1, 1, 1]))
        np.testing.assert_array_equal(fb.pixels[1, 2], [255, 255, 255, 255])
        np.testing.assert_array_equal(fb.pixels[0, 2], [0, 0, 0, 255])
        np.testing.assert_array_equal(fb.get_pixel(0, 2), [255, 255, 255, 255])

    def test_write(self):
        fb = Framebuffer(4, 3)
        fb.set_pixel(2, 0, vec([1, 0, 0]))
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'fb.png')
            fb.write(path)
            with Image.open(path) as im:
                self.assertEqual(im.size, (4, 3))
                self.assertEqual(im.mode, 'RGBA')
                self.assertEqual(im.getpixel((0, 0)), (255, 0, 0, 255))


class TestRenderConfig(unittest.TestCase):

    def test_defaults_valid(self):
        config = RenderConfig()
        self.assertIs(config.validate(), config)

    def test_bad_sizes(self):
        for kwargs in [dict(width=0), dict(height=-3), dict(width=2.5), dict(height=True)]:
            with self.assertRaises(ValueError):
                RenderConfig(**kwargs).validate()

    def test_bad_depth(self):
        with self.assertRaises(ValueError):
            RenderConfig(reflection_depth=-1).validate()

    def test_render_fails_before_tracing(self):
        scene = mock.Mock()
        with self.assertRaises(ValueError):
            render_image(ViewPlane(), scene, PointLight(vec([0, 0, 0])), RenderConfig(width=0))
        scene.intersect.assert_not_called()

    def test_framebuffer_size_mismatch(self):
        with self.assertRaises(ValueError):
            render_image(ViewPlane(), Scene([]), PointLight(vec([0, 0, 0])),
                         RenderConfig(width=4, height=4), framebuffer=Framebuffer(4, 5))

    def test_verbose_prints_rows(self):
        config = RenderConfig(width=2, height=3, verbose=True)
        with mock.patch('builtins.print') as fake_print:
            render_image(ViewPlane(plane_z=-1.), Scene([]), PointLight(vec([0, 0, 0])), config)
        self.assertEqual(fake_print.call_count, 3)


class TestCli(unittest.TestCase):

    def test_render_builtin_scene(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, 'out.png')
            with mock.patch('builtins.print'):
                cli.main(['--scene', 'single_sphere', '--width', '6', '--height', '4', '-o', path])
            with Image.open(path) as im:
                self.assertEqual(im.size, (6, 4))

    def test_bad_size_exits(self):
        with mock.patch('sys.stderr'), self.assertRaises(SystemExit):
            cli.main(['--width', '0'])

    def test_missing_obj_exits(self):
        with mock.patch('sys.stderr'), self.assertRaises(SystemExit):
            cli.main(['--obj', os.path.join(tempfile.gettempdir(), 'no_such_mesh.obj')])

    def test_unreadable_obj_exits(self):
        with tempfile.TemporaryDirectory() as tmp:
            with mock.patch('sys.stderr'), self.assertRaises(SystemExit):
                cli.main(['--obj', tmp])

    def test_obj_mesh(self):
        with tempfile.TemporaryDirectory() as tmp:
            obj_path = os.path.join(tmp, 'quad.obj')
            with open(obj_path, 'w') as f:
                f.write("# unit quad\nv 0 0 0\nv 1 0 0\nv 1 1 0\nv 0 1 0\nvn 0 0 1\nf 1//1 2//1 3//1 4//1\n")
            with open(obj_path) as f:
                vs_list = read_obj_triangles(f)
            self.assertEqual(vs_list.shape, (2, 3, 3))
            np.testing.assert_array_equal(vs_list[1], [[0, 0, 0], [1, 1, 0], [0, 1, 0]])

            out_path = os.path.join(tmp, 'mesh.png')
            with mock.patch('builtins.print'):
                cli.main(['--obj', obj_path, '--width', '4', '--height', '4', '-o', out_path])
            self.assertTrue(os.path.exists(out_path))

    def test_scene_registry(self):
        self.assertEqual(sorted(SCENES), ['mirror_room', 'single_sphere', 'three_spheres'])
        for make in SCENES.values():
            scene_def = make()
            self.assertGreater(len(scene_def.scene), 0)


if __name__ == '__main__':
    unittest.main()
