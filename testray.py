import unittest
import numpy as np
from ray import *
from utils import normalize, vec

def assert_direction_matches(v, w):
    np.testing.assert_almost_equal(normalize(v), normalize(w))


class TestSphereIntersect(unittest.TestCase):

    def confirm_hit(self, sphere, ray):
        # make sure hit is self-consistent, then return it
        hit = sphere.intersect(ray)
        self.assertIsNotNone(hit)
        self.assertIs(hit.surface, sphere)
        self.assertIs(hit.material, sphere.material)
        point = ray.at(hit.t)
        np.testing.assert_almost_equal(normalize(point - sphere.center), sphere.normal(point))
        self.assertAlmostEqual(np.linalg.norm(point - sphere.center), sphere.radius)
        return hit

    def test_unitsphere_hits(self):
        unit_sphere = Sphere(np.array([0,0,0]), 1.0, None)
        # dead center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,0.0,0.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        # dead center with non-unit direction
        hit = self.confirm_hit(unit_sphere, Ray(vec([3.0,0.0,0.0]), vec([-2.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        # off center hit
        hit = self.confirm_hit(unit_sphere, Ray(vec([1.0,0.5,0.0]), vec([-1.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1 - np.sin(np.pi/3))
        # center hit from off axis
        hit = self.confirm_hit(unit_sphere, Ray(vec([2.0,3.0,4.0]), vec([-2.0,-3.0,-4.0])))
        self.assertAlmostEqual(hit.t, 1 - 1 / np.sqrt(29))

    def test_both_roots_through_center(self):
        r = 1.5
        sphere = Sphere(vec([0,0,0]), r, None)
        center_dist = 6.0
        ray = Ray(vec([0,0,center_dist]), vec([0,0,-1]))
        hit = self.confirm_hit(sphere, ray)
        self.assertAlmostEqual(hit.t, center_dist - r)
        # skip past the near root to get the far one
        hit = self.confirm_hit(sphere, Ray(ray.origin, ray.direction, center_dist, SENTINEL))
        self.assertAlmostEqual(hit.t, center_dist + r)

    def test_unitsphere_misses(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, None)
        # on axis miss
        self.assertIsNone(unit_sphere.intersect(Ray(vec([2.0,3.0,0.0]), vec([-1.0,0.0,0.0]))))
        # closest approach just beyond the radius
        self.assertIsNone(unit_sphere.intersect(Ray(vec([2.0,1.001,0.0]), vec([-1.0,0.0,0.0]))))
        # sphere entirely behind the ray
        self.assertIsNone(unit_sphere.intersect(Ray(vec([2.0,0.0,0.0]), vec([1.0,0.0,0.0]))))

    def test_interval_is_half_open(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, None)
        origin, direction = vec([2.0,0.0,0.0]), vec([-1.0,0.0,0.0])
        # start is inclusive
        hit = unit_sphere.intersect(Ray(origin, direction, 1.0, SENTINEL))
        self.assertAlmostEqual(hit.t, 1.0)
        # end is exclusive, and the far root is out of range too
        self.assertIsNone(unit_sphere.intersect(Ray(origin, direction, 0.0, 1.0)))
        hit = unit_sphere.intersect(Ray(origin, direction, 0.0, 3.5))
        self.assertAlmostEqual(hit.t, 1.0)

    def test_ray_from_inside(self):
        unit_sphere = Sphere(vec([0,0,0]), 1.0, None)
        hit = self.confirm_hit(unit_sphere, Ray(vec([0,0,0]), vec([0,0,-1])))
        self.assertAlmostEqual(hit.t, 1.0)

    def test_nonunit_hits(self):
        # all the same as the first case, but scaled by 3 and shifted by (-1, -5, -7)
        sphere = Sphere(vec([-1,-5,-7]), 3.0, None)
        hit = self.confirm_hit(sphere, Ray(vec([5.0,-5.0,-7.0]), vec([-3.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        hit = self.confirm_hit(sphere, Ray(vec([8.0,-5.0,-7.0]), vec([-6.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1.0)
        hit = self.confirm_hit(sphere, Ray(vec([2.0,-3.5,-7.0]), vec([-3.0,0.0,0.0])))
        self.assertAlmostEqual(hit.t, 1 - np.sin(np.pi/3))


class TestTriangleIntersect(unittest.TestCase):

    def test_simple(self):
        # A triangle on the xy plane and perpendicular rays
        tri = Triangle(np.array([[0,0,0], [1,0,0], [0,1,0]]), None)
        ray = Ray(vec([0.3, 0.3, 1]), vec([0, 0, -1]))
        hit = tri.intersect(ray)
        self.assertAlmostEqual(hit.t, 1.)
        np.testing.assert_allclose(ray.at(hit.t), [0.3, 0.3, 0], atol=1e-12)
        np.testing.assert_allclose(tri.normal(ray.at(hit.t)), [0, 0, 1])
        self.assertIsNone(tri.intersect(Ray(vec([-0.3, 0.3, 1]), vec([0, 0, -1]))))

    def test_centroid_barycentrics(self):
        vs = vec([[1, 2, -3], [4, 2, -5], [2, 6, -4]])
        tri = Triangle(vs, None)
        centroid = vs.mean(axis=0)
        origin = vec([0, 0, 5])
        hit = tri.intersect(Ray(origin, centroid - origin))
        self.assertIsNotNone(hit)
        self.assertAlmostEqual(hit.t, 1.)
        beta, gamma = hit.bary
        self.assertGreaterEqual(beta, 0)
        self.assertGreaterEqual(gamma, 0)
        self.assertLessEqual(beta + gamma, 1)
        self.assertAlmostEqual(beta, 1/3)
        self.assertAlmostEqual(gamma, 1/3)

    def test_outside_misses(self):
        tri = Triangle(np.array([[0,0,0], [1,0,0], [0,1,0]]), None)
        # beyond the hypotenuse
        self.assertIsNone(tri.intersect(Ray(vec([0.6, 0.6, 1]), vec([0, 0, -1]))))
        # below the x axis
        self.assertIsNone(tri.intersect(Ray(vec([0.3, -0.1, 1]), vec([0, 0, -1]))))
        # plane is behind the ray
        self.assertIsNone(tri.intersect(Ray(vec([0.3, 0.3, 1]), vec([0, 0, 1]))))
        # plane is past the end of the ray
        self.assertIsNone(tri.intersect(Ray(vec([0.3, 0.3, 1]), vec([0, 0, -1]), 0., 0.5)))

    def test_interval_is_half_open(self):
        tri = Triangle(np.array([[0,0,0], [1,0,0], [0,1,0]]), None)
        origin, direction = vec([0.3, 0.3, 1]), vec([0, 0, -1])
        # the plane is at t = 1: start is inclusive, end is exclusive
        hit = tri.intersect(Ray(origin, direction, 1.0, SENTINEL))
        self.assertAlmostEqual(hit.t, 1.0)
        self.assertIsNone(tri.intersect(Ray(origin, direction, 0.0, 1.0)))
        # same boundary on a sphere surface at t = 1
        sphere = Sphere(vec([0.3, 0.3, -1]), 1.0, None)
        self.assertIsNone(sphere.intersect(Ray(origin, direction, 0.0, 1.0)))

    def test_transformed(self):
        # The same triangle under a linear xf of positive determinant
        M = np.array([[3,1,4],[1,5,9],[2,6,5]])
        M = np.sign(np.linalg.det(M)) * M  # ensure no reflection
        u = np.array([2,7,1])
        tri = Triangle(np.array([u + M @ [0,0,0], u + M @ [1,0,0], u + M @ [0,1,0]]), None)
        ray = Ray(u + M @ [0.3, 0.3, 1], M @ [0, 0, -1])
        hit = tri.intersect(ray)
        self.assertAlmostEqual(hit.t, 1.)
        np.testing.assert_allclose(ray.at(hit.t), u + M @ [0.3, 0.3, 0])
        np.testing.assert_allclose(hit.bary, [0.3, 0.3])
        assert_direction_matches(tri.normal(ray.at(hit.t)), np.linalg.inv(M.transpose()) @ [0, 0, 1])
        self.assertIsNone(tri.intersect(Ray(u + M @ [-0.3, 0.3, 1], M @ [0, 0, -1])))

    def test_degenerate_does_not_raise(self):
        # collinear vertices: the determinant is zero
        tri = Triangle(np.array([[0,0,0], [1,0,0], [2,0,0]]), None)
        self.assertIsNone(tri.intersect(Ray(vec([0.5, 0.5, 1]), vec([0, 0, -1]))))


class TestSceneIntersect(unittest.TestCase):

    def setUp(self):
        self.near = Sphere(vec([0,0,-5]), 1.0, Material(vec([1,0,0])))
        self.far = Sphere(vec([0,0,-6]), 1.5, Material(vec([0,1,0])))
        self.ray = Ray(vec([0,0,0]), vec([0,0,-1]))

    def test_nearest_hit_any_order(self):
        for surfs in ([self.near, self.far], [self.far, self.near]):
            hit = Scene(surfs).intersect(self.ray)
            self.assertIs(hit.surface, self.near)
            self.assertAlmostEqual(hit.t, 4.0)

    def test_respects_interval(self):
        scene = Scene([self.near, self.far])
        # start inside both spheres: the near sphere's exit comes first
        hit = scene.intersect(Ray(self.ray.origin, self.ray.direction, 5.0, SENTINEL))
        self.assertIs(hit.surface, self.near)
        self.assertAlmostEqual(hit.t, 6.0)
        self.assertIsNone(scene.intersect(Ray(self.ray.origin, self.ray.direction, 0.0, 4.0)))

    def test_empty_scene(self):
        scene = Scene([])
        self.assertIsNone(scene.intersect(self.ray))
        self.assertFalse(scene.is_occluded(self.ray))

    def test_mixed_surfaces(self):
        tri = Triangle(vec([[-1,-1,-2], [1,-1,-2], [0,1,-2]]), None)
        scene = Scene([self.near, tri])
        hit = scene.intersect(self.ray)
        self.assertIs(hit.surface, tri)
        self.assertAlmostEqual(hit.t, 2.0)
        self.assertTrue(scene.is_occluded(self.ray))

    def test_scene_has_no_normal(self):
        with self.assertRaises(NotImplementedError):
            Scene([self.near]).normal(vec([0,0,-4]))


class TestViewPlane(unittest.TestCase):

    def test_center_ray(self):
        view = ViewPlane(vec([0,0,0]), -1., 1., -1., 1., plane_z=-1.)
        ray = view.generate_ray(0.5 * 4, 0.5 * 4, 4, 4)
        np.testing.assert_almost_equal(ray.origin, vec([0,0,0]))
        np.testing.assert_almost_equal(ray.direction, vec([0,0,-1]))
        self.assertEqual(ray.start, 0.)
        self.assertEqual(ray.end, SENTINEL)

    def test_corners(self):
        view = ViewPlane(vec([0,0,0]), -1., 1., -1., 1., plane_z=-1.)
        # row 0 is the bottom of the image
        np.testing.assert_almost_equal(view.generate_ray(0, 0, 8, 8).direction, vec([-1,-1,-1]))
        np.testing.assert_almost_equal(view.generate_ray(8, 8, 8, 8).direction, vec([1,1,-1]))
        np.testing.assert_almost_equal(view.generate_ray(0, 8, 8, 8).direction, vec([1,-1,-1]))

    def test_direction_z_from_eye(self):
        eye = vec([0.2, -0.1, 3.0])
        view = ViewPlane(eye, -2., 2., -1., 1.)
        ray = view.generate_ray(3.5, 1.5, 4, 8)
        self.assertAlmostEqual(ray.direction[2], -eye[2])
        np.testing.assert_almost_equal(ray.origin + ray.direction,
                                       vec([-2. + 4. * 1.5 / 4, -1. + 2. * 3.5 / 8, 0.]))


if __name__ == '__main__':
    unittest.main()
