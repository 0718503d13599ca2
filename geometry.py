import numpy as np
from utils import vec, normalize

# Distance standing for "no closer hit found yet" while scanning.  It never
# leaves an intersect call: a miss is reported as None.
SENTINEL = 1e32


class Hit:
    def __init__(self, t, surface, bary=None):
        """Create a Hit with the given data.

        Parameters:
          t : float -- the t value of the intersection along the ray
          surface : Sphere or Triangle -- the leaf surface that was hit
          bary : (beta, gamma) -- barycentric coordinates, for triangle hits only
        """
        self.t = t
        self.surface = surface
        self.bary = bary

    @property
    def material(self):
        return self.surface.material


def in_range(t, ray):
    """Hits count on the half-open interval [ray.start, ray.end)."""
    return ray.start <= t < ray.end


class Sphere:

    def __init__(self, center, radius, material):
        """Create a sphere with the given center and radius.

        Parameters:
          center : (3,) -- a 3D point specifying the sphere's center
          radius : float -- a Python float specifying the sphere's radius (> 0)
          material : Material -- the material of the surface
        """
        self.center = center
        self.radius = radius
        self.material = material

    def intersect(self, ray):
        """Computes the first (smallest t) intersection between a ray and this sphere.

        Parameters:
          ray : Ray -- the ray to intersect with the sphere
        Return:
          Hit or None -- the nearest hit in [ray.start, ray.end)
        """
        sphere_vec = ray.origin - self.center
        d_dot_d = np.dot(ray.direction, ray.direction)
        # B is d.(o-c), not the full 2 d.(o-c) coefficient
        b = np.dot(ray.direction, sphere_vec)
        c = np.dot(sphere_vec, sphere_vec) - self.radius * self.radius
        discriminant = b * b - d_dot_d * c
        if discriminant < 0:
            return None

        disc_sqrt = np.sqrt(discriminant)
        minus = (-b - disc_sqrt) / d_dot_d
        plus = (-b + disc_sqrt) / d_dot_d
        if not in_range(minus, ray):
            minus = SENTINEL
        if not in_range(plus, ray):
            plus = SENTINEL

        t = min(minus, plus)
        if t == SENTINEL:
            return None
        return Hit(t, self)

    def normal(self, point):
        """Outward unit normal at a point on the sphere."""
        return (point - self.center) / self.radius


class Triangle:

    def __init__(self, vs, material):
        """Create a triangle from the given vertices.

        Parameters:
          vs (3,3) -- an array of 3 3D points that are the vertices (CCW order)
          material : Material -- the material of the surface

        The outward normal is cross(v2 - v1, v3 - v1), so winding the
        vertices the right way round is up to the caller.
        """
        self.vs = np.array(vs, np.float64)
        self.material = material

    def intersect(self, ray):
        """Computes the intersection between a ray and this triangle, if it exists.

        Solves origin + t d = v1 + beta (v2 - v1) + gamma (v3 - v1) with
        Cramer's rule.  A zero-area triangle makes M zero; the division is
        not guarded and any inf or nan is left to propagate.

        Parameters:
          ray : Ray -- the ray to intersect with the triangle
        Return:
          Hit or None -- the hit data, with (beta, gamma) attached
        """
        v_a, v_b, v_c = self.vs
        a, b, c = v_a - v_b
        d, e, f = v_a - v_c
        g, h, i = ray.direction
        j, k, l = v_a - ray.origin

        ei_hf = e * i - h * f
        gf_di = g * f - d * i
        dh_eg = d * h - e * g
        ak_jb = a * k - j * b
        jc_al = j * c - a * l
        bl_kc = b * l - k * c

        with np.errstate(divide='ignore', invalid='ignore'):
            m = a * ei_hf + b * gf_di + c * dh_eg

            t = -(f * ak_jb + e * jc_al + d * bl_kc) / m
            if t < ray.start or t >= ray.end:
                return None

            gamma = (i * ak_jb + h * jc_al + g * bl_kc) / m
            if gamma < 0 or gamma > 1:
                return None

            beta = (j * ei_hf + k * gf_di + l * dh_eg) / m
            if beta < 0 or beta > 1 - gamma:
                return None

        return Hit(t, self, bary=(beta, gamma))

    def normal(self, point=None):
        """Unit normal of the triangle's plane; the same at every point."""
        v_a, v_b, v_c = self.vs
        return normalize(np.cross(v_b - v_a, v_c - v_a))


class Scene:

    def __init__(self, surfs, bg_color=vec([0.2,0.3,0.5])):
        """Create a scene containing the given objects.

        A Scene is itself a surface, so "the whole world" can be intersected
        like any single object.

        Parameters:
          surfs : [Sphere, Triangle] -- list of the surfaces in the scene
          bg_color : (3,) -- RGB color that is seen where no objects appear
        """
        self.surfs = list(surfs)
        self.bg_color = bg_color
        self.material = None

    def __len__(self):
        return len(self.surfs)

    def intersect(self, ray):
        """Computes the first (smallest t) intersection between a ray and the scene.

        Parameters:
          ray : Ray -- the ray to intersect with the scene
        Return:
          Hit or None -- the nearest hit among all members
        """
        closest_hit = None
        closest_t = SENTINEL

        for surf in self.surfs:
            hit = surf.intersect(ray)
            if hit is None:
                continue
            if in_range(hit.t, ray) and hit.t < closest_t:
                closest_hit = hit
                closest_t = hit.t

        return closest_hit

    def is_occluded(self, ray):
        """Return True if any surface meets the ray in [ray.start, ray.end)."""
        for surf in self.surfs:
            hit = surf.intersect(ray)
            if hit is not None and in_range(hit.t, ray):
                return True
        return False

    def normal(self, point):
        raise NotImplementedError(
            "Scene has no normal of its own; ask the surface in Hit.surface")
