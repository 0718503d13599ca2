import numpy as np
from materials import Material
from geometry import Sphere, Triangle, Scene, Hit, SENTINEL
from config import RenderConfig
from framebuffer import Framebuffer
from utils import *

"""
Core implementation of the ray tracer.  This module contains the classes (Ray, ViewPlane,
PointLight) and functions (shade, trace_pixel) used in the rendering algorithm, and the main
entry point `render_image`.

In the documentation of these classes, we indicate the expected types of arguments with a
colon, and use the convention that just writing a tuple means that the expected type is a
NumPy array of that shape.  Implementations can assume these types are preconditions that
are met, and if they fail for other type inputs it's an error of the caller.
"""

EPS = 1e-4 # for offsetting secondary rays off the surface
AA_SAMPLES = 4 # antialiasing uses AA_SAMPLES x AA_SAMPLES sub-pixels

# Fixed jitter offsets in [0, 1).  Rendering walks this table with a cursor
# that wraps around, so antialiased images come out identical every run.
JITTER = (
    0.8147, 0.9058, 0.1270, 0.9134, 0.6324, 0.0975, 0.2785, 0.5469,
    0.9575, 0.9649, 0.1576, 0.9706, 0.9572, 0.4854, 0.8003, 0.1419,
    0.4218, 0.9157, 0.7922, 0.9595, 0.6557, 0.0357, 0.8491, 0.9340,
    0.6787, 0.7577, 0.7431, 0.3922, 0.6555, 0.1712, 0.7060, 0.0318,
    0.2769, 0.0462, 0.0971, 0.8235, 0.6948,
)


class Ray:

    def __init__(self, origin, direction, start=0., end=SENTINEL):
        """Create a ray with the given origin and direction.

        Parameters:
          origin : (3,) -- the start point of the ray, a 3D point
          direction : (3,) -- the direction of the ray, a 3D vector (not necessarily normalized)
          start, end : float -- hits count for start <= t < end
        """
        # Convert these vectors to double to help ensure intersection
        # computations will be done in double precision
        self.origin = np.array(origin, np.float64)
        self.direction = np.array(direction, np.float64)
        self.start = start
        self.end = end

    def at(self, t):
        return self.origin + self.direction * t


class ViewPlane:

    def __init__(self, eye=vec([0,0,0]), left=-1., right=1., bottom=-1., top=1., plane_z=0.):
        """Create a view plane seen from the given eye point.

        Parameters:
          eye : (3,) -- the viewpoint all primary rays start from
          left, right, bottom, top : float -- the rectangle of the plane that fills the image
          plane_z : float -- z coordinate of the plane

        This is not a general pinhole camera: the plane is always
        perpendicular to the z axis and directions are not normalized.
        With plane_z = 0 every primary ray has z component -eye.z.
        """
        self.eye = np.array(eye, np.float64)
        self.left = left
        self.right = right
        self.bottom = bottom
        self.top = top
        self.plane_z = plane_z

    def plane_point(self, row_pos, col_pos, nx, ny):
        """Map a (fractional) pixel position to a 3D point on the view plane.

        Parameters:
          row_pos, col_pos : float -- pixel coordinates, row 0 at the bottom;
                             (row + 0.5, col + 0.5) is the center of a pixel
          nx, ny : int -- image width and height
        """
        u = self.left + (self.right - self.left) * col_pos / nx
        v = self.bottom + (self.top - self.bottom) * row_pos / ny
        return vec([u, v, self.plane_z])

    def generate_ray(self, row_pos, col_pos, nx, ny):
        """Compute the primary ray through a point in the image."""
        point = self.plane_point(row_pos, col_pos, nx, ny)
        return Ray(self.eye, point - self.eye, 0., SENTINEL)


class PointLight:

    def __init__(self, position):
        """Create a point light at the given position.

        Parameters:
          position : (3,) -- 3D point giving the light source location in scene
        """
        self.position = np.array(position, np.float64)

    def direction_from(self, point):
        return normalize(self.position - point)

    def is_shadowed(self, point, scene):
        """True if anything lies along the shadow ray from point toward the light.

        The shadow ray is not cut off at the light, so surfaces behind the
        light also count as blockers.
        """
        light_vec = self.direction_from(point)
        shadow_ray = Ray(point + light_vec * EPS, light_vec, EPS, SENTINEL)
        return scene.is_occluded(shadow_ray)

    def illuminate(self, ray, point, normal, material):
        """Compute the diffuse and specular light reflected at a surface point.

        Parameters:
          ray : Ray -- the ray that hit the surface
          point : (3,) -- the hit point
          normal : (3,) -- unit surface normal at the hit point
          material : Material -- the material of the surface
        Return:
          (3,) -- the light reflected from the surface
        """
        light_vec = self.direction_from(point)
        view_vec = normalize(-ray.direction)
        halfway_vec = normalize(view_vec + light_vec)

        diffuse = max(0.0, np.dot(normal, light_vec))
        specular = max(0.0, np.dot(normal, halfway_vec)) ** material.p

        return material.k_d * diffuse + material.k_s * specular


class Jitter:

    def __init__(self, table=JITTER):
        """Walk a fixed table of sample offsets, wrapping at the end.

        Parameters:
          table : [float] -- offsets in [0, 1)
        """
        self.table = tuple(table)
        self.cursor = 0

    def __iter__(self):
        return self

    def __next__(self):
        value = self.table[self.cursor]
        self.cursor = (self.cursor + 1) % len(self.table)
        return value


def shade(ray, scene, light, config, depth):
    """Compute the color seen along a ray.

    Parameters:
      ray : Ray -- the ray to follow, with its [start, end) interval
      scene : Scene -- the scene
      light : PointLight -- the light
      config : RenderConfig -- the shadows and reflection switches
      depth : int -- how many more mirror bounces may be followed
    Return:
      (3,) -- the color seen along this ray, not clamped

    A shadowed point gets the ambient term only: no diffuse, no specular
    and no mirror reflection.  Recursion stops once depth reaches 0.
    """
    hit = scene.intersect(ray)
    if hit is None:
        return np.array(scene.bg_color, np.float64)

    material = hit.material
    point = ray.at(hit.t)
    normal = hit.surface.normal(point)

    color = np.array(material.k_a, np.float64)

    if config.shadows and light.is_shadowed(point, scene):
        return color

    color += light.illuminate(ray, point, normal, material)

    if config.reflection and depth > 0 and material.is_mirror:
        direction = ray.direction
        reflection_direction = direction - normal * 2 * np.dot(direction, normal)
        reflection_ray = Ray(point + reflection_direction * EPS, reflection_direction, EPS, SENTINEL)
        color += material.k_m * shade(reflection_ray, scene, light, config, depth - 1)

    return color


def trace_pixel(view, scene, light, config, row, col, jitter=None):
    """Compute the color of one pixel.

    Parameters:
      view : ViewPlane -- where the primary rays come from
      scene, light, config -- as for shade
      row, col : int -- the pixel, row 0 at the bottom
      jitter : Jitter -- sub-pixel offsets, only used when antialiasing
    Return:
      (3,) -- the pixel color

    Antialiased samples are stratified: each jitter value is an offset
    inside one of the AA_SAMPLES x AA_SAMPLES cells, so a table of 0.5
    samples the cell centers rather than the pixel center.
    """
    nx, ny = config.width, config.height
    if not config.antialias:
        ray = view.generate_ray(row + 0.5, col + 0.5, nx, ny)
        return shade(ray, scene, light, config, config.reflection_depth)

    if jitter is None:
        jitter = Jitter()
    color = np.zeros(3)
    for sy in range(AA_SAMPLES):
        for sx in range(AA_SAMPLES):
            col_pos = col + (sx + next(jitter)) / AA_SAMPLES
            row_pos = row + (sy + next(jitter)) / AA_SAMPLES
            ray = view.generate_ray(row_pos, col_pos, nx, ny)
            color += shade(ray, scene, light, config, config.reflection_depth)
    return color / (AA_SAMPLES * AA_SAMPLES)


def render_image(view, scene, light, config=None, framebuffer=None, jitter=None):
    """Render a ray traced image.

    Parameters:
      view : ViewPlane -- the eye point and view rectangle
      scene : Scene -- the scene to be rendered
      light : PointLight -- the light illuminating the scene
      config : RenderConfig -- image size and switches (defaults to RenderConfig())
      framebuffer : Framebuffer -- where pixels are written (a new one if not given)
      jitter : Jitter -- antialiasing offsets, shared by all pixels of the image
    Returns:
      Framebuffer -- the framebuffer holding the image
    """
    if config is None:
        config = RenderConfig()
    config.validate()

    nx, ny = config.width, config.height
    if framebuffer is None:
        framebuffer = Framebuffer(nx, ny)
    elif (framebuffer.width, framebuffer.height) != (nx, ny):
        raise ValueError(
            f"framebuffer is {framebuffer.width}x{framebuffer.height}, config asks for {nx}x{ny}")

    if jitter is None:
        jitter = Jitter()

    for i in range(ny):
        if config.verbose:
            print(f"rendering row {i+1}/{ny}...")
        for j in range(nx):
            color = trace_pixel(view, scene, light, config, i, j, jitter)
            framebuffer.set_pixel(i, j, color)

    return framebuffer
