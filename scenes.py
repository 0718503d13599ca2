from ray import *
from utils import *


class SceneDef(object):
    def __init__(self, view, scene, light):
        self.view = view
        self.scene = scene
        self.light = light

    def render(self, config=None, output_path=None):
        """Render this scene; writes an image file when output_path is given.

        Returns the Framebuffer.
        """
        fb = render_image(self.view, self.scene, self.light, config)
        if output_path is not None:
            fb.write(output_path)
        return fb


def SingleSphereExample():
    white = Material(k_d=vec([1, 1, 1]), k_a=vec([0, 0, 0]))

    scene = Scene([
        Sphere(vec([0, 0, -5]), 1.0, white),
    ], bg_color=vec([0, 0, 0]))

    light = PointLight(vec([0, 5, 0]))
    # eye at the origin looking down -z through the plane z = -1
    view = ViewPlane(vec([0, 0, 0]), -0.5, 0.5, -0.5, 0.5, plane_z=-1.0)
    return SceneDef(view=view, scene=scene, light=light)


def ThreeSpheresExample():
    tan = Material(vec([0.4, 0.4, 0.2]), k_s=0.3, p=90, k_m=0.3, k_a=vec([0.04, 0.04, 0.02]))
    blue = Material(vec([0.2, 0.2, 0.5]), k_s=0.2, p=40, k_m=0.5, k_a=vec([0.02, 0.02, 0.05]))
    gray = Material(vec([0.2, 0.2, 0.2]), k_m=0.4, k_a=vec([0.02, 0.02, 0.02]))

    scene = Scene([
        Sphere(vec([-0.7, 0, -4]), 0.5, tan),
        Sphere(vec([0.7, 0, -4]), 0.5, blue),
        Sphere(vec([0, -40.5, -4]), 40.0, gray),
    ], bg_color=vec([0.2, 0.3, 0.5]))

    light = PointLight(vec([4, 6, 2]))
    view = ViewPlane(vec([0, 0.4, 2]), -1.0, 1.0, -0.6, 1.0)
    return SceneDef(view=view, scene=scene, light=light)


def MirrorRoomExample():
    red = Material(vec([0.7, 0.1, 0.1]), k_s=0.5, p=60, k_a=vec([0.07, 0.01, 0.01]))
    green = Material(vec([0.1, 0.6, 0.2]), k_s=0.5, p=60, k_a=vec([0.01, 0.06, 0.02]))
    mirror = Material(vec([0.05, 0.05, 0.05]), k_s=0.8, p=200, k_m=0.85, k_a=vec([0, 0, 0]))
    floor = Material(vec([0.5, 0.5, 0.45]), k_a=vec([0.05, 0.05, 0.05]))

    # floor quad at y = -1 and a back mirror at z = -8, two triangles each
    f0, f1, f2, f3 = vec([-4, -1, 0]), vec([4, -1, 0]), vec([4, -1, -8]), vec([-4, -1, -8])
    m0, m1, m2, m3 = vec([-4, -1, -8]), vec([4, -1, -8]), vec([4, 4, -8]), vec([-4, 4, -8])

    scene = Scene([
        Sphere(vec([-1, 0, -5]), 1.0, red),
        Sphere(vec([1.3, -0.4, -4]), 0.6, green),
        Triangle([f0, f1, f2], floor),
        Triangle([f0, f2, f3], floor),
        Triangle([m0, m1, m2], mirror),
        Triangle([m0, m2, m3], mirror),
    ], bg_color=vec([0.05, 0.05, 0.1]))

    light = PointLight(vec([2, 3.5, -1]))
    view = ViewPlane(vec([0, 0.5, 1]), -1.0, 1.0, -1.0, 1.0, plane_z=-1.0)
    return SceneDef(view=view, scene=scene, light=light)


def MeshExample(vs_list, material=None):
    """Put triangles read from an OBJ file in front of the eye, with a floor sphere."""
    if material is None:
        material = Material(vec([0.7, 0.7, 0.4]), k_s=0.6, p=40, k_a=vec([0.07, 0.07, 0.04]))
    gray = Material(vec([0.2, 0.2, 0.2]), k_m=0.3, k_a=vec([0.02, 0.02, 0.02]))

    vs_list = np.asarray(vs_list, np.float64)
    lo = vs_list.reshape(-1, 3).min(axis=0)
    hi = vs_list.reshape(-1, 3).max(axis=0)
    # fit the mesh into a unit box centered at (0, 0, -4)
    scale = 1.0 / max(np.max(hi - lo), 1e-12)
    vs_list = (vs_list - (lo + hi) * 0.5) * scale + vec([0, 0, -4])

    surfs = [Triangle(vs, material) for vs in vs_list]
    surfs.append(Sphere(vec([0, -40.5, -4]), 40.0, gray))

    light = PointLight(vec([3, 5, 1]))
    view = ViewPlane(vec([0, 0.3, 1]), -1.0, 1.0, -1.0, 1.0, plane_z=-1.0)
    return SceneDef(view=view, scene=Scene(surfs), light=light)


SCENES = {
    'single_sphere': SingleSphereExample,
    'three_spheres': ThreeSpheresExample,
    'mirror_room': MirrorRoomExample,
}
