from utils import *
from ray import *
from cli import render
from scenes import SceneDef


gray = Material(vec([0.5, 0.5, 0.5]), k_a=vec([0.1, 0.1, 0.1]))

# One small sphere centered at z=-0.5, lit from the eye
scene = Scene([
    Sphere(vec([0, 0, -0.5]), 0.25, gray),
], bg_color=vec([0, 0, 0]))

light = PointLight(vec([0, 0, 0]))
view = ViewPlane(vec([0, 0, 0]), -0.5, 0.5, -0.5, 0.5, plane_z=-0.5)

render(SceneDef(view, scene, light), RenderConfig(width=128, height=128), 'ortho_friendly.png')
