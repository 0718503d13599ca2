from config import RenderConfig
from scenes import ThreeSpheresExample
from cli import render


config = RenderConfig(width=320, height=256, reflection_depth=4, antialias=True, verbose=True)

render(ThreeSpheresExample(), config, 'three_spheres.png')
