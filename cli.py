import argparse
import time

from config import RenderConfig
from scenes import SCENES, MeshExample
from utils import read_obj_triangles


def render(scene_def, config=None, output_path='out.png', show=False):
    """Render a SceneDef, save it and report how long it took.

    Parameters:
      scene_def : SceneDef -- the view, scene and light to render
      config : RenderConfig -- render options (defaults to RenderConfig())
      output_path : str -- image file to write, or None to skip writing
      show : bool -- also display the result with matplotlib
    Return:
      Framebuffer -- the rendered image
    """
    if config is None:
        config = RenderConfig()
    config.validate()

    print(f"Starting render: {config}")
    start_time = time.time()
    fb = scene_def.render(config, output_path)
    end_time = time.time()
    print(f"Render complete in: {end_time - start_time:.2f} seconds")

    if output_path is not None:
        print(f"Wrote {output_path}")
    if show:
        fb.show(title=output_path)
    return fb


def build_parser():
    parser = argparse.ArgumentParser(description='Recursive scanline ray tracer')
    parser.add_argument('--scene', choices=sorted(SCENES), default='three_spheres',
                        help='built-in scene to render')
    parser.add_argument('--obj', type=str, default=None,
                        help='render the triangles of a Wavefront OBJ file instead of a built-in scene')
    parser.add_argument('-o', '--output', type=str, default='out.png', help='output image file')
    parser.add_argument('--width', type=int, default=256, help='image width')
    parser.add_argument('--height', type=int, default=256, help='image height')
    parser.add_argument('--depth', type=int, default=3, help='maximum number of mirror bounces')
    parser.add_argument('--no-shadows', action='store_true', help='skip shadow rays')
    parser.add_argument('--no-reflection', action='store_true', help='skip mirror reflection')
    parser.add_argument('--antialias', action='store_true', help='4x4 jittered samples per pixel')
    parser.add_argument('--show', action='store_true', help='display the image when done')
    parser.add_argument('--verbose', action='store_true', help='print progress per row')
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    config = RenderConfig(
        width=args.width,
        height=args.height,
        shadows=not args.no_shadows,
        reflection=not args.no_reflection,
        reflection_depth=args.depth,
        antialias=args.antialias,
        verbose=args.verbose,
    )
    try:
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    if args.obj is not None:
        try:
            with open(args.obj) as f:
                vs_list = read_obj_triangles(f)
        except OSError as e:
            parser.error(f"cannot read OBJ file {args.obj}: {e.strerror or e}")
        if len(vs_list) == 0:
            parser.error(f"no triangles in {args.obj}")
        print(f"Loaded {len(vs_list)} triangles.")
        scene_def = MeshExample(vs_list)
    else:
        scene_def = SCENES[args.scene]()

    render(scene_def, config, args.output, show=args.show)
    return 0


if __name__ == '__main__':
    main()
