import numbers


class RenderConfig:

    def __init__(self, width=256, height=256, shadows=True, reflection=True,
                 reflection_depth=3, antialias=False, verbose=False):
        """Options for one render.

        Parameters:
          width, height : int -- image size in pixels, both > 0
          shadows : bool -- cast shadow rays toward the light
          reflection : bool -- follow mirror reflections
          reflection_depth : int -- how many mirror bounces to follow (>= 0)
          antialias : bool -- 4x4 stratified jittered samples per pixel
          verbose : bool -- print a line per rendered row
        """
        self.width = width
        self.height = height
        self.shadows = shadows
        self.reflection = reflection
        self.reflection_depth = reflection_depth
        self.antialias = antialias
        self.verbose = verbose

    def validate(self):
        """Raise ValueError if the options can't be rendered.  Returns self."""
        for name in ('width', 'height'):
            value = getattr(self, name)
            if not _is_int(value) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if not _is_int(self.reflection_depth) or self.reflection_depth < 0:
            raise ValueError(
                f"reflection_depth must be a non-negative integer, got {self.reflection_depth!r}")
        return self

    def __repr__(self):
        return (f"RenderConfig(width={self.width}, height={self.height}, "
                f"shadows={self.shadows}, reflection={self.reflection}, "
                f"reflection_depth={self.reflection_depth}, antialias={self.antialias})")


def _is_int(value):
    # bool is an Integral, but True is not an image size
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)
