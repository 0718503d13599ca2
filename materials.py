class Material:

    def __init__(self, k_d, k_s=0., p=20., k_m=0., k_a=None):
        """Create a new material with the given parameters.

        Parameters:
          k_d : (3,) -- Diffuse coefficient (color)
          k_s : (3,) or float -- Specular coefficient
          p : float -- Specular exponent (shininess), at least 0
          k_m : float -- Mirror reflectance, between 0 and 1
          k_a : (3,) -- Ambient coefficient (defaults to k_d)

        Materials are shared freely between surfaces and are not modified
        once the scene is built.
        """
        self.k_d = k_d
        self.k_s = k_s
        self.p = p
        self.k_m = k_m
        self.k_a = k_a if k_a is not None else k_d

    @property
    def is_mirror(self):
        return self.k_m != 0
