import numpy as np
from PIL import Image


def pack_color(color):
    """Pack an RGB color into 8-bit RGBA.

    Channels are clipped to [0, 1] and scaled to 0..255 (truncating);
    alpha is always opaque.
    """
    rgb = (np.clip(np.asarray(color, np.float64)[:3], 0.0, 1.0) * 255.0).astype(np.uint8)
    return np.append(rgb, np.uint8(255))


class Framebuffer:

    def __init__(self, width, height):
        """Create a black, opaque RGBA framebuffer.

        Parameters:
          width, height : int -- size in pixels

        Pixels are addressed by (row, col) with row 0 at the bottom of the
        image; the backing array is stored top row first, as image files
        expect.
        """
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, 4), np.uint8)
        self.pixels[:, :, 3] = 255

    @property
    def shape(self):
        return self.pixels.shape

    def set_pixel(self, row, col, color):
        self.pixels[self.height - 1 - row, col] = pack_color(color)

    def get_pixel(self, row, col):
        return self.pixels[self.height - 1 - row, col]

    def to_pil(self):
        return Image.fromarray(self.pixels)

    def write(self, output_path):
        """Save the framebuffer to an image file; the format follows the extension."""
        self.to_pil().save(output_path)

    def show(self, title=None):
        """Display the framebuffer in a matplotlib window."""
        import matplotlib.pyplot as plt

        plt.figure()
        plt.imshow(self.pixels, interpolation='nearest')
        plt.axis('off')
        if title is not None:
            plt.title(title)
        plt.show()
