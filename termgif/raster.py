"""Rendering of images as rows of colored half block characters

Each character cell of the terminal displays two vertically stacked pixels:
the upper one as the foreground color of an upper half block and the lower
one as the background color. Pixels are twice as wide as they are tall once
rendered, so every pixel column is drawn as two identical characters.
"""

from collections import namedtuple

from colors import color
from PIL import Image

UPPER_HALF_BLOCK = '▀'
LOWER_HALF_BLOCK = '▄'
BLANK = ' '

# Number of characters used to draw one column of pixels
GLYPH_WIDTH = 2

TRANSPARENT = (0, 0, 0, 0)

Progress = namedtuple('Progress', ['partial_frame', 'rows_complete', 'total_rows'])


def calculate_image_size(source_size, columns, lines):
    """Return the size in pixels of an image fitting a terminal screen

    The aspect ratio of the source is preserved. The width is maximized first,
    the height is used instead if the image would then be too tall.

    :param source_size: (width, height) of the source image in pixels
    :param columns: Number of columns of the terminal
    :param lines: Number of lines of the terminal
    """
    source_width, source_height = source_size
    if source_width <= 0 or source_height <= 0:
        return 0, 0

    width = columns // GLYPH_WIDTH
    ratio = source_height / source_width
    height = int(width * ratio * 2)

    if height > lines * 2:
        height = lines * 2
        width = int(height / ratio / 2)

    return width, height


def _premultiplied_8bit(channel, alpha):
    return (channel * 0x101 * alpha // 0xff) >> 8


def hex_color(pixel):
    """Return the '#rrggbb' color of an RGBA pixel drawn over black"""
    red, green, blue, alpha = pixel
    return '#{:02x}{:02x}{:02x}'.format(_premultiplied_8bit(red, alpha),
                                        _premultiplied_8bit(green, alpha),
                                        _premultiplied_8bit(blue, alpha))


def render_half_block_char(top, bottom):
    """Return the characters displaying two vertically stacked RGBA pixels"""
    top_visible = top[3] != 0
    bottom_visible = bottom[3] != 0

    if not top_visible and not bottom_visible:
        return BLANK * GLYPH_WIDTH

    if not top_visible:
        return color(LOWER_HALF_BLOCK * GLYPH_WIDTH, fg=hex_color(bottom))

    if not bottom_visible:
        return color(UPPER_HALF_BLOCK * GLYPH_WIDTH, fg=hex_color(top))

    return color(UPPER_HALF_BLOCK * GLYPH_WIDTH, fg=hex_color(top), bg=hex_color(bottom))


def rasterize(image, columns, lines, progress=None):
    """Render an image as text fitting a terminal screen

    The image is resized with a Lanczos filter then rendered two pixel rows at
    a time, each text row ending with a newline.

    :param image: PIL image
    :param columns: Number of columns of the terminal
    :param lines: Number of lines of the terminal
    :param progress: Optional callable receiving a Progress instance after
    every other text row and after the last one
    """
    width, height = calculate_image_size(image.size, columns, lines)
    if width <= 0 or height <= 0:
        return ''

    if image.mode != 'RGBA':
        image = image.convert('RGBA')
    resized = image.resize((width, height), Image.Resampling.LANCZOS)
    pixels = resized.load()

    total_rows = (height + 1) // 2
    rows = []
    for row_count, y in enumerate(range(0, height, 2), start=1):
        glyphs = []
        for x in range(width):
            top = pixels[x, y]
            bottom = pixels[x, y + 1] if y + 1 < height else TRANSPARENT
            glyphs.append(render_half_block_char(top, bottom))
        rows.append(''.join(glyphs) + '\n')

        if progress is not None and (row_count % 2 == 0 or row_count == total_rows):
            progress(Progress(''.join(rows), row_count, total_rows))

    return ''.join(rows)
