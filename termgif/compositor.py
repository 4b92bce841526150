"""Reconstruction of the frames of a GIF animation

A GIF animation is made of sub-images which only cover part of the canvas,
each one coming with a disposal method describing what must happen to the
canvas before the next sub-image is drawn. `composite` replays these
instructions and yields the image actually visible at each frame.
"""

from PIL import Image

from termgif.source import Disposal

TRANSPARENT = (0, 0, 0, 0)


def canvas_box(subframes):
    """Return the (left, top, right, bottom) box enclosing every sub-frame

    The origin of the logical screen is always part of the canvas so sub-frames
    offset from the top left corner keep their margin.
    """
    left = top = right = bottom = 0
    for subframe in subframes:
        sub_left, sub_top, sub_right, sub_bottom = subframe.box
        left = min(left, sub_left)
        top = min(top, sub_top)
        right = max(right, sub_right)
        bottom = max(bottom, sub_bottom)

    return left, top, right, bottom


def _translate(box, left, top):
    return box[0] - left, box[1] - top, box[2] - left, box[3] - top


def composite(subframes):
    """Yield one RGBA image per sub-frame, in order

    Each image is a copy of the canvas after the sub-frame was drawn over what
    the disposal method of the previous sub-frame left of the canvas.
    """
    left, top, right, bottom = canvas_box(subframes)
    size = (right - left, bottom - top)
    current = Image.new('RGBA', size, TRANSPARENT)
    saved = None

    previous = None
    for subframe in subframes:
        if previous is not None:
            if previous.disposal == Disposal.BACKGROUND:
                current.paste(TRANSPARENT, _translate(previous.box, left, top))
            elif previous.disposal == Disposal.PREVIOUS:
                current = saved.copy()

        if subframe.disposal == Disposal.PREVIOUS:
            saved = current.copy()

        x, y, _, _ = _translate(subframe.box, left, top)
        image = subframe.image
        if image.mode != 'RGBA':
            image = image.convert('RGBA')
        if image.width and image.height:
            current.alpha_composite(image, dest=(x, y))

        yield current.copy()
        previous = subframe
