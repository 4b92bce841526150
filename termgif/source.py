"""Decoded GIF animations

This module exposes functions for
    - fetching the raw bytes of a GIF from a local path or an HTTP(S) URL
    (`fetch`)
    - splitting a GIF stream into its sub-images together with their
    position on the logical screen, delay and disposal method (`decode`)

Pillow composites the frames of an animated GIF on its own when seeking
through them, which hides the sub-images and their disposal methods. To keep
them, the block structure of the stream is walked here and every sub-image is
repackaged as a standalone single-image GIF that Pillow decodes to RGBA.
"""

import io
import logging
import struct
from collections import namedtuple

import requests
from PIL import Image

from termgif import config

logger = logging.getLogger(__name__)

GIF_SIGNATURES = (b'GIF87a', b'GIF89a')

IMAGE_SEPARATOR = 0x2c
EXTENSION_INTRODUCER = 0x21
TRAILER = 0x3b
GRAPHIC_CONTROL_LABEL = 0xf9


class GifError(Exception):
    pass


class FetchError(GifError):
    pass


class DecodeError(GifError):
    pass


class Disposal:
    """Disposal methods of the Graphic Control Extension

    Codes 0 (unspecified), 1 (do not dispose) and the reserved codes 4-7 all
    leave the canvas untouched.
    """
    NONE = 0
    BACKGROUND = 2
    PREVIOUS = 3

    @classmethod
    def from_code(cls, code):
        if code in (cls.BACKGROUND, cls.PREVIOUS):
            return code
        return cls.NONE


_SubFrame = namedtuple('_SubFrame', ['image', 'box', 'disposal', 'delay'])


class SubFrame(_SubFrame):
    """Sub-image of an animated GIF

    image: RGBA image of the sub-image, transparent pixels have alpha 0
    box: (left, top, right, bottom) position of the sub-image on the canvas
    disposal: how the canvas is altered before the next frame is drawn
    delay: display time in hundredths of a second (0 is valid)
    """
    __slots__ = ()

    @property
    def width(self):
        return self.box[2] - self.box[0]

    @property
    def height(self):
        return self.box[3] - self.box[1]


_GraphicControl = namedtuple('_GraphicControl', ['disposal', 'delay', 'transparency'])
_NO_GRAPHIC_CONTROL = _GraphicControl(Disposal.NONE, 0, None)


class FrameSource:
    """Sub-frames of a decoded GIF, immutable once built"""
    def __init__(self, subframes, screen_size=(0, 0)):
        self._subframes = tuple(subframes)
        self.screen_size = screen_size

    @property
    def subframes(self):
        return self._subframes

    @property
    def delays(self):
        return [subframe.delay for subframe in self._subframes]

    def __len__(self):
        return len(self._subframes)

    def __iter__(self):
        return iter(self._subframes)

    def __getitem__(self, index):
        return self._subframes[index]


def is_url(source):
    return source.startswith('http://') or source.startswith('https://')


def fetch(source, timeout=config.FETCH_TIMEOUT):
    """Return the raw bytes found at `source`

    :param source: URL starting with http:// or https://, or local path
    :param timeout: Timeout of HTTP requests in seconds
    Raise FetchError if the data cannot be retrieved
    """
    if is_url(source):
        logger.info('Downloading GIF from {}...'.format(source))
        try:
            response = requests.get(source, timeout=timeout)
        except requests.RequestException as exc:
            raise FetchError('failed to download: {}'.format(exc)) from exc
        if response.status_code != requests.codes.ok:
            raise FetchError('HTTP error: {} {}'.format(response.status_code,
                                                        response.reason))
        return response.content

    try:
        with open(source, 'rb') as gif_file:
            return gif_file.read()
    except OSError as exc:
        raise FetchError('failed to open file: {}'.format(exc)) from exc


class _Reader:
    def __init__(self, data):
        self.data = data
        self.offset = 0

    def read(self, length):
        chunk = self.data[self.offset:self.offset + length]
        if len(chunk) < length:
            raise DecodeError('unexpected end of GIF data at offset {}'
                              .format(self.offset))
        self.offset += length
        return chunk

    def byte(self):
        return self.read(1)[0]

    def skip_subblocks(self):
        size = self.byte()
        while size:
            self.read(size)
            size = self.byte()


def _color_table_size(packed_fields):
    return 3 * 2 ** ((packed_fields & 0b111) + 1)


def _read_graphic_control(reader):
    block_size = reader.byte()
    block = reader.read(block_size)
    if block_size >= 4:
        packed_fields, delay, transparent_index = struct.unpack('<BHB', block[:4])
        transparency = transparent_index if packed_fields & 0b1 else None
        control = _GraphicControl(Disposal.from_code((packed_fields >> 2) & 0b111),
                                  delay, transparency)
    else:
        control = _NO_GRAPHIC_CONTROL
    reader.skip_subblocks()
    return control


def _standalone_gif(lsd_fields, global_table, control, width, height,
                    image_fields, local_table, image_data):
    """Build a single-image GIF holding one sub-image placed at (0, 0)"""
    chunks = [
        b'GIF89a',
        struct.pack('<HHBBB', width, height, lsd_fields, 0, 0),
        global_table,
    ]
    if control.transparency is not None:
        chunks.append(struct.pack('<BBBBHBB', EXTENSION_INTRODUCER,
                                  GRAPHIC_CONTROL_LABEL, 4, 0b1, 0,
                                  control.transparency, 0))
    chunks.extend([
        struct.pack('<BHHHHB', IMAGE_SEPARATOR, 0, 0, width, height, image_fields),
        local_table,
        image_data,
        bytes([TRAILER]),
    ])
    return b''.join(chunks)


def _decode_image(gif_data, width, height):
    if width == 0 or height == 0:
        return Image.new('RGBA', (width, height))
    try:
        with Image.open(io.BytesIO(gif_data)) as image:
            return image.convert('RGBA')
    except (OSError, SyntaxError, ValueError) as exc:
        raise DecodeError('failed to decode GIF: {}'.format(exc)) from exc


def decode(data):
    """Return a FrameSource made of the sub-frames of GIF data

    Raise DecodeError if the data is not a valid GIF stream
    """
    reader = _Reader(data)
    if reader.read(6) not in GIF_SIGNATURES:
        raise DecodeError('failed to decode GIF: not a GIF file')

    screen_width, screen_height, lsd_fields, _, _ = struct.unpack('<HHBBB', reader.read(7))
    global_table = b''
    if lsd_fields & 0b10000000:
        global_table = reader.read(_color_table_size(lsd_fields))

    subframes = []
    control = _NO_GRAPHIC_CONTROL
    while True:
        block_type = reader.byte()
        if block_type == IMAGE_SEPARATOR:
            left, top, width, height, image_fields = struct.unpack('<HHHHB', reader.read(9))
            local_table = b''
            if image_fields & 0b10000000:
                local_table = reader.read(_color_table_size(image_fields))
            start = reader.offset
            reader.byte()  # LZW minimum code size
            reader.skip_subblocks()
            image_data = data[start:reader.offset]

            gif_data = _standalone_gif(lsd_fields, global_table, control, width,
                                       height, image_fields, local_table, image_data)
            subframes.append(SubFrame(image=_decode_image(gif_data, width, height),
                                      box=(left, top, left + width, top + height),
                                      disposal=control.disposal,
                                      delay=control.delay))
            control = _NO_GRAPHIC_CONTROL
        elif block_type == EXTENSION_INTRODUCER:
            if reader.byte() == GRAPHIC_CONTROL_LABEL:
                control = _read_graphic_control(reader)
            else:
                reader.skip_subblocks()
        elif block_type == TRAILER:
            break
        else:
            raise DecodeError('failed to decode GIF: unknown block type 0x{:02x} '
                              'at offset {}'.format(block_type, reader.offset - 1))

    if not subframes:
        raise DecodeError('failed to decode GIF: no image found')

    logger.debug('Decoded {} frames ({}x{} logical screen)'
                 .format(len(subframes), screen_width, screen_height))
    return FrameSource(subframes, (screen_width, screen_height))


def load(source):
    """Fetch and decode the GIF found at `source` (URL or local path)

    Raise FetchError or DecodeError on failure
    """
    return decode(fetch(source))
