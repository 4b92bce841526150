"""GIF streams built byte by byte for the tests

Pixel data is LZW encoded with a clear code before every pixel so that the
code size never grows past 3 bits.
"""

import struct
from collections import namedtuple

RED = (255, 0, 0)
GREEN = (0, 255, 0)
BLUE = (0, 0, 255)
WHITE = (255, 255, 255)
PALETTE = [RED, GREEN, BLUE, WHITE]

Frame = namedtuple('Frame', ['box', 'indexes', 'delay', 'disposal', 'transparency'])

_MIN_CODE_SIZE = 2
_CLEAR_CODE = 4
_END_CODE = 5
_CODE_SIZE = 3


def lzw_data(indexes):
    codes = []
    for index in indexes:
        codes.extend([_CLEAR_CODE, index])
    codes.append(_END_CODE)

    packed = bytearray()
    bits = 0
    bit_count = 0
    for code in codes:
        bits |= code << bit_count
        bit_count += _CODE_SIZE
        while bit_count >= 8:
            packed.append(bits & 0xff)
            bits >>= 8
            bit_count -= 8
    if bit_count:
        packed.append(bits & 0xff)

    data = bytearray([_MIN_CODE_SIZE])
    for start in range(0, len(packed), 255):
        chunk = packed[start:start + 255]
        data.append(len(chunk))
        data.extend(chunk)
    data.append(0)
    return bytes(data)


def gif_data(screen_size, frames, palette=PALETTE):
    """Return a GIF89a stream with a 4 color global color table

    :param screen_size: (width, height) of the logical screen
    :param frames: Sequence of Frame, `indexes` being the palette index of
    each pixel of the box, row by row
    """
    chunks = [b'GIF89a', struct.pack('<HHBBB', screen_size[0], screen_size[1],
                                     0b10000001, 0, 0)]
    chunks.extend(bytes(color) for color in palette)
    # NETSCAPE2.0 looping extension, ignored by the decoder
    chunks.append(b'\x21\xff\x0bNETSCAPE2.0\x03\x01\x00\x00\x00')

    for frame in frames:
        left, top, right, bottom = frame.box
        packed_fields = frame.disposal << 2
        transparency = 0
        if frame.transparency is not None:
            packed_fields |= 0b1
            transparency = frame.transparency
        chunks.append(struct.pack('<BBBBHBB', 0x21, 0xf9, 4, packed_fields,
                                  frame.delay, transparency, 0))
        chunks.append(struct.pack('<BHHHHB', 0x2c, left, top, right - left,
                                  bottom - top, 0))
        chunks.append(lzw_data(frame.indexes))

    chunks.append(b'\x3b')
    return b''.join(chunks)


def three_frames_gif():
    """Return a 4x4 animation with disposal methods 1, 2 and 3, 300ms per frame"""
    return gif_data((4, 4), [
        Frame((0, 0, 4, 4), [0] * 16, 30, 1, None),
        Frame((1, 1, 3, 3), [1] * 4, 30, 2, None),
        Frame((0, 0, 2, 2), [2, 3, 3, 2], 30, 3, 3),
    ])
