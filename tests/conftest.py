import struct
import zlib

import pytest
from PIL import Image



def _chunk(kind, data):
    crc = zlib.crc32(kind + data) & 0xFFFFFFFF
    return struct.pack(">I", len(data)) + kind + data + struct.pack(">I", crc)


def write_raw_png(path, width, height, bit_depth, color_type, scanlines):
    """Write a PNG from pre-packed scanlines (filter byte is added here)."""
    ihdr = struct.pack(">IIBBBBB", width, height, bit_depth, color_type, 0, 0, 0)
    raw = b"".join(b"\x00" + line for line in scanlines)
    with open(path, "wb") as f:
        f.write(b"\x89PNG\r\n\x1a\n")
        f.write(_chunk(b"IHDR", ihdr))
        f.write(_chunk(b"IDAT", zlib.compress(raw)))
        f.write(_chunk(b"IEND", b""))
    return path


@pytest.fixture
def gray_png(tmp_path):
    def make(width, height, pixels, name="logo.png"):
        path = tmp_path / name
        image = Image.new("L", (width, height))
        image.putdata(list(pixels))
        image.save(path)
        return str(path)
    return make


@pytest.fixture
def raw_png(tmp_path):
    def make(width, height, bit_depth, color_type, scanlines, name="raw.png"):
        return write_raw_png(str(tmp_path / name), width, height, bit_depth, color_type, scanlines)
    return make
