import os
import struct
import sys
from collections import namedtuple

from PIL import Image

PAGE_HEIGHT = 8
THRESHOLD = 0x80  # grayscale intensity at or above which a pixel is on
INDENT = "    "

# Fixed-path variant
DEFAULT_IMAGE_PATH = "../images/head.png"
DEFAULT_SYMBOL = "image"

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
COLOR_GRAYSCALE = 0
COLOR_TYPE_NAMES = {
    0: "grayscale",
    2: "RGB",
    3: "indexed",
    4: "grayscale with alpha",
    6: "RGBA",
}

SourceImage = namedtuple("SourceImage", "width height color_type bit_depth pixels")


class BitmapError(Exception):
    pass


class DecodeError(BitmapError):
    pass


class FormatError(BitmapError):
    pass


def read_png_header(stream):
    """Return (width, height, bit_depth, color_type) from the IHDR chunk."""
    header = stream.read(len(PNG_SIGNATURE) + 8 + 13)
    if len(header) < 29 or not header.startswith(PNG_SIGNATURE):
        raise DecodeError("not a PNG file")
    if header[12:16] != b"IHDR":
        raise DecodeError("missing IHDR chunk")
    return struct.unpack(">IIBB", header[16:26])


def check_chunks(stream):
    """Walk the chunk list after IHDR and fail unless it reaches IEND."""
    while True:
        head = stream.read(8)
        if len(head) < 8:
            raise DecodeError("truncated PNG file: missing IEND chunk")
        length, kind = struct.unpack(">I4s", head)
        body = stream.read(length + 4)
        if len(body) < length + 4:
            raise DecodeError(f"truncated PNG file: short {kind.decode('latin-1')} chunk")
        if kind == b"IEND":
            return


def decode_png(path):
    with open(path, "rb") as f:
        width, height, bit_depth, color_type = read_png_header(f)
        if width == 0 or height == 0:
            raise FormatError(f"empty image: {width} x {height}")
        f.read(4)  # IHDR CRC
        check_chunks(f)
        f.seek(0)
        try:
            # An APNG might contain several frames; Pillow opens on the first.
            image = Image.open(f, formats=["PNG"])
            image.load()
        except (OSError, SyntaxError, ValueError, Image.DecompressionBombError) as e:
            raise DecodeError(f"cannot decode {path}: {e}") from e
        pixels = image.tobytes()

    return SourceImage(width, height, color_type, bit_depth, pixels)


def validate(image):
    if image.color_type != COLOR_GRAYSCALE:
        name = COLOR_TYPE_NAMES.get(image.color_type, f"type {image.color_type}")
        raise FormatError(f"expected 8-bit grayscale image, got {name}")
    if image.bit_depth != 8:
        raise FormatError(f"expected 8-bit grayscale image, got bit depth {image.bit_depth}")
    if image.width <= 0 or image.height <= 0:
        raise FormatError(f"empty image: {image.width} x {image.height}")


def pack(width, height, pixels, threshold=THRESHOLD):
    """Pack row-major grayscale pixels into pages of vertical 8-pixel strips.

    Returns one ``bytes`` object per page, each ``width`` long. Bit ``b`` of
    the byte for column ``x`` in page ``p`` is set when the pixel at row
    ``p * 8 + b`` is at least ``threshold``. Rows past the bottom of the
    image stay clear.
    """
    if width <= 0 or height <= 0:
        raise FormatError(f"empty image: {width} x {height}")
    if len(pixels) != width * height:
        raise FormatError(f"expected {width * height} pixels, got {len(pixels)}")

    pages = []
    for page in range(0, height, PAGE_HEIGHT):
        row = bytearray(width)
        for x in range(width):
            byte = 0
            for bit in range(PAGE_HEIGHT):
                y = page + bit
                if y < height and pixels[y * width + x] >= threshold:
                    byte |= (1 << bit)
            row[x] = byte
        pages.append(bytes(row))
    return pages


def format_c_array(symbol, pages):
    output_lines = [f"static const char {symbol}[] = {{"]
    for page in pages:
        output_lines.append(INDENT + "".join(f"0x{byte:02x}, " for byte in page))
    output_lines.append("};")
    return "\n".join(output_lines) + "\n"


def symbol_name(path):
    return os.path.splitext(os.path.basename(path))[0]


def image_to_c_array(path=DEFAULT_IMAGE_PATH, symbol=DEFAULT_SYMBOL):
    image = decode_png(path)
    validate(image)
    pages = pack(image.width, image.height, image.pixels)
    return format_c_array(symbol, pages)


def run(path, symbol):
    if not os.path.isfile(path):
        print(f"Error: File not found: {path}", file=sys.stderr)
        sys.exit(1)

    try:
        text = image_to_c_array(path, symbol)
    except (BitmapError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.stdout.write(text)


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    if len(argv) != 1:
        print("Usage: png2pages <image_path>", file=sys.stderr)
        sys.exit(2)

    image_path = argv[0]
    run(image_path, symbol_name(image_path))


def head_main():
    run(DEFAULT_IMAGE_PATH, DEFAULT_SYMBOL)


if __name__ == "__main__":
    main()
