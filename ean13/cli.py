"""EAN-13 CLI: render, encode and check EAN-13 codes from the command line."""

import argparse
import io
import sys
from pathlib import Path

from ean13.errors import Ean13Error
from ean13.logging import audit, get_logger, setup_logging

log = get_logger("cli")

# CLI flag -> RenderConfig field
OPTION_FLAGS = {
    "module_width": ("--module-width", float, "Width of one bar module (px)"),
    "height": ("--height", float, "Main bar height (px)"),
    "guard_extend": ("--guard-extend", float, "Guard bar extension below the bars (px)"),
    "font_size": ("--font-size", float, "Digit font size (px)"),
    "text_margin": ("--text-margin", float, "Gap between bars and digits (px)"),
    "quiet_zone": ("--quiet-zone", float, "Quiet zone each side (px)"),
    "side_digit_gap": ("--side-digit-gap", float, "Gap between first digit and start guard (px)"),
    "padding_left": ("--padding-left", float, "Extra padding left (px)"),
    "padding_right": ("--padding-right", float, "Extra padding right (px)"),
    "padding_top": ("--padding-top", float, "Extra padding top (px)"),
    "padding_bottom": ("--padding-bottom", float, "Extra padding bottom (px)"),
    "background": ("--background", str, "Background colour (e.g. '#FFFFFF')"),
    "foreground": ("--foreground", str, "Bar and text colour (e.g. '#000000')"),
    "font": ("--font", str, "Font list, CSS style"),
    "isbn_font_size": ("--isbn-font-size", float, "ISBN caption font size (px)"),
}


def _render_options(args) -> dict:
    """Options given on the command line, leaving out the ones not set."""
    options = {name: getattr(args, name) for name in OPTION_FLAGS if getattr(args, name) is not None}
    if args.isbn:
        options["isbn_mode"] = True
    return options


def cmd_render(args):
    """Render a barcode image (PNG/JPEG via Pillow, or SVG)."""
    from ean13.config import load_config, resolve_config

    base = load_config(args.config) if args.config else None
    config = resolve_config(base, **_render_options(args))

    output = Path(args.output)
    fmt = (args.format or output.suffix.lstrip(".") or "png").lower()

    if fmt == "svg":
        from lxml import etree

        from ean13.vector import new_svg_surface, render_vector

        root = render_vector(new_svg_surface(), args.code, config)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(etree.tostring(root, pretty_print=True))
        print(f"Generated: {output} ({root.get('width')}x{root.get('height')}, svg)")
    else:
        from PIL import Image

        from ean13.raster import to_raster_bytes

        image_format = "JPEG" if fmt in ("jpg", "jpeg") else fmt.upper()
        data = to_raster_bytes(args.code, config, image_format)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(data)
        width, height = Image.open(io.BytesIO(data)).size
        print(f"Generated: {output} ({width}x{height})")


def cmd_encode(args):
    """Print the full 13-digit code and its module string."""
    from ean13.encoder import encode

    result = encode(args.code)
    print(f"Code:     {result.full_code}")
    print(f"Modules:  {result.encoding}")


def cmd_validate(args):
    """Check a code; exit status 0 when valid."""
    from ean13.encoder import normalize, validate

    ok = validate(args.code)
    print(f"{normalize(args.code) or args.code}: {'VALID' if ok else 'INVALID'}")
    sys.exit(0 if ok else 1)


def cmd_checksum(args):
    """Print the check digit for a 12-digit code."""
    from ean13.encoder import calculate_checksum, normalize

    print(calculate_checksum(normalize(args.code)))


def cmd_isbn(args):
    """Print the hyphenated ISBN caption for a code."""
    from ean13.encoder import encode
    from ean13.layout import format_isbn

    print(f"ISBN {format_isbn(encode(args.code).full_code)}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ean13", description="EAN-13 barcode renderer")

    # Global logging flags
    parser.add_argument("-V", "--verbose", action="store_true", help="Enable DEBUG-level logging")
    parser.add_argument("--log-file", default=None, help="Write JSON logs to file")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- render ---
    p_render = subparsers.add_parser("render", help="Render a barcode image")
    p_render.add_argument("code", help="12 or 13 digit EAN code")
    p_render.add_argument("-o", "--output", default="output/ean13.png", help="Output file path")
    p_render.add_argument("-f", "--format", default=None, choices=["png", "jpeg", "jpg", "gif", "bmp", "svg"],
                          help="Output format (default: from the output file extension)")
    p_render.add_argument("-c", "--config", default=None, help="JSON file of render options")
    p_render.add_argument("--isbn", action="store_true", help="Draw an ISBN caption above the bars")
    for name, (flag, kind, help_text) in OPTION_FLAGS.items():
        p_render.add_argument(flag, dest=name, type=kind, default=None, help=help_text)

    # --- encode ---
    p_enc = subparsers.add_parser("encode", help="Print the 95-module pattern of a code")
    p_enc.add_argument("code", help="12 or 13 digit EAN code")

    # --- validate ---
    p_val = subparsers.add_parser("validate", help="Check a code's length and check digit")
    p_val.add_argument("code", help="12 or 13 digit EAN code")

    # --- checksum ---
    p_sum = subparsers.add_parser("checksum", help="Compute the check digit of a 12-digit code")
    p_sum.add_argument("code", help="12 digit code")

    # --- isbn ---
    p_isbn = subparsers.add_parser("isbn", help="Format a code as a hyphenated ISBN")
    p_isbn.add_argument("code", help="12 or 13 digit ISBN-13/EAN code")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Setup logging before any command runs
    setup_logging(level="DEBUG" if args.verbose else None, log_file=args.log_file)
    audit("cli.start", logger=log, command=args.command, verbose=args.verbose)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    commands = {
        "render": cmd_render,
        "encode": cmd_encode,
        "validate": cmd_validate,
        "checksum": cmd_checksum,
        "isbn": cmd_isbn,
    }
    try:
        commands[args.command](args)
    except Ean13Error as e:
        log.error("%s failed: %s", args.command, e)
        print(f"error: {e}", file=sys.stderr)
        sys.exit(2)
    audit("cli.done", logger=log, command=args.command)


if __name__ == "__main__":
    main()
