#!/usr/bin/env python3
"""Comic encoder: chapter directories to cbz volumes, and back.

encode  → resolve chapters → resolve pages → plan volumes → write cbz files.
decode  → read a zip/cbz/pdf → write numbered page files.
rebuild → decode into a staging directory → encode a fresh cbz → remove staging.

Usage:
    python scripts/comic_encoder.py encode compile 5 manga/ -o volumes/ --create-output-dir
    python scripts/comic_encoder.py encode individual manga/ --chapters-suffix
    python scripts/comic_encoder.py encode single manga/ -o manga.cbz
    python scripts/comic_encoder.py decode manga.cbz -o pages/
    python scripts/comic_encoder.py rebuild scans.pdf
    python scripts/comic_encoder.py rebuild library/ --recursive --max-workers 4

Configuration:
    Defaults live in scripts/configs/common.py (CHAPTERS_PER_VOLUME, PDF_DPI, MAX_WORKERS).
"""

import argparse
import logging
import sys
import time
from pathlib import Path

# Add src/ to Python path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "src"))

from configs.common import (  # noqa: E402
    CHAPTERS_PER_VOLUME,
    MAX_WORKERS,
    PDF_DPI,
    TeeLogger,
    fmt_elapsed,
    fmt_time,
    setup_logging,
)

from decoder import DecodeConfig, decode  # noqa: E402
from encoder import EMPTY_CHAPTER_POLICIES, EncodeConfig, encode  # noqa: E402
from rebuild import RebuildConfig, rebuild, rebuild_directory  # noqa: E402
from shared.errors import ComicEncoderError  # noqa: E402


def _common_parser():
    common = argparse.ArgumentParser(add_help=False)
    verbosity = common.add_mutually_exclusive_group()
    verbosity.add_argument("--silent", "-s", action="store_true", help="Only display errors")
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Display debug messages")
    common.add_argument("--log-file", default=None, help="Also write the console output to this file")
    return common


def _encode_parser(common):
    encode_opts = argparse.ArgumentParser(add_help=False, parents=[common])
    encode_opts.add_argument(
        "--output", "-o", default=None,
        help="Output directory (output file for 'single'); defaults to the input directory",
    )
    encode_opts.add_argument("--create-output-dir", action="store_true", help="Create the output directory if missing")
    encode_opts.add_argument("--overwrite", action="store_true", help="Replace volumes that already exist")
    encode_opts.add_argument("--skip-existing", action="store_true", help="Leave volumes that already exist untouched")
    encode_opts.add_argument("--chapters-suffix", action="store_true", help="Add the chapters range to volume names")
    encode_opts.add_argument("--append-pages-count", action="store_true", help="Add the pages count to volume names")
    encode_opts.add_argument("--dirs-prefix", default=None, help="Only keep chapters whose name starts with this")
    encode_opts.add_argument("--start-chapter", type=int, default=None, help="First chapter to encode (1-indexed)")
    encode_opts.add_argument("--end-chapter", type=int, default=None, help="Last chapter to encode (1-indexed)")
    encode_opts.add_argument("--root-chapter", action="store_true", help="Treat the input directory as the only chapter")
    encode_opts.add_argument(
        "--container-chapters", action="store_true", help="Also treat .zip/.cbz/.pdf files in the input as chapters",
    )
    encode_opts.add_argument("--extended-image-formats", action="store_true", help="Accept tiff, gif, webp and more")
    encode_opts.add_argument("--disable-nat-sort", action="store_true", help="Sort names by codepoint instead")
    encode_opts.add_argument("--compress-losslessly", action="store_true", help="Deflate entries, convert bitmaps to PNG")
    encode_opts.add_argument("--no-verify-images", action="store_true", help="Do not parse image headers")
    encode_opts.add_argument(
        "--empty-chapters", choices=EMPTY_CHAPTER_POLICIES, default="error",
        help="What to do with chapters that have no page (default: error)",
    )
    encode_opts.add_argument("--max-workers", type=int, default=MAX_WORKERS, help="Volumes built in parallel")
    return encode_opts


def build_parser():
    common = _common_parser()
    parser = argparse.ArgumentParser(description="Comic encoder: chapter directories to cbz volumes, and back")
    commands = parser.add_subparsers(dest="command", required=True)

    # --- encode ---
    encode_opts = _encode_parser(common)
    encode_cmd = commands.add_parser("encode", help="Encode chapter directories into volumes")
    methods = encode_cmd.add_subparsers(dest="method", required=True)
    compile_cmd = methods.add_parser("compile", parents=[encode_opts], help="Groups of N chapters per volume")
    compile_cmd.add_argument("chapters_per_volume", type=int, help="Number of chapters per volume")
    individual_cmd = methods.add_parser("individual", parents=[encode_opts], help="One volume per chapter")
    single_cmd = methods.add_parser("single", parents=[encode_opts], help="Every chapter in one volume")
    for method_cmd in (compile_cmd, individual_cmd, single_cmd):
        method_cmd.add_argument("input", help="Directory containing the chapters")

    # --- decode ---
    decode_cmd = commands.add_parser("decode", parents=[common], help="Extract the pages of a zip/cbz/pdf")
    decode_cmd.add_argument("input", help="Comic file to decode")
    decode_cmd.add_argument("--output", "-o", default=None, help="Output directory (default: input without extension)")
    decode_cmd.add_argument("--overwrite", action="store_true", help="Replace page files that already exist")
    decode_cmd.add_argument("--images-only", action="store_true", help="Skip archive entries that are not images")
    decode_cmd.add_argument("--extended-image-formats", action="store_true", help="Accept tiff, gif, webp and more")
    decode_cmd.add_argument("--disable-nat-sort", action="store_true", help="Sort entries by codepoint instead")
    decode_cmd.add_argument("--skip-bad-pdf-pages", action="store_true", help="Skip PDF pages that fail to extract")
    decode_cmd.add_argument("--pdf-dpi", type=int, default=PDF_DPI, help=f"Render resolution (default: {PDF_DPI})")

    # --- rebuild ---
    rebuild_cmd = commands.add_parser("rebuild", parents=[common], help="Rebuild comics into fresh cbz volumes")
    rebuild_cmd.add_argument("input", help="Comic file, or a directory of comics")
    rebuild_cmd.add_argument("--output", "-o", default=None, help="Output file or directory (default: beside the source)")
    rebuild_cmd.add_argument("--create-output-dir", action="store_true", help="Create the output directory if missing")
    rebuild_cmd.add_argument("--overwrite", action="store_true", help="Replace outputs that already exist")
    rebuild_cmd.add_argument("--temporary-dir", default=None, help="Where to create staging directories")
    rebuild_cmd.add_argument("--extended-image-formats", action="store_true", help="Accept tiff, gif, webp and more")
    rebuild_cmd.add_argument("--disable-nat-sort", action="store_true", help="Sort entries by codepoint instead")
    rebuild_cmd.add_argument("--compress-losslessly", action="store_true", help="Deflate entries, convert bitmaps to PNG")
    rebuild_cmd.add_argument("--skip-bad-pdf-pages", action="store_true", help="Skip PDF pages that fail to extract")
    rebuild_cmd.add_argument("--pdf-dpi", type=int, default=PDF_DPI, help=f"Render resolution (default: {PDF_DPI})")
    rebuild_cmd.add_argument("--recursive", "-r", action="store_true", help="Look for comics in subdirectories too")
    rebuild_cmd.add_argument("--max-workers", type=int, default=MAX_WORKERS, help="Comics rebuilt in parallel")
    return parser


# =============================================================================
# Subcommands
# =============================================================================

def run_encode(args):
    config = EncodeConfig(
        mode=args.method,
        chapters_per_volume=getattr(args, "chapters_per_volume", CHAPTERS_PER_VOLUME),
        output=args.output,
        create_output_dir=args.create_output_dir,
        overwrite=args.overwrite,
        skip_existing=args.skip_existing,
        chapters_suffix=args.chapters_suffix,
        append_pages_count=args.append_pages_count,
        dirs_prefix=args.dirs_prefix,
        start_chapter=args.start_chapter,
        end_chapter=args.end_chapter,
        root_chapter=args.root_chapter,
        container_chapters=args.container_chapters,
        extended_image_formats=args.extended_image_formats,
        disable_nat_sort=args.disable_nat_sort,
        compress_losslessly=args.compress_losslessly,
        verify_images=not args.no_verify_images,
        empty_chapters=args.empty_chapters,
        max_workers=args.max_workers,
    )

    print("=" * 60)
    print(f"Encoding '{args.input}' ({args.method})")
    print("=" * 60)
    result = encode(args.input, config)

    print()
    print(f"Chapters: {result.chapters_selected} out of {result.chapters_total} ({result.chapters_ignored} ignored)")
    for volume in result.volumes:
        if volume.error is not None:
            status = f"FAILED: {volume.error}"
        elif volume.skipped_existing:
            status = "skipped (already exists)"
        else:
            status = f"{volume.pages} pages, {fmt_time(volume.elapsed)}"
        print(f"  {volume.number}. {volume.name} (c{volume.first_chapter}-c{volume.last_chapter}) {status}")
    for chapter, skipped in result.skipped_pages.items():
        print(f"  ! {chapter}: {len(skipped)} file(s) ignored")

    print("=" * 60)
    print(f"{len(result.succeeded)} volume(s) ok, {len(result.failed)} failed → {result.output}")
    return 1 if result.failed else 0


def run_decode(args):
    config = DecodeConfig(
        output=args.output,
        overwrite=args.overwrite,
        images_only=args.images_only,
        extended_image_formats=args.extended_image_formats,
        disable_nat_sort=args.disable_nat_sort,
        skip_bad_pdf_pages=args.skip_bad_pdf_pages,
        pdf_dpi=args.pdf_dpi,
    )

    print("=" * 60)
    print(f"Decoding '{args.input}'")
    print("=" * 60)
    result = decode(args.input, config)

    print(f"{len(result.pages)} page(s) extracted → {result.output_dir}")
    if result.skipped_entries:
        print(f"  {len(result.skipped_entries)} entry(ies) ignored")
    if result.failed_pages:
        print(f"  PDF pages skipped: {', '.join(str(i + 1) for i in result.failed_pages)}")
    return 0


def run_rebuild(args):
    config = RebuildConfig(
        output=args.output,
        overwrite=args.overwrite,
        create_output_dir=args.create_output_dir,
        temporary_dir=args.temporary_dir,
        extended_image_formats=args.extended_image_formats,
        disable_nat_sort=args.disable_nat_sort,
        compress_losslessly=args.compress_losslessly,
        skip_bad_pdf_pages=args.skip_bad_pdf_pages,
        pdf_dpi=args.pdf_dpi,
        recursive=args.recursive,
        max_workers=args.max_workers,
    )

    print("=" * 60)
    print(f"Rebuilding '{args.input}'")
    print("=" * 60)

    if not Path(args.input).is_dir():
        result = rebuild(args.input, config)
        print(f"{result.pages} page(s) → {result.output}")
        return 0

    batch = rebuild_directory(args.input, config)
    for item in batch.results:
        if item.ok:
            print(f"  OK     {item.source.name} → {item.output.name} ({item.pages} pages)")
        else:
            print(f"  FAILED {item.source.name} ({item.failed_stage.value}): {item.error}")
    print("=" * 60)
    print(f"{len(batch.succeeded)} comic(s) rebuilt, {len(batch.failed)} failed in {fmt_time(batch.elapsed)}")
    return 1 if batch.failed else 0


COMMANDS = {
    "encode": run_encode,
    "decode": run_decode,
    "rebuild": run_rebuild,
}


def main(argv=None):
    args = build_parser().parse_args(argv)

    original_stdout = sys.stdout
    if args.log_file:
        sys.stdout = TeeLogger(args.log_file)
    handler = setup_logging("silent" if args.silent else "verbose" if args.verbose else "default")

    t0 = time.time()
    try:
        status = COMMANDS[args.command](args)
        if status == 0:
            print(f"Done in {fmt_elapsed(time.time() - t0)}.")
    except (ComicEncoderError, ValueError) as exc:
        print(f"ERROR: {exc}")
        status = 1
    finally:
        logging.getLogger().removeHandler(handler)
        if sys.stdout is not original_stdout:
            sys.stdout.close()
            sys.stdout = original_stdout
    return status


if __name__ == "__main__":
    sys.exit(main())
