"""
Batch Editor
============

Apply the same adjustment and crop to many image files in parallel::

    photoshelf-batch photos/*.jpg -o edited/ --brightness 120 --crop 0,0,800,600

Each file is decoded, edited and written independently, so a corrupt
file or an out-of-bounds crop only fails that one file.
"""

import argparse
import logging
import sys
from concurrent.futures import ProcessPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from tqdm import tqdm

from photoshelf.core.logging import setup_logging
from photoshelf.editing import (
    AdjustmentVector,
    CropRegion,
    EditingError,
    EditOrder,
    EditRequest,
    apply_edits,
    decode_raster,
    encode_raster,
)

logger = logging.getLogger(__name__)

OUTPUT_EXTENSIONS = {"png": ".png", "jpeg": ".jpg", "webp": ".webp"}


@dataclass
class BatchResult:
    succeeded: List[Path] = field(default_factory=list)
    failed: List[Tuple[Path, str]] = field(default_factory=list)


def edit_file(source: Path, output_dir: Path, request: EditRequest, fmt: str) -> Path:
    """
    Edit one file and write the result into ``output_dir``.

    Raises:
        EditingError: The file cannot be decoded or the crop is degenerate.
        OSError: The file cannot be read or written.
    """
    raster = decode_raster(source.read_bytes())
    edited = apply_edits(raster, request)
    data, _ = encode_raster(edited, fmt)

    destination = output_dir / f"{source.stem}{OUTPUT_EXTENSIONS[fmt]}"
    destination.write_bytes(data)
    return destination


def process_batch(
    sources: Sequence[Path],
    output_dir: Path,
    request: EditRequest,
    fmt: str = "png",
    workers: Optional[int] = None,
    progress: bool = True,
) -> BatchResult:
    """
    Edit every file in ``sources`` with a process pool.

    Failures are logged and collected; they never abort the batch.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    result = BatchResult()

    logger.info(f"Starting batch edit of {len(sources)} files into {output_dir}...")

    with ProcessPoolExecutor(max_workers=workers) as executor:
        future_to_source = {
            executor.submit(edit_file, source, output_dir, request, fmt): source
            for source in sources
        }
        for future in tqdm(
            as_completed(future_to_source),
            total=len(future_to_source),
            desc="Editing images",
            disable=not progress,
        ):
            source = future_to_source[future]
            try:
                result.succeeded.append(future.result())
            except (EditingError, OSError) as e:
                logger.error(f"Failed to edit {source}: {e}")
                result.failed.append((source, str(e)))

    logger.info(
        f"Batch complete. Success: {len(result.succeeded)}, Failed: {len(result.failed)}"
    )
    return result


def parse_region(value: str) -> CropRegion:
    """Parse ``x,y,width,height`` into a crop region."""
    try:
        x, y, width, height = (int(part) for part in value.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"expected x,y,width,height as integers, got {value!r}"
        )
    if width < 0 or height < 0:
        raise argparse.ArgumentTypeError("crop width and height must not be negative")
    return CropRegion(x, y, width, height)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="photoshelf-batch",
        description="Apply brightness/contrast/saturation and an optional crop to image files.",
    )
    parser.add_argument("sources", nargs="+", type=Path, help="Input image files")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output directory")
    parser.add_argument("--brightness", type=float, default=100, help="Percent, 100 = unchanged")
    parser.add_argument("--contrast", type=float, default=100, help="Percent, 100 = unchanged")
    parser.add_argument("--saturation", type=float, default=100, help="Percent, 100 = unchanged")
    parser.add_argument("--crop", type=parse_region, default=None, metavar="X,Y,W,H")
    parser.add_argument(
        "--order",
        choices=[order.value for order in EditOrder],
        default=EditOrder.ADJUST_THEN_CROP.value,
    )
    parser.add_argument("--format", choices=sorted(OUTPUT_EXTENSIONS), default="png")
    parser.add_argument("--workers", type=int, default=None, help="Worker processes (default: CPU count)")
    parser.add_argument("--no-progress", action="store_true", help="Hide the progress bar")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    setup_logging()

    request = EditRequest(
        adjustments=AdjustmentVector(
            brightness=args.brightness,
            contrast=args.contrast,
            saturation=args.saturation,
        ),
        region=args.crop,
        order=EditOrder(args.order),
    )
    result = process_batch(
        args.sources,
        args.output,
        request,
        fmt=args.format,
        workers=args.workers,
        progress=not args.no_progress,
    )
    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
