#!/usr/bin/env python3
"""Build the labeled descriptor gallery and save it to disk.

Samples come from a JSON manifest ({label: [locator, ...]}) when given,
otherwise from GALLERY_BASE_URL/<label>/<i>.jpg for every configured label.
Samples that cannot be fetched or contain no face are skipped; labels
without any valid sample are left out of the gallery.

Usage:
    python scripts/build_gallery.py
    python scripts/build_gallery.py --manifest data/gallery.json
    python scripts/build_gallery.py --output models/gallery.pkl --workers 8
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from facematch.backends import create_analyzer
from facematch.config import Config
from facematch.errors import EmptyGalleryError, ModelLoadError
from facematch.gallery import GalleryBuilder, default_gallery_source, load_gallery_source
from facematch.image_source import ImageSource
from facematch.logging_config import setup_logging

logger = setup_logging(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Build the face descriptor gallery",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--manifest",
        type=str,
        default=None,
        help="JSON file mapping label -> list of image paths/URLs "
        "(defaults to GALLERY_MANIFEST or the remote sample set)",
    )

    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output gallery pickle (defaults to models/gallery.pkl)",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of concurrent sample tasks (defaults to GALLERY_WORKERS)",
    )

    return parser.parse_args()


def print_section(title: str) -> None:
    """Print a section divider."""
    print()
    print("=" * 70)
    print(f"  {title}")
    print("=" * 70)


def main() -> int:
    """Main function."""
    args = parse_args()
    config = Config.from_env()

    manifest = Path(args.manifest) if args.manifest else config.gallery_manifest
    output = Path(args.output) if args.output else config.gallery_path
    workers = args.workers or config.gallery_workers

    if manifest is not None:
        source = load_gallery_source(manifest)
    else:
        source = default_gallery_source(
            config.gallery_base_url,
            config.gallery_labels,
            config.samples_per_label,
        )

    print_section("Gallery Build")
    print(f"Source:   {manifest or config.gallery_base_url}")
    print(f"Labels:   {len(source)}")
    print(f"Samples:  {sum(len(v) for v in source.values())}")
    print(f"Workers:  {workers}")
    print(f"Output:   {output}")

    print_section("Loading Models")
    try:
        analyzer = create_analyzer(config)
    except ModelLoadError as e:
        logger.error(str(e))
        return 1

    print_section("Encoding Samples")
    builder = GalleryBuilder(
        analyzer,
        ImageSource(timeout=config.fetch_timeout),
        max_workers=workers,
    )
    try:
        gallery = builder.build(source)
    except EmptyGalleryError as e:
        logger.error(str(e))
        for failure in e.failures:
            print(f"  - {failure}")
        return 1

    for labeled in gallery:
        print(f"  - {labeled.label}: {len(labeled)} descriptor(s)")

    missing = [label for label in source if label not in gallery]
    if missing:
        print(f"Omitted (no valid samples): {', '.join(missing)}")
    if builder.failures:
        print(f"Skipped samples: {len(builder.failures)}")

    print_section("Saving Gallery")
    gallery.save(output, output.with_name("labels.json"))
    print(f"Saved {gallery.num_descriptors} descriptors for {len(gallery)} labels to {output}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
