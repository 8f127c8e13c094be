#!/usr/bin/env python3
"""Recognize the faces in one image and draw them with their labels.

The gallery is loaded from models/gallery.pkl when present, otherwise it is
built from the configured sample set first.

Usage:
    python scripts/run_image.py --image path/to/image.jpg
    python scripts/run_image.py --image https://host/photo.jpg --save result.jpg
    python scripts/run_image.py --image photo.jpg --threshold 0.5 --no-display
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import cv2

from facematch.backends import create_analyzer
from facematch.config import Config
from facematch.errors import EmptyGalleryError, ModelLoadError
from facematch.gallery import Gallery, GalleryBuilder, default_gallery_source, load_gallery_source
from facematch.image_source import ImageSource
from facematch.logging_config import setup_logging
from facematch.matcher import FaceMatcher
from facematch.services import RecognitionService, RecognitionSession

logger = setup_logging(__name__)


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Face recognition on a single image",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--image",
        type=str,
        required=True,
        help="Path or URL of the input image",
    )

    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Maximum match distance (defaults to THRESH, lower=stricter)",
    )

    parser.add_argument(
        "--gallery",
        type=str,
        default=None,
        help="Gallery pickle (defaults to models/gallery.pkl)",
    )

    parser.add_argument(
        "--save",
        type=str,
        default=None,
        help="Path to save output image",
    )

    parser.add_argument(
        "--no-display",
        action="store_true",
        help="Don't display image window",
    )

    return parser.parse_args()


def load_or_build_gallery(config: Config, path: Path, analyzer, image_source) -> Gallery:
    if path.exists():
        return Gallery.load(path)

    logger.info(f"No gallery at {path}, building one from the sample set")
    if config.gallery_manifest is not None:
        source = load_gallery_source(config.gallery_manifest)
    else:
        source = default_gallery_source(
            config.gallery_base_url,
            config.gallery_labels,
            config.samples_per_label,
        )
    builder = GalleryBuilder(analyzer, image_source, max_workers=config.gallery_workers)
    return builder.build(source)


def main() -> int:
    """Main function."""
    args = parse_args()
    config = Config.from_env()

    threshold = config.thresh if args.threshold is None else args.threshold
    gallery_path = Path(args.gallery) if args.gallery else config.gallery_path
    image_source = ImageSource(timeout=config.fetch_timeout)

    try:
        analyzer = create_analyzer(config)
        gallery = load_or_build_gallery(config, gallery_path, analyzer, image_source)
    except (ModelLoadError, EmptyGalleryError) as e:
        logger.error(str(e))
        return 1

    print(f"Gallery: {len(gallery)} labels ({', '.join(gallery.labels)})")

    service = RecognitionService(analyzer, FaceMatcher(gallery, threshold=threshold))

    with RecognitionSession(service, image_source) as session:
        outcome = session.run(args.image)

        if outcome.error is not None:
            print(session.summary)
            return 1

        for i, result in enumerate(outcome.results, 1):
            status = "KNOWN" if result.is_known else "UNKNOWN"
            print(f"  Face {i}: {result.match} at {result.detection.bbox} [{status}]")
        print(session.summary)

        annotated = session.surface.image

    if args.save:
        cv2.imwrite(args.save, annotated)
        print(f"Saved to: {args.save}")

    if not args.no_display:
        print("Press any key to close...")
        cv2.imshow("Face Recognition", annotated)
        cv2.waitKey(0)
        cv2.destroyAllWindows()

    return 0


if __name__ == "__main__":
    sys.exit(main())
