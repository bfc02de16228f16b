"""CLI entry point to run the X-ray pipeline on an image file or URL."""

import argparse
import base64
import json
import mimetypes
import sys
from pathlib import Path

from xraylens.agent.graph import run_pipeline
from xraylens.config import settings
from xraylens.errors import XRayLensError
from xraylens.logging_config import configure_logging


def to_image_url(image: str) -> str:
    """Return *image* unchanged if it is a URL, else a data URL of the file."""
    if image.startswith(("data:", "http://", "https://")):
        return image

    path = Path(image)
    mime_type = mimetypes.guess_type(path.name)[0] or "image/png"
    payload = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def main() -> None:
    parser = argparse.ArgumentParser(
        description="XRayLens: analyze, summarize and visualize an X-ray image",
    )
    parser.add_argument(
        "--image",
        type=str,
        required=True,
        help="Path to an X-ray image, or a data/remote URL",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Run summary and visualization one after the other",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log each pipeline stage",
    )
    args = parser.parse_args()

    configure_logging("DEBUG" if args.verbose else settings.log_level)

    if not args.image.startswith(("data:", "http://", "https://")) and not Path(args.image).exists():
        print(f"Error: image not found: {args.image}")
        sys.exit(1)

    print("=" * 60)
    print("XRayLens: X-ray Analysis")
    print("=" * 60)

    try:
        result = run_pipeline(
            to_image_url(args.image),
            parallel=False if args.sequential else None,
        )
    except XRayLensError as exc:
        print(f"\nPipeline failed: {type(exc).__name__}: {exc}")
        sys.exit(1)

    print(json.dumps(result.model_dump(by_alias=True), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
