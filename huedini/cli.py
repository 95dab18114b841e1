"""Command-line interface for huedini.

Runs legend color detection over a single image or a directory of images
and prints the detected entries, either as text or as JSON.
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional

from tqdm import tqdm

from .config import DetectorConfig, load_config
from .detector import LegendDetector, initialize
from .errors import LegendDetectionError
from .legend_info import LegendInfo
from .utils import DebugImageWriter, get_image_files, load_image, setup_logger

logger = setup_logger(__name__)

def process_single_image(
    image_path: Path,
    config: DetectorConfig,
    debug_dir: Optional[Path] = None,
) -> LegendInfo:
    """Load one image and run the detection pipeline on it.

    Args:
        image_path: Path to input image
        config: Pipeline configuration
        debug_dir: Optional directory for per-stage debug images

    Returns:
        LegendInfo for the image

    Raises:
        LegendDetectionError: If loading or detection fails
    """
    logger.info(f"Loading image: {image_path.name}")
    image = load_image(image_path)

    observer = None
    if debug_dir is not None:
        observer = DebugImageWriter(debug_dir, prefix=image_path.stem)

    detector = LegendDetector(config, observer=observer)
    return detector.detect(image)

def format_legend_info(info: LegendInfo) -> str:
    """Render a LegendInfo as human-readable lines."""
    lines = [f"Detected: {len(info)} potential legend colors:"]
    lines.extend(str(entry) for entry in info)
    return "\n".join(lines)

def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the legend color detection tool."""
    args = parse_args(argv)

    # Setup logging
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        for name in list(logging.root.manager.loggerDict):
            if name.startswith("huedini"):
                logging.getLogger(name).setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled")

    # Setup file logging if requested
    if args.logfile:
        log_path = Path(args.logfile)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode='w')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        logging.getLogger().addHandler(file_handler)
        logger.info(f"Logging to file: {log_path}")

    try:
        config = load_config(args.config, args.overrides or [])
    except LegendDetectionError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)

    # Validate input path
    input_path = Path(args.input)
    if not input_path.exists():
        logger.error(f"Input path '{args.input}' does not exist")
        sys.exit(1)

    image_files = get_image_files(input_path)
    if not image_files:
        logger.error(f"No valid image files found in '{args.input}'")
        sys.exit(1)

    debug_root = Path(args.keep_debug) if args.keep_debug else None

    initialize()
    logger.info(f"Found {len(image_files)} image(s) to process")

    start_time = time.time()
    results: Dict[str, Optional[LegendInfo]] = {}
    is_batch_mode = len(image_files) > 1

    # Use TQDM only for batch mode and when not verbose
    use_tqdm = is_batch_mode and not args.verbose
    files_iter = tqdm(image_files, desc="Detecting legends") if use_tqdm else image_files

    for image_path in files_iter:
        try:
            results[image_path.name] = process_single_image(image_path, config, debug_root)
        except Exception as e:
            logger.error(f"Error processing {image_path.name}: {e}")
            results[image_path.name] = None
            continue

    success_count = sum(1 for info in results.values() if info is not None)
    logger.info(f"Completed: {success_count}/{len(image_files)} images in {time.time() - start_time:.1f}s")

    if args.json:
        payload = {
            name: (info.to_dict() if info is not None else None)
            for name, info in results.items()
        }
        text = json.dumps(payload, indent=2)
    else:
        blocks = []
        for name, info in results.items():
            if info is None:
                blocks.append(f"{name}: failed")
            else:
                blocks.append(f"{name}\n{format_legend_info(info)}")
        text = "\n\n".join(blocks)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(text + "\n")
        logger.info(f"Results written to: {output_path}")
    else:
        print(text)

    if success_count == 0:
        sys.exit(1)

def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Detect legend color swatches in infographic images."
    )

    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Path to input image file or directory of images"
    )

    parser.add_argument(
        "-o", "--output",
        help="Write results to this file instead of stdout"
    )

    parser.add_argument(
        "-c", "--config",
        help="YAML file with pipeline settings (see DetectorConfig)"
    )

    parser.add_argument(
        "-s", "--set",
        dest="overrides",
        action="append",
        metavar="KEY=VALUE",
        help="Override a single setting, e.g. --set min_region_area=50 (repeatable)"
    )

    parser.add_argument(
        "-j", "--json",
        action="store_true",
        help="Print results as JSON"
    )

    parser.add_argument(
        "-k", "--keep-debug",
        metavar="DIR",
        help="Save per-stage debug images into this directory"
    )

    parser.add_argument(
        "-l", "--logfile",
        help="Path to log file for detailed logging"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )

    return parser.parse_args(argv)

if __name__ == "__main__":
    main()
