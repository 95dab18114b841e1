"""Shared utilities and type definitions for huedini."""

import cv2
import numpy as np
from pathlib import Path
from typing import Iterable, List, NamedTuple, Optional, Tuple, Union
import logging

from PIL import Image, UnidentifiedImageError

from .errors import ImageLoadError

# Type aliases for clarity
ImageArray = np.ndarray  # H×W×3 uint8, channel order given by a ColorSpace
MaskArray = np.ndarray   # H×W uint8
Color = Tuple[int, int, int]
ImagePath = Union[str, Path]

# Supported image extensions
IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.tiff', '.tif', '.webp', '.gif'}


class BBox(NamedTuple):
    """Axis-aligned rectangle in pixel coordinates."""
    x: int
    y: int
    width: int
    height: int


def setup_logger(name: str, level: int = logging.INFO) -> logging.Logger:
    """Set up a logger with consistent formatting.

    Args:
        name: Logger name
        level: Logging level

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not logger.handlers:  # Avoid duplicate handlers
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    logger.setLevel(level)
    return logger

logger = setup_logger(__name__)

def load_image(image_path: ImagePath) -> ImageArray:
    """Load an image from file path as an RGB pixel grid.

    Images with transparency are composited onto a black background, and
    palette or grayscale images are expanded to three channels.

    Args:
        image_path: Path to image file

    Returns:
        Image array in RGB format (H×W×3 uint8)

    Raises:
        ImageLoadError: If the file is missing or cannot be decoded
    """
    image_path = Path(image_path)
    try:
        with Image.open(image_path) as img:
            img.load()
            if img.mode in ('RGBA', 'LA') or (img.mode == 'P' and 'transparency' in img.info):
                rgba = img.convert('RGBA')
                background = Image.new('RGBA', rgba.size, (0, 0, 0, 255))
                img = Image.alpha_composite(background, rgba)
            rgb = np.array(img.convert('RGB'), dtype=np.uint8)
    except FileNotFoundError as e:
        raise ImageLoadError(f"Image not found: {image_path}") from e
    except (UnidentifiedImageError, OSError) as e:
        raise ImageLoadError(f"Could not load image: {image_path}") from e

    logger.debug(f"Loaded {image_path.name}: {rgb.shape[1]}×{rgb.shape[0]}")
    return rgb

def save_image(image: ImageArray, output_path: ImagePath, quality: int = 97) -> None:
    """Save an image to file with quality control.

    Args:
        image: Image array in BGR format, or a single-channel mask
        output_path: Path where to save the image

    Raises:
        ValueError: If image cannot be saved
    """
    output_path = Path(output_path)

    if output_path.suffix.lower() in {'.jpg', '.jpeg'}:
        params = [cv2.IMWRITE_JPEG_QUALITY, quality]
    elif output_path.suffix.lower() == '.png':
        params = [cv2.IMWRITE_PNG_COMPRESSION, 8]
    else:
        params = []

    success = cv2.imwrite(str(output_path), image, params)
    if not success:
        raise ValueError(f"Could not save image to: {output_path}")

def get_image_files(path: Path) -> List[Path]:
    """Get list of image files from path (file or directory).

    Args:
        path: Path to file or directory

    Returns:
        Sorted list of image file paths
    """
    if path.is_file():
        if path.suffix.lower() in IMAGE_EXTENSIONS:
            return [path]
        else:
            return []

    return sorted(f for f in path.glob("*") if f.suffix.lower() in IMAGE_EXTENSIONS)

def clamp_bbox_to_image(bbox: BBox, image_shape: Tuple[int, int]) -> BBox:
    """Clamp bounding box coordinates to stay within image bounds.

    The returned box may have zero width or height when the input lies
    entirely outside the image.

    Args:
        bbox: Bounding box as (x, y, width, height)
        image_shape: Image shape as (height, width)

    Returns:
        Clamped bounding box
    """
    x, y, w, h = bbox
    img_h, img_w = image_shape

    x1 = max(0, min(x, img_w))
    y1 = max(0, min(y, img_h))
    x2 = max(x1, min(x + w, img_w))
    y2 = max(y1, min(y + h, img_h))

    return BBox(x1, y1, x2 - x1, y2 - y1)

def bbox_union(bboxes: Iterable[BBox]) -> Optional[BBox]:
    """Return the smallest box enclosing all given boxes, or None if there are none."""
    bboxes = list(bboxes)
    if not bboxes:
        return None

    left = min(b[0] for b in bboxes)
    top = min(b[1] for b in bboxes)
    right = max(b[0] + b[2] for b in bboxes)
    bottom = max(b[1] + b[3] for b in bboxes)

    return BBox(left, top, right - left, bottom - top)


class DebugImageWriter:
    """Pipeline observer that writes each stage's image to a directory.

    Files are named ``<prefix>_<NN>_<stage>.png``. Stages that produce no
    image are skipped.
    """

    def __init__(self, output_dir: ImagePath, prefix: str = "debug") -> None:
        self.output_dir = Path(output_dir)
        self.prefix = prefix
        self._counter = 0
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def __call__(self, state, image: Optional[ImageArray]) -> None:
        if image is None:
            return
        self._counter += 1
        stage = getattr(state, 'value', str(state))
        path = self.output_dir / f"{self.prefix}_{self._counter:02d}_{stage}.png"
        save_image(image, path)
        logger.debug(f"Saved {stage} debug image to {path}")
