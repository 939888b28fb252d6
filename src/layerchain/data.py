import csv
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List

import numpy as np
import requests

logger = logging.getLogger(__name__)

MNIST_ROWS = 28
MNIST_COLUMNS = 28


@dataclass(frozen=True)
class LabeledImage:
    data: np.ndarray
    label: int

    def __post_init__(self) -> None:
        if self.data.ndim != 2:
            raise ValueError(
                "Image data shape mismatch. Expected 2D NumPy array, got "
                f"{self.data.ndim}D array with shape {self.data.shape}.")

    def __str__(self) -> str:
        rows = (", ".join(str(value) for value in row) for row in self.data)
        return f"{self.label},\n" + "\n".join(rows)


DOWNLOAD_CHUNK_SIZE = 64 * 1024


def download_file(url: str, dest: Path) -> int:
    """Streams ``url`` into ``dest`` and returns the number of bytes written.

    The data is written to a ``.tmp`` sibling first, so ``dest`` only appears
    once the download has finished.
    """
    dest.parent.mkdir(parents=True, exist_ok=True)
    partial = dest.with_suffix(dest.suffix + ".tmp")
    num_bytes = 0

    logger.info("Downloading dataset '%s' from %s.", dest.name, url)

    try:
        with requests.get(url, stream=True, timeout=30) as response:
            response.raise_for_status()

            with open(partial, "wb") as f:
                for chunk in response.iter_content(
                        chunk_size=DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        num_bytes += f.write(chunk)

        partial.replace(dest)
        logger.info("Dataset '%s' downloaded (%d bytes) to %s.", dest.name,
                    num_bytes, dest.parent)
    finally:
        if partial.exists():
            partial.unlink()

    return num_bytes


def read_images(path: Path,
                rows: int = MNIST_ROWS,
                columns: int = MNIST_COLUMNS,
                skip_header: bool = True) -> List[LabeledImage]:
    """Reads labeled images from a CSV file.

    Each row holds the label followed by ``rows * columns`` pixel values in
    row-major order, the layout used by the MNIST CSV exports.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If a row has the wrong number of values or a value is
            not numeric.
    """
    if rows <= 0 or columns <= 0:
        raise ValueError("Image dimensions must be positive, got "
                         f"rows={rows}, columns={columns}.")

    if not path.is_file():
        raise FileNotFoundError(f"File not found at '{path}'.")

    expected_values = 1 + rows * columns
    images: List[LabeledImage] = []

    with open(path, "r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f)

        if skip_header:
            next(reader, None)

        for row in reader:
            if not row:
                continue

            if len(row) != expected_values:
                raise ValueError(
                    f"Line {reader.line_num} of '{path}' has {len(row)} "
                    f"values, expected {expected_values}.")

            try:
                label = int(row[0])
                pixels = np.array([float(value) for value in row[1:]],
                                  dtype=np.float64)
            except ValueError as e:
                raise ValueError(f"Line {reader.line_num} of '{path}' "
                                 "contains a non-numeric value.") from e

            images.append(LabeledImage(pixels.reshape(rows, columns), label))

    logger.info("Successfully loaded %d images of shape (%d, %d) from '%s'.",
                len(images), rows, columns, path)

    return images
