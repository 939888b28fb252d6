#!/usr/bin/env python3

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import requests

from layerchain import data, training
from layerchain.errors import ShapeError, StateError
from layerchain.pipeline import Pipeline

logging.basicConfig(level=logging.INFO,
                    format=("%(asctime)s - %(name)s - [%(levelname)s] - "
                            "%(message)s"))

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path("data") / "raw"
DEFAULT_TRAIN_FILENAME = "mnist_train.csv"
DEFAULT_TEST_FILENAME = "mnist_test.csv"
DEFAULT_HIDDEN_SIZES = [64]
NUM_CLASSES = 10


def main(args: argparse.Namespace) -> int:
    train_path = args.data_dir / args.train_filename

    try:
        args.data_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error("Could not create directories: %s.", e, exc_info=True)
        return 1

    if not train_path.exists():
        if args.data_url is None:
            logger.error("Dataset not found at %s and no --data-url given.",
                         train_path)
            return 1

        logger.info("Dataset not found. Downloading from %s...", args.data_url)
        try:
            data.download_file(args.data_url, train_path)
        except requests.exceptions.RequestException as e:
            logger.error("Download failed: %s.", e, exc_info=True)
            return 1
        except IOError as e:
            logger.error("Could not write to file: %s.", e, exc_info=True)
            return 1

    try:
        images = data.read_images(train_path,
                                  rows=args.rows,
                                  columns=args.columns)
        test_path = args.data_dir / args.test_filename
        test_images = (data.read_images(
            test_path, rows=args.rows, columns=args.columns)
                       if test_path.exists() else [])
    except (FileNotFoundError, IOError, ValueError) as e:
        logger.error("Error loading data: %s.", e, exc_info=True)
        return 1

    if args.pixel_scale != 1.0:
        images = [
            data.LabeledImage(image.data / args.pixel_scale, image.label)
            for image in images
        ]
        test_images = [
            data.LabeledImage(image.data / args.pixel_scale, image.label)
            for image in test_images
        ]

    sizes = [args.rows * args.columns, *args.hidden_sizes, NUM_CLASSES]

    try:
        pipeline = Pipeline.dense(sizes,
                                  seed=args.seed,
                                  learning_rate=args.learning_rate,
                                  name="MNISTPipeline")
        training.fit(pipeline,
                     images,
                     num_epochs=args.num_epochs,
                     log_interval=args.log_interval,
                     seed=args.seed)

        if test_images:
            training.evaluate(pipeline, test_images)
    except (ShapeError, StateError, NotImplementedError) as e:
        logger.error("Training step failed: %s.", e, exc_info=True)
        return 1
    except ValueError as e:
        logger.error("Invalid configuration: %s.", e, exc_info=True)
        return 1

    return 0


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="layerchain",
        description="Train a chain of fully connected layers on MNIST CSV "
        "data.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter)

    data_args = parser.add_argument_group("Data configuration")
    data_args.add_argument("--data-url",
                           type=str,
                           default=None,
                           help="URL to download the training CSV from.")
    data_args.add_argument("--data-dir",
                           type=Path,
                           default=DEFAULT_DATA_DIR,
                           help="Directory holding the CSV files.")
    data_args.add_argument("--train-filename",
                           type=str,
                           default=DEFAULT_TRAIN_FILENAME,
                           help="Training CSV within data_dir.")
    data_args.add_argument("--test-filename",
                           type=str,
                           default=DEFAULT_TEST_FILENAME,
                           help="Optional test CSV within data_dir.")
    data_args.add_argument("--rows", type=int, default=data.MNIST_ROWS)
    data_args.add_argument("--columns", type=int, default=data.MNIST_COLUMNS)
    data_args.add_argument("--pixel-scale",
                           type=float,
                           default=255.0,
                           help="Divide every pixel value by this number.")

    model_args = parser.add_argument_group("Model hyperparameters")
    model_args.add_argument("--hidden-sizes",
                            type=int,
                            nargs="*",
                            default=DEFAULT_HIDDEN_SIZES,
                            help="Output length of every hidden layer.")
    model_args.add_argument("--learning-rate",
                            type=float,
                            default=0.01,
                            help="Gradient descent learning rate.")

    training_args = parser.add_argument_group("Training parameters")
    training_args.add_argument("--num-epochs",
                               type=int,
                               default=3,
                               help="Number of training epochs.")
    training_args.add_argument("--seed",
                               type=int,
                               default=42,
                               help="Seed for weights and shuffling.")
    training_args.add_argument("--log-interval",
                               type=int,
                               default=1000,
                               help="Log training accuracy every N images.")

    args = parser.parse_args(argv)

    if args.rows <= 0 or args.columns <= 0:
        raise argparse.ArgumentError(None, "image dimensions must be positive.")

    if any(size <= 0 for size in args.hidden_sizes):
        raise argparse.ArgumentError(None, "hidden sizes must be positive.")

    if args.learning_rate < 0:
        raise argparse.ArgumentError(None,
                                     "learning rate must be non-negative.")

    if args.pixel_scale <= 0:
        raise argparse.ArgumentError(None, "pixel scale must be positive.")

    if args.num_epochs <= 0:
        raise argparse.ArgumentError(None, "number of epochs must be positive.")

    if args.log_interval <= 0:
        raise argparse.ArgumentError(None, "log interval must be positive.")

    return args


if __name__ == "__main__":
    try:
        parsed_args = parse_arguments()
    except argparse.ArgumentError as e:
        logger.error("Argument error: %s.", e, exc_info=True)
        sys.exit(1)

    sys.exit(main(parsed_args))
