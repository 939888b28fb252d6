import logging
from typing import List, Optional, Sequence

import numpy as np

from layerchain.data import LabeledImage
from layerchain.pipeline import Pipeline

logger = logging.getLogger(__name__)


def output_gradient(y: np.ndarray, label: int) -> np.ndarray:
    """Returns ``y - one_hot(label)``, the raw gradient fed to the tail."""
    if y.ndim != 1:
        raise ValueError("Output shape mismatch. Expected 1D NumPy array, "
                         f"got {y.ndim}D array with shape {y.shape}.")

    if not 0 <= label < y.shape[0]:
        raise ValueError(
            f"Label {label} out of bounds for {y.shape[0]} output neurons.")

    target = np.zeros_like(y)
    target[label] = 1.0

    return y - target


def shuffle_indices(num_images: int, seed: Optional[int] = None) -> np.ndarray:
    rng = np.random.default_rng(seed)
    permutation = rng.permutation(num_images)
    logger.debug("Shuffled %d image indices. Seed: %s.", num_images, seed)

    return permutation


def train_step(pipeline: Pipeline, image: LabeledImage) -> int:
    y = pipeline.predict(image.data)
    pipeline.backpropagate(output_gradient(y, image.label))

    return int(np.argmax(y))


def evaluate(pipeline: Pipeline, images: Sequence[LabeledImage]) -> float:
    if not images:
        raise ValueError("Cannot evaluate on an empty set of images.")

    correct = sum(
        int(np.argmax(pipeline.predict(image.data))) == image.label
        for image in images)
    accuracy = correct / len(images)

    logger.info("%s evaluation completed. Accuracy: %.4f (%d/%d correct).",
                pipeline.name, accuracy, correct, len(images))

    return accuracy


def fit(pipeline: Pipeline,
        images: Sequence[LabeledImage],
        num_epochs: int,
        log_interval: int,
        seed: Optional[int] = None) -> List[float]:
    """Trains one image at a time and returns the accuracy of every epoch.

    Errors raised by a layer abort training; there is no recovery from a
    half-applied update.
    """
    if num_epochs <= 0:
        raise ValueError("Number of epochs must be positive.")

    if log_interval <= 0:
        raise ValueError("Log interval must be positive.")

    if not images:
        logger.warning("Training data is empty. Skipping training.")
        return []

    num_images = len(images)
    history: List[float] = []

    logger.info("Starting training for %s: %d epochs, %d images per epoch.",
                pipeline.name, num_epochs, num_images)

    for epoch in range(1, num_epochs + 1):
        order = shuffle_indices(num_images,
                                seed + epoch - 1 if seed is not None else None)

        correct = 0
        for i, index in enumerate(order):
            image = images[index]
            correct += train_step(pipeline, image) == image.label

            if (i + 1) % log_interval == 0:
                logger.info("Epoch %d/%d - Image %d/%d - Accuracy: %.4f",
                            epoch, num_epochs, i + 1, num_images,
                            correct / (i + 1))

        accuracy = correct / num_images
        history.append(accuracy)

        logger.info("Epoch %d/%d - Training accuracy: %.4f", epoch,
                    num_epochs, accuracy)

    logger.info("Training finished for %s.", pipeline.name)

    return history
