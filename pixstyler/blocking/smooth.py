"""Iterative majority-vote denoising."""
from __future__ import annotations

import logging

import numpy as np
from numba import njit

from ..buffer import PixelBuffer
from ..utils.colors import pack_rgb, unpack_rgb

logger = logging.getLogger(__name__)

MIN_VOTES = 3
# Squared form of the Euclidean distance threshold (30).
MIN_DISTANCE_SQ = 30 * 30


@njit(cache=True)
def _distance_sq(a, b):
    dr = ((a >> 16) & 0xFF) - ((b >> 16) & 0xFF)
    dg = ((a >> 8) & 0xFF) - ((b >> 8) & 0xFF)
    db = (a & 0xFF) - (b & 0xFF)
    return dr * dr + dg * dg + db * db


@njit(cache=True)
def _votes(cand, left, right, up, down):
    votes = 0
    if left == cand:
        votes += 1
    if right == cand:
        votes += 1
    if up == cand:
        votes += 1
    if down == cand:
        votes += 1
    return votes


@njit(cache=True)
def _smooth_pass(snap, out, min_votes, min_dist_sq):
    H, W = snap.shape
    for y in range(1, H - 1):
        for x in range(1, W - 1):
            left = snap[y, x - 1]
            right = snap[y, x + 1]
            up = snap[y - 1, x]
            down = snap[y + 1, x]
            # With four neighbors a 3-vote majority always includes left or right.
            dominant = -1
            if _votes(left, left, right, up, down) >= min_votes:
                dominant = left
            elif _votes(right, left, right, up, down) >= min_votes:
                dominant = right
            if dominant >= 0 and _distance_sq(snap[y, x], dominant) > min_dist_sq:
                out[y, x] = dominant


def smooth(buf: PixelBuffer, iterations: int) -> PixelBuffer:
    """Replace isolated interior pixels with their neighbors' majority color.

    Each iteration reads a frozen copy of the previous iteration's result.
    An interior pixel whose four neighbors share one color at least three
    times, and whose own color is more than 30 away from it (Euclidean RGB),
    takes that color. Border pixels are never changed.

    Parameters
    ----------
    buf : PixelBuffer
        Input image.
    iterations : int
        Number of passes (>=0). Zero returns an identical copy.

    Returns
    -------
    PixelBuffer
        Smoothed image; alpha copied from the input.
    """
    if iterations < 0:
        raise ValueError("iterations must be >= 0")
    if iterations == 0:
        return buf.copy()
    logger.debug("Applying %d smoothing iterations", iterations)
    current = np.ascontiguousarray(pack_rgb(buf.rgb))
    for _ in range(iterations):
        snap = current.copy()
        _smooth_pass(snap, current, MIN_VOTES, MIN_DISTANCE_SQ)
    return buf.with_rgb(unpack_rgb(current))
