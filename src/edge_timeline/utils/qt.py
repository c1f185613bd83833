"""Qt helper utilities."""

from PySide6 import QtGui
import numpy as np


def bgr_to_qimage(bgr: np.ndarray) -> QtGui.QImage:
    """Convert a BGR NumPy array into a :class:`~PySide6.QtGui.QImage`."""
    fmt = getattr(QtGui.QImage, "Format_RGB888", None)
    if fmt is None:
        fmt = QtGui.QImage.Format.Format_RGB888
    arr = np.asarray(bgr, dtype=np.uint8)
    if arr.ndim == 2:
        arr = np.repeat(arr[:, :, None], 3, axis=2)
    rgb = np.ascontiguousarray(arr[..., 2::-1])  # BGR(A) -> RGB
    height, width = rgb.shape[:2]
    img = QtGui.QImage(rgb.data, width, height, 3 * width, fmt)
    return img.copy()  # detach from the NumPy buffer


__all__ = ["bgr_to_qimage"]
