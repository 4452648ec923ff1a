import numpy as np
from typing import Optional

from repcoach.models.landmarks import Landmark


def calculate_angle(a: Optional[Landmark], b: Optional[Landmark], c: Optional[Landmark]) -> float:
    """
    Interior angle at vertex b between rays b->a and b->c, in degrees [0, 180].
    Returns 0.0 when a joint is missing, is not a Landmark, or the geometry is undefined.
    """
    for point in (a, b, c):
        if not isinstance(point, Landmark) or not point.is_valid():
            return 0.0

    radians = np.arctan2(c.y - b.y, c.x - b.x) - np.arctan2(a.y - b.y, a.x - b.x)
    angle = float(np.abs(np.degrees(radians)))
    if angle > 180.0:
        angle = 360.0 - angle

    if np.isnan(angle):
        return 0.0
    return angle
