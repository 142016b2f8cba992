"""
Spatial Types

Small immutable vector and quaternion types. Euler angles are in degrees and
follow the host convention: rotate about Z, then X, then Y.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def zero(cls) -> Vector3:
        return cls(0.0, 0.0, 0.0)

    @classmethod
    def one(cls) -> Vector3:
        return cls(1.0, 1.0, 1.0)

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, factor: float) -> Vector3:
        return Vector3(self.x * factor, self.y * factor, self.z * factor)

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def is_zero(self) -> bool:
        return self.x == 0.0 and self.y == 0.0 and self.z == 0.0

    def lerp(self, end: Vector3, t: float) -> Vector3:
        """Per-axis linear interpolation, t is not clamped."""
        return Vector3(
            self.x + (end.x - self.x) * t,
            self.y + (end.y - self.y) * t,
            self.z + (end.z - self.z) * t,
        )


@dataclass(frozen=True)
class Quaternion:
    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def identity(cls) -> Quaternion:
        return cls(1.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_euler(cls, x: float, y: float, z: float) -> Quaternion:
        """Build a rotation from Euler degrees (Z, then X, then Y)."""
        hx, hy, hz = (math.radians(a) / 2.0 for a in (x, y, z))
        qx = cls(math.cos(hx), math.sin(hx), 0.0, 0.0)
        qy = cls(math.cos(hy), 0.0, math.sin(hy), 0.0)
        qz = cls(math.cos(hz), 0.0, 0.0, math.sin(hz))
        return qy * qx * qz

    @classmethod
    def from_euler_vector(cls, euler: Vector3) -> Quaternion:
        return cls.from_euler(euler.x, euler.y, euler.z)

    def __mul__(self, other: Quaternion) -> Quaternion:
        w1, x1, y1, z1 = self.w, self.x, self.y, self.z
        w2, x2, y2, z2 = other.w, other.x, other.y, other.z
        return Quaternion(
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        )

    def dot(self, other: Quaternion) -> float:
        return self.w * other.w + self.x * other.x + self.y * other.y + self.z * other.z

    def normalized(self) -> Quaternion:
        n = math.sqrt(self.dot(self))
        if n == 0.0:
            return Quaternion.identity()
        return Quaternion(self.w / n, self.x / n, self.y / n, self.z / n)

    def to_euler(self) -> Vector3:
        """Euler degrees in [0, 360), inverse of from_euler."""
        q = self.normalized()
        w, x, y, z = q.w, q.x, q.y, q.z

        m02 = 2.0 * (x * z + w * y)
        m12 = 2.0 * (y * z - w * x)
        m22 = 1.0 - 2.0 * (x * x + y * y)
        m10 = 2.0 * (x * y + w * z)
        m11 = 1.0 - 2.0 * (x * x + z * z)

        sin_x = max(-1.0, min(1.0, -m12))
        ex = math.asin(sin_x)
        if abs(sin_x) < 0.999999:
            ey = math.atan2(m02, m22)
            ez = math.atan2(m10, m11)
        else:
            # Gimbal lock, fold all yaw into Y
            m00 = 1.0 - 2.0 * (y * y + z * z)
            m20 = 2.0 * (x * z - w * y)
            ey = math.atan2(-m20, m00)
            ez = 0.0

        return Vector3(*(_wrap_degrees(math.degrees(a)) for a in (ex, ey, ez)))

    def angle_to(self, other: Quaternion) -> float:
        """Angle in degrees between two rotations."""
        d = min(1.0, abs(self.normalized().dot(other.normalized())))
        return math.degrees(2.0 * math.acos(d))

    def slerp(self, end: Quaternion, t: float) -> Quaternion:
        """Spherical interpolation along the shortest arc."""
        a = self.normalized()
        b = end.normalized()
        cos_theta = a.dot(b)
        if cos_theta < 0.0:
            b = Quaternion(-b.w, -b.x, -b.y, -b.z)
            cos_theta = -cos_theta

        if cos_theta > 0.9995:
            return Quaternion(
                a.w + (b.w - a.w) * t,
                a.x + (b.x - a.x) * t,
                a.y + (b.y - a.y) * t,
                a.z + (b.z - a.z) * t,
            ).normalized()

        theta = math.acos(cos_theta)
        sin_theta = math.sin(theta)
        wa = math.sin((1.0 - t) * theta) / sin_theta
        wb = math.sin(t * theta) / sin_theta
        return Quaternion(
            wa * a.w + wb * b.w,
            wa * a.x + wb * b.x,
            wa * a.y + wb * b.y,
            wa * a.z + wb * b.z,
        )


def _wrap_degrees(angle: float) -> float:
    wrapped = angle % 360.0
    # -0.0 and values a hair under 360 both read as 0
    if wrapped >= 360.0 - 1e-9 or wrapped == 0.0:
        return 0.0
    return wrapped
