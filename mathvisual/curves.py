"""
Closed-form curve and point-cloud samplers.

These are cheap enough to evaluate with plain numpy vector operations,
so unlike compute.py nothing here is JIT-compiled. Every sampler returns
world-space (xs, ys) arrays; renderers.py maps them to pixels.

Parametric curves are normalised by their analytic maximum extent so
they fit a fixed window; polar curves are left in their natural radius.
"""

import math
from fractions import Fraction

import numpy as np


ROSE_MAX_DENOMINATOR = 100


def sample_angles(samples, period=2 * math.pi):
    """
    Uniform samples t_i = period * i / (N - 1), so t_0 = 0 and t_{N-1} = period.

    The first and last samples coincide on closed curves.
    """
    if samples < 2:
        raise ValueError(f"Need at least 2 samples, got {samples}")
    return period * np.arange(samples, dtype=np.float64) / (samples - 1)


def lissajous(A, B, a, b, delta, samples):
    """
    Lissajous figure x = A sin(a t + delta), y = B sin(b t).

    Normalised by max(|A|, |B|) so the larger axis spans [-1, 1].
    """
    t = sample_angles(samples)
    extent = max(abs(A), abs(B)) or 1.0
    xs = A * np.sin(a * t + delta) / extent
    ys = B * np.sin(b * t) / extent
    return xs, ys


def spirograph(R, r, d, kind, samples):
    """
    Hypotrochoid (kind 'hypo') or epitrochoid (kind 'epi').

    x = (R∓r) cos t - d cos(k t), y = (R∓r) sin t - d sin(k t), k = (R∓r)/r,
    normalised by R + |r| + |d|.
    """
    if r == 0:
        raise ValueError("spirograph rolling radius r must be non-zero")
    t = sample_angles(samples)
    Rr = R + r if kind == 'epi' else R - r
    k = Rr / r
    extent = (R + abs(r) + abs(d)) or 1.0
    xs = (Rr * np.cos(t) - d * np.cos(k * t)) / extent
    ys = (Rr * np.sin(t) - d * np.sin(k * t)) / extent
    return xs, ys


def superformula_radius(phi, m, a, b, n1, n2, n3):
    """
    Gielis superformula r(phi).

    Where both terms vanish the radius is infinite; callers drop those
    samples (non-finite points lift the pen).
    """
    with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
        t1 = np.abs(np.cos(m * phi / 4) / a) ** n2
        t2 = np.abs(np.sin(m * phi / 4) / b) ** n3
        return (t1 + t2) ** (-1.0 / n1)


def superformula(m, a, b, n1, n2, n3, samples):
    """Superformula outline as (xs, ys)."""
    t = sample_angles(samples)
    r = superformula_radius(t, m, a, b, n1, n2, n3)
    with np.errstate(invalid='ignore'):
        return r * np.cos(t), r * np.sin(t)


def rose_period(k_num, k_den):
    """
    Angle range that traces a rose r = cos(k t), k = k_num/k_den, exactly once.

    With the fraction reduced to p/q the curve closes after 2*pi*q.
    Non-integer inputs (2.5 is 5/2) are reduced too; ratios needing a
    denominator above ROSE_MAX_DENOMINATOR are approximated.
    """
    if k_den == 0:
        raise ValueError("rose curve k_den must be non-zero")
    k = (Fraction(k_num) / Fraction(k_den)).limit_denominator(ROSE_MAX_DENOMINATOR)
    return 2 * math.pi * k.denominator


def rose_curve(k_num, k_den, A, samples):
    """
    Rose r = A cos(k t).

    Negative radii are turned into the equivalent point (|r|, t + pi)
    so every sample has a valid physical angle.
    """
    t = sample_angles(samples, rose_period(k_num, k_den))
    k = k_num / k_den
    r = A * np.cos(k * t)
    theta = np.where(r < 0, t + math.pi, t)
    r = np.abs(r)
    return r * np.cos(theta), r * np.sin(theta)


def phyllotaxis(n, scale, divergence_deg):
    """
    Vogel's model: point i sits at r = scale * sqrt(i / n), theta = i * divergence.

    Returns:
        (xs, ys) arrays of n points
    """
    i = np.arange(n, dtype=np.float64)
    ang = divergence_deg * math.pi / 180
    r = scale * np.sqrt(i) / math.sqrt(n)
    t = i * ang
    return r * np.cos(t), r * np.sin(t)
