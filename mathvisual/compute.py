"""
Numeric kernels for the math renderers, compiled with Numba.

This module contains every loop-heavy procedure the renderers need,
JIT-compiled so the per-pixel and per-iteration loops stay fast enough
to finish inside one frame budget. The kernels only take scalars and
numpy arrays; reading presets and applying defaults happens in
renderers.py.

Kernels:
- Escape-time iteration (Mandelbrot / Julia, z^2 + c)
- Newton's method for z^n - 1 (basins of attraction)
- Chaotic 2D maps (see MAP_* ids)
- RK4 integration of 3D flows (see ODE_* ids)
- Plane-wave interference field
- Iterated function systems driven by a pre-drawn uniform stream
- Reaction-diffusion preview field and a seeded DLA random walk
- Raster helpers: ink accumulation, dot blending, clipped line masks

None of the kernels use hidden randomness (DLA seeds its own stream
from an argument), so the same inputs always give bit-identical output.
"""

import math

import numpy as np
from numba import jit, prange


# 2D map IDs
MAP_DE_JONG = 0          # x' = sin(a y) - cos(b x),   y' = sin(c x) - cos(d y)
MAP_CLIFFORD = 1         # x' = sin(a y) + c cos(a x), y' = sin(b x) + d cos(b y)
MAP_IKEDA = 2            # t = 0.4 - 6/(1+x²+y²), rotate-and-scale by u
MAP_GUMOWSKI_MIRA = 3    # x' = b y + f(x),           y' = -x + f(x')

# 3D flow IDs
ODE_LORENZ = 0
ODE_ROSSLER = 1
ODE_AIZAWA = 2
ODE_HALVORSEN = 3


# ============================================================================
# Escape-time fractals
# ============================================================================

@jit(nopython=True, cache=True)
def escape_iterations(zr, zi, cr, ci, escape_r2, max_iter):
    """
    Iterate z <- z² + c until |z|² > escape_r2 or max_iter is reached.

    Returns:
        Number of iterations performed (max_iter means "never escaped")
    """
    iteration = 0
    while zr * zr + zi * zi <= escape_r2 and iteration < max_iter:
        zr, zi = zr * zr - zi * zi + cr, 2 * zr * zi + ci
        iteration += 1
    return iteration


@jit(nopython=True, parallel=True, cache=True)
def compute_escape_time(xs, ys, julia, c_re, c_im, escape_radius, max_iter):
    """
    Compute iteration counts for every pixel.

    Args:
        xs, ys: World coordinate of each pixel column / row
        julia: If True, z starts at the pixel and c is fixed;
               otherwise z starts at 0 and c is the pixel (Mandelbrot)
        c_re, c_im: Julia constant (ignored for Mandelbrot)
        escape_radius: Escape threshold on |z|
        max_iter: Iteration ceiling

    Returns:
        2D int32 array (height, width) of iteration counts
    """
    height = ys.shape[0]
    width = xs.shape[0]
    result = np.zeros((height, width), dtype=np.int32)
    escape_r2 = escape_radius * escape_radius

    for py in prange(height):
        y0 = ys[py]
        for px in range(width):
            x0 = xs[px]
            if julia:
                result[py, px] = escape_iterations(x0, y0, c_re, c_im, escape_r2, max_iter)
            else:
                result[py, px] = escape_iterations(0.0, 0.0, x0, y0, escape_r2, max_iter)

    return result


# ============================================================================
# Newton basins
# ============================================================================

@jit(nopython=True, cache=True)
def newton_solve(x, y, n, max_iter, tol):
    """
    Newton's method on z^n - 1 = 0 starting from z = x + iy.

    z^(n-1) is evaluated in polar form. The iteration stops early (not
    converged) when z hits the origin or the derivative vanishes.

    Returns:
        (x, y, k, converged): final point, iterations taken before the
        converging step, and whether a step shorter than tol was made
    """
    k = 0
    converged = False
    while k < max_iter:
        r = math.hypot(x, y)
        if r == 0.0:
            break
        theta = math.atan2(y, x)

        rn = r ** (n - 1)
        re = rn * math.cos((n - 1) * theta)
        im = rn * math.sin((n - 1) * theta)

        # f(z) = z * z^(n-1) - 1,  f'(z) = n * z^(n-1)
        f_re = x * re - y * im - 1.0
        f_im = x * im + y * re
        df_re = n * re
        df_im = n * im
        denom = df_re * df_re + df_im * df_im
        if denom == 0.0 or not math.isfinite(denom):
            break

        zx = x - (f_re * df_re + f_im * df_im) / denom
        zy = y - (f_im * df_re - f_re * df_im) / denom

        if math.hypot(zx - x, zy - y) < tol:
            x = zx
            y = zy
            converged = True
            break
        x = zx
        y = zy
        k += 1

    return x, y, k, converged


@jit(nopython=True, parallel=True, cache=True)
def compute_newton(xs, ys, n, max_iter, tol):
    """
    Run newton_solve for every pixel.

    Returns:
        (roots, iterations): int32 arrays (height, width). roots holds
        the index k of the root e^(2*pi*i*k/n) reached, or -1 if the
        pixel did not converge.
    """
    height = ys.shape[0]
    width = xs.shape[0]
    roots = np.empty((height, width), dtype=np.int32)
    iterations = np.zeros((height, width), dtype=np.int32)
    two_pi = 2.0 * math.pi

    for py in prange(height):
        for px in range(width):
            x, y, k, converged = newton_solve(xs[px], ys[py], n, max_iter, tol)
            iterations[py, px] = k
            if converged:
                ang = (math.atan2(y, x) + two_pi) % two_pi
                roots[py, px] = int(math.floor(ang / two_pi * n + 0.5)) % n
            else:
                roots[py, px] = -1

    return roots, iterations


# ============================================================================
# Chaotic 2D maps
# ============================================================================

@jit(nopython=True, cache=True)
def _gumowski_f(a, x):
    return a * x + (2.0 * (1.0 - a) * x * x) / (1.0 + x * x)


@jit(nopython=True, cache=True)
def map_step(map_id, coeffs, x, y):
    """
    Apply one step of the selected 2D map.

    Args:
        map_id: Which map to use (see MAP_* constants)
        coeffs: float64 array of map coefficients
                (de Jong / Clifford: a, b, c, d; Ikeda: u;
                Gumowski-Mira: a, b)
        x, y: Current state

    Returns:
        (new_x, new_y)
    """
    if map_id == MAP_DE_JONG:
        a, b, c, d = coeffs[0], coeffs[1], coeffs[2], coeffs[3]
        return math.sin(a * y) - math.cos(b * x), math.sin(c * x) - math.cos(d * y)

    elif map_id == MAP_CLIFFORD:
        a, b, c, d = coeffs[0], coeffs[1], coeffs[2], coeffs[3]
        return math.sin(a * y) + c * math.cos(a * x), math.sin(b * x) + d * math.cos(b * y)

    elif map_id == MAP_IKEDA:
        u = coeffs[0]
        t = 0.4 - 6.0 / (1.0 + x * x + y * y)
        ct = math.cos(t)
        st = math.sin(t)
        return 1.0 + u * (x * ct - y * st), u * (x * st + y * ct)

    elif map_id == MAP_GUMOWSKI_MIRA:
        a, b = coeffs[0], coeffs[1]
        xn = b * y + _gumowski_f(a, x)
        return xn, -x + _gumowski_f(a, xn)

    return x, y


@jit(nopython=True, cache=True)
def iterate_map(map_id, coeffs, steps, x0, y0):
    """
    Iterate a 2D map and record every state.

    Returns:
        (xs, ys) float64 arrays of length steps; entry i is the state
        after step i + 1
    """
    xs = np.empty(steps, dtype=np.float64)
    ys = np.empty(steps, dtype=np.float64)
    x = x0
    y = y0
    for i in range(steps):
        x, y = map_step(map_id, coeffs, x, y)
        xs[i] = x
        ys[i] = y
    return xs, ys


# ============================================================================
# 3D flows (strange attractors)
# ============================================================================

@jit(nopython=True, cache=True)
def ode_deriv(ode_id, coeffs, x, y, z):
    """Right-hand side of the selected flow (see ODE_* constants)."""
    if ode_id == ODE_LORENZ:
        sigma, rho, beta = coeffs[0], coeffs[1], coeffs[2]
        return sigma * (y - x), x * (rho - z) - y, x * y - beta * z

    elif ode_id == ODE_ROSSLER:
        a, b, c = coeffs[0], coeffs[1], coeffs[2]
        return -(y + z), x + a * y, b + z * (x - c)

    elif ode_id == ODE_AIZAWA:
        a, b, c, d, e, f = coeffs[0], coeffs[1], coeffs[2], coeffs[3], coeffs[4], coeffs[5]
        return ((z - b) * x - d * y,
                d * x + (z - b) * y,
                c + a * z - (z * z * z) / 3.0 - (x * x + y * y) * (1.0 + e * z) + f * z * (x * x * x))

    elif ode_id == ODE_HALVORSEN:
        a = coeffs[0]
        return (-a * x - 4.0 * y - 4.0 * z - y * y,
                -a * y - 4.0 * z - 4.0 * x - z * z,
                -a * z - 4.0 * x - 4.0 * y - x * x)

    return 0.0, 0.0, 0.0


@jit(nopython=True, cache=True)
def integrate_ode(ode_id, coeffs, steps, dt, x0, y0, z0):
    """
    Integrate a 3D flow with classic 4th-order Runge-Kutta.

    Returns:
        float64 array (steps, 3); row i is the state after step i + 1
    """
    states = np.empty((steps, 3), dtype=np.float64)
    x = x0
    y = y0
    z = z0
    h = dt / 2.0
    for i in range(steps):
        k1x, k1y, k1z = ode_deriv(ode_id, coeffs, x, y, z)
        k2x, k2y, k2z = ode_deriv(ode_id, coeffs, x + h * k1x, y + h * k1y, z + h * k1z)
        k3x, k3y, k3z = ode_deriv(ode_id, coeffs, x + h * k2x, y + h * k2y, z + h * k2z)
        k4x, k4y, k4z = ode_deriv(ode_id, coeffs, x + dt * k3x, y + dt * k3y, z + dt * k3z)
        x += dt * (k1x + 2.0 * k2x + 2.0 * k3x + k4x) / 6.0
        y += dt * (k1y + 2.0 * k2y + 2.0 * k3y + k4y) / 6.0
        z += dt * (k1z + 2.0 * k2z + 2.0 * k3z + k4z) / 6.0
        states[i, 0] = x
        states[i, 1] = y
        states[i, 2] = z
    return states


# ============================================================================
# Interference field and IFS
# ============================================================================

@jit(nopython=True, parallel=True, cache=True)
def compute_scalar_field(xs, ys, waves, phases):
    """
    Average of plane waves cos((kx*x + ky*y) * kmag * pi + phase).

    Args:
        xs, ys: World coordinate of each pixel column / row
        waves: float64 array (k, 3) of (kx, ky, kmag)
        phases: float64 array (k,)

    Returns:
        2D float64 array (height, width) with values in [-1, 1]
    """
    height = ys.shape[0]
    width = xs.shape[0]
    count = waves.shape[0]
    result = np.zeros((height, width), dtype=np.float64)

    for py in prange(height):
        y = ys[py]
        for px in range(width):
            x = xs[px]
            v = 0.0
            for i in range(count):
                v += math.cos((waves[i, 0] * x + waves[i, 1] * y) * waves[i, 2] * math.pi + phases[i])
            result[py, px] = v / count

    return result


@jit(nopython=True, cache=True)
def run_ifs(maps, probs, uniforms, x0, y0):
    """
    Chaos game for an iterated function system.

    For each uniform draw r the first map whose cumulative probability
    reaches r is applied (the last map if rounding leaves a gap):
    x' = a x + b y + e,  y' = c x + d y + f.

    Args:
        maps: float64 array (m, 6) of (a, b, c, d, e, f)
        probs: float64 array (m,) of map probabilities
        uniforms: float64 array of draws in [0, 1), one per step

    Returns:
        (xs, ys) float64 arrays, one state per draw
    """
    n = uniforms.shape[0]
    m = probs.shape[0]
    xs = np.empty(n, dtype=np.float64)
    ys = np.empty(n, dtype=np.float64)
    x = x0
    y = y0
    for i in range(n):
        r = uniforms[i]
        acc = 0.0
        j = m - 1
        for k in range(m):
            acc += probs[k]
            if r <= acc:
                j = k
                break
        xn = maps[j, 0] * x + maps[j, 1] * y + maps[j, 4]
        yn = maps[j, 2] * x + maps[j, 3] * y + maps[j, 5]
        x = xn
        y = yn
        xs[i] = x
        ys[i] = y
    return xs, ys


# ============================================================================
# Reaction-diffusion preview and diffusion-limited aggregation
# ============================================================================

@jit(nopython=True, parallel=True, cache=True)
def compute_rd_preview(width, height, feed, kill):
    """
    Cheap stand-in for a Gray-Scott pattern: summed sines banded by F and k.

    x = px / width and y = py / height, row 0 at the top.

    Returns:
        2D uint8 array (height, width) of grey levels
    """
    result = np.empty((height, width), dtype=np.uint8)
    shift = 30.0 * (feed - 0.03) - 20.0 * (kill - 0.06)

    for py in prange(height):
        y = py / height
        for px in range(width):
            x = px / width
            v = math.sin(12.0 * x + 8.0 * y)
            v += 0.5 * math.sin(22.0 * x - 11.0 * y + 1.7)
            v += 0.25 * math.sin(40.0 * x + 3.0 * y + 0.3)
            v = v / 1.75
            s = 0.5 + 0.5 * math.sin(8.0 * v + shift)
            result[py, px] = int(math.floor(255.0 * s + 0.5))

    return result


@jit(nopython=True, cache=True)
def _touches(grid, x, y):
    height = grid.shape[0]
    width = grid.shape[1]
    for dy in range(-1, 2):
        for dx in range(-1, 2):
            nx = x + dx
            ny = y + dy
            if nx >= 0 and nx < width and ny >= 0 and ny < height and grid[ny, nx]:
                return True
    return False


@jit(nopython=True, cache=True)
def dla_grow(grid, walkers, max_steps, seed):
    """
    Grow a diffusion-limited aggregate from the cells already set in grid.

    Each walker starts on the top row at a random column and takes up to
    max_steps unit steps (right, left, down, up with equal odds). It
    stops when it leaves the inner border, and sticks where it first
    touches the cluster (8-neighbourhood).

    Args:
        grid: bool array (height, width), modified in place
        walkers: Number of walkers released
        max_steps: Step budget per walker
        seed: Seed for the walk's random stream

    Returns:
        Number of walkers that stuck
    """
    np.random.seed(seed)
    height = grid.shape[0]
    width = grid.shape[1]
    stuck = 0
    for i in range(walkers):
        x = int(math.floor(np.random.random() * width))
        y = 0
        for t in range(max_steps):
            r = np.random.random()
            if r < 0.25:
                x += 1
            elif r < 0.5:
                x -= 1
            elif r < 0.75:
                y += 1
            else:
                y -= 1
            if x < 1 or x >= width - 1 or y < 1 or y >= height - 1:
                break
            if _touches(grid, x, y):
                grid[y, x] = True
                stuck += 1
                break
    return stuck


# ============================================================================
# Raster helpers
# ============================================================================

@jit(nopython=True, cache=True)
def _blend(dst, src, alpha):
    return int(math.floor(dst * (1.0 - alpha) + src * alpha + 0.5))


@jit(nopython=True, cache=True)
def ink_points(buf, px, py, start, amount):
    """
    Darken the pixel under each point by a fixed amount (ink accumulation).

    Args:
        buf: RGBA uint8 array (height, width, 4), modified in place
        px, py: Unrounded pixel coordinates
        start: Index of the first point to plot
        amount: Grey levels removed per hit (clamped at 0)

    Returns:
        Number of points that landed on the raster
    """
    height = buf.shape[0]
    width = buf.shape[1]
    hits = 0
    for i in range(start, px.shape[0]):
        fx = px[i]
        fy = py[i]
        # Written so NaN fails the test too
        if not (fx >= -0.5 and fx < width - 0.5 and fy >= -0.5 and fy < height - 0.5):
            continue
        ix = int(math.floor(fx + 0.5))
        iy = int(math.floor(fy + 0.5))
        for c in range(3):
            v = int(buf[iy, ix, c]) - amount
            buf[iy, ix, c] = v if v > 0 else 0
        buf[iy, ix, 3] = 255
        hits += 1
    return hits


@jit(nopython=True, cache=True)
def blend_points(buf, px, py, start, r, g, b, alpha):
    """
    Composite a translucent 1-pixel dot at each point, one after another.

    Overlapping dots darken further, like repeated fillRect calls.

    Returns:
        Number of points that landed on the raster
    """
    height = buf.shape[0]
    width = buf.shape[1]
    hits = 0
    for i in range(start, px.shape[0]):
        fx = px[i]
        fy = py[i]
        if not (fx >= -0.5 and fx < width - 0.5 and fy >= -0.5 and fy < height - 0.5):
            continue
        ix = int(math.floor(fx + 0.5))
        iy = int(math.floor(fy + 0.5))
        buf[iy, ix, 0] = _blend(buf[iy, ix, 0], r, alpha)
        buf[iy, ix, 1] = _blend(buf[iy, ix, 1], g, alpha)
        buf[iy, ix, 2] = _blend(buf[iy, ix, 2], b, alpha)
        buf[iy, ix, 3] = 255
        hits += 1
    return hits


@jit(nopython=True, cache=True)
def _clip_edge(p, q, t0, t1):
    """One Liang-Barsky edge test. Returns (visible, t0, t1)."""
    if p == 0.0:
        return q >= 0.0, t0, t1
    t = q / p
    if p < 0.0:
        if t > t1:
            return False, t0, t1
        if t > t0:
            t0 = t
    else:
        if t < t0:
            return False, t0, t1
        if t < t1:
            t1 = t
    return True, t0, t1


@jit(nopython=True, cache=True)
def _clip_segment(x0, y0, x1, y1, x_max, y_max):
    """Clip a segment to [0, x_max] x [0, y_max]."""
    dx = x1 - x0
    dy = y1 - y0
    t0 = 0.0
    t1 = 1.0
    ok, t0, t1 = _clip_edge(-dx, x0, t0, t1)
    if ok:
        ok, t0, t1 = _clip_edge(dx, x_max - x0, t0, t1)
    if ok:
        ok, t0, t1 = _clip_edge(-dy, y0, t0, t1)
    if ok:
        ok, t0, t1 = _clip_edge(dy, y_max - y0, t0, t1)
    return ok, x0 + t0 * dx, y0 + t0 * dy, x0 + t1 * dx, y0 + t1 * dy


@jit(nopython=True, cache=True)
def _draw_line(mask, x0, y0, x1, y1):
    """Bresenham line between two on-raster integer points."""
    dx = abs(x1 - x0)
    dy = -abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx + dy
    while True:
        mask[y0, x0] = True
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 >= dy:
            err += dy
            x0 += sx
        if e2 <= dx:
            err += dx
            y0 += sy


@jit(nopython=True, cache=True)
def stroke_mask(mask, px, py):
    """
    Rasterise a polyline into a boolean coverage mask.

    Consecutive points are joined; a non-finite point lifts the pen.
    Segments are clipped to the raster before rasterising so points far
    off-screen cost nothing.

    Args:
        mask: bool array (height, width), modified in place
        px, py: Unrounded pixel coordinates of the path vertices

    Returns:
        Number of segments that touched the raster
    """
    height = mask.shape[0]
    width = mask.shape[1]
    x_max = width - 1.0
    y_max = height - 1.0
    segments = 0
    have_prev = False
    prev_x = 0.0
    prev_y = 0.0
    for i in range(px.shape[0]):
        x = px[i]
        y = py[i]
        if not (math.isfinite(x) and math.isfinite(y)):
            have_prev = False
            continue
        if have_prev:
            ok, ax, ay, bx, by = _clip_segment(prev_x, prev_y, x, y, x_max, y_max)
            if ok:
                _draw_line(mask,
                           int(math.floor(ax + 0.5)), int(math.floor(ay + 0.5)),
                           int(math.floor(bx + 0.5)), int(math.floor(by + 0.5)))
                segments += 1
        prev_x = x
        prev_y = y
        have_prev = True
    return segments
