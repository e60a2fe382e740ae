"""
Renderer dispatch: preset -> algorithm -> pixels.

Each renderer is one small function registered under the renderer type
it implements (the preset's renderer_hint.type). A renderer reads its
parameters from the preset with documented defaults, clamps every
iteration / sample count to a hard ceiling so runtime stays bounded,
draws into the RenderSurface, and returns a dict of stats describing
the work it did.

Renderers raise on bad input; they never catch. The single failure
boundary lives in component.MathVisual.

Renderer signature:
    render(family, params, surface, view_bounds=None, rng=None) -> dict
"""

import logging
import math
import re
import time

import numpy as np

from .colormaps import (
    BACKGROUND, DEFAULT_PALETTE, INK, INK_ALPHA, NEWTON_BACKGROUND,
    create_root_palette, get_palette,
)
from .compute import (
    MAP_CLIFFORD, MAP_DE_JONG, MAP_GUMOWSKI_MIRA, MAP_IKEDA,
    ODE_AIZAWA, ODE_HALVORSEN, ODE_LORENZ, ODE_ROSSLER,
    compute_escape_time, compute_newton, compute_rd_preview, compute_scalar_field,
    dla_grow, integrate_ode, iterate_map, run_ifs,
)
from .coords import mandelbrot_view, pixel_grid, validate_bounds
from .curves import lissajous, phyllotaxis, rose_curve, spirograph, superformula
from .errors import UnknownRendererError
from .presets import renderer_type


logger = logging.getLogger(__name__)


# Hard ceilings: a preset may ask for more, it never gets more
ESCAPE_MAX_ITER = 300
ITER_MAP_MAX_STEPS = 80000
ODE_MAX_STEPS = 15000
CURVE_MAX_SAMPLES = 20000
PHYLLOTAXIS_MAX_POINTS = 3000
SCALAR_FIELD_MAX_WAVES = 8
IFS_MAX_POINTS = 50000
NEWTON_MAX_ITER = 50
NEWTON_MAX_DEGREE = 32
DLA_MAX_WALKERS = 8000
DLA_MAX_STEPS = 5000

# Default world windows
ESCAPE_BOUNDS = (-2.5, 1.5, -1.5, 1.5)
ITER_MAP_BOUNDS = (-3.0, 3.0, -3.0, 3.0)
ODE_BOUNDS = (-30.0, 30.0, -30.0, 30.0)
IFS_BOUNDS = (-3.0, 3.0, -6.0, 1.0)
NEWTON_BOUNDS = (-2.0, 2.0, -2.0, 2.0)
FIELD_BOUNDS = (-1.0, 1.0, -1.0, 1.0)
CURVE_MARGIN = 1.2           # curves normalised to [-1, 1] get 20% breathing room

ITER_MAP_SEED = (0.1, 0.0)
ITER_MAP_INK = 30            # grey levels removed per hit

ODE_SEED = (0.1, 0.0, 0.0)

GOLDEN_ANGLE_DEG = 137.507

# Coefficients used when a preset leaves one out
FAMILY_DEFAULTS = {
    'julia': {'c_re': -0.8, 'c_im': 0.156},
    'de_jong': {'a': 1.4, 'b': -2.3, 'c': 2.4, 'd': -2.1},
    'clifford': {'a': -1.4, 'b': 1.6, 'c': 1.0, 'd': 0.7},
    'ikeda': {'u': 0.918},
    'gumowski_mira': {'a': -0.48, 'b': 0.93},
    'lorenz': {'sigma': 10.0, 'rho': 28.0, 'beta': 8.0 / 3.0},
    'rossler': {'a': 0.2, 'b': 0.2, 'c': 5.7},
    'aizawa': {'a': 0.95, 'b': 0.7, 'c': 0.6, 'd': 3.5, 'e': 0.25, 'f': 0.1},
    'halvorsen': {'a': 1.89},
    'lissajous': {'A': 1.0, 'B': 1.0, 'a': 3.0, 'b': 2.0, 'delta': math.pi / 2},
    'spirograph': {'R': 5.0, 'r': 3.0, 'd': 5.0, 'kind': 'hypo'},
    'superformula': {'m': 6.0, 'a': 1.0, 'b': 1.0, 'n1': 1.0, 'n2': 7.0, 'n3': 8.0},
    'rose_curve': {'k_num': 5, 'k_den': 1, 'A': 1.0},
}

# (kx, ky, kmag) plane waves 120 degrees apart
DEFAULT_WAVES = ((1.0, 0.0, 1.0), (0.309, 0.951, 1.0), (-0.809, 0.588, 1.0))
DEFAULT_PHASES = (0.0, 1.0, 2.0)

# Barnsley fern hanging from the origin, sized for IFS_BOUNDS
FERN_MAPS = (
    {'a': 0.0, 'b': 0.0, 'c': 0.0, 'd': 0.16, 'e': 0.0, 'f': 0.0, 'p': 0.01},
    {'a': 0.85, 'b': -0.04, 'c': 0.04, 'd': 0.85, 'e': 0.0, 'f': -0.96, 'p': 0.85},
    {'a': 0.2, 'b': 0.26, 'c': -0.23, 'd': 0.22, 'e': 0.0, 'f': -0.96, 'p': 0.07},
    {'a': -0.15, 'b': -0.28, 'c': -0.26, 'd': 0.24, 'e': 0.0, 'f': -0.264, 'p': 0.07},
)

MAP_IDS = {
    'de_jong': (MAP_DE_JONG, ('a', 'b', 'c', 'd')),
    'clifford': (MAP_CLIFFORD, ('a', 'b', 'c', 'd')),
    'ikeda': (MAP_IKEDA, ('u',)),
    'gumowski_mira': (MAP_GUMOWSKI_MIRA, ('a', 'b')),
}

ODE_IDS = {
    'lorenz': (ODE_LORENZ, ('sigma', 'rho', 'beta')),
    'rossler': (ODE_ROSSLER, ('a', 'b', 'c')),
    'aizawa': (ODE_AIZAWA, ('a', 'b', 'c', 'd', 'e', 'f')),
    'halvorsen': (ODE_HALVORSEN, ('a',)),
}

_DEGREE_RE = re.compile(r'z\*\*(\d+)')


# Registry of renderers, keyed by renderer_hint.type
RENDERERS = {}


def register(kind):
    """Decorator adding a render function to RENDERERS under `kind`."""
    def decorator(func):
        RENDERERS[kind] = func
        return func
    return decorator


def _get(params, key, default):
    """params[key], or default when the key is missing or null."""
    value = params.get(key)
    return default if value is None else value


def _count(params, key, default, ceiling, floor=0):
    """Integer count parameter clamped to [floor, ceiling]."""
    return max(floor, min(int(_get(params, key, default)), ceiling))


def _coeffs(family, params, keys):
    defaults = FAMILY_DEFAULTS[family]
    return np.array([float(_get(params, k, defaults[k])) for k in keys], dtype=np.float64)


def _family_params(family, params):
    """Family defaults overlaid with whatever the preset supplies."""
    merged = dict(FAMILY_DEFAULTS.get(family, {}))
    merged.update({k: v for k, v in params.items() if v is not None})
    return merged


def _curve_bounds(surface, margin=CURVE_MARGIN):
    """Window keeping a unit curve round whatever the surface aspect."""
    a = surface.aspect
    return (-margin * a, margin * a, -margin, margin)


def parse_degree(polynomial, default=3):
    """Degree n of a 'z**n - 1' polynomial string."""
    m = _DEGREE_RE.search(polynomial or '')
    n = int(m.group(1)) if m else default
    return max(1, min(n, NEWTON_MAX_DEGREE))


@register('escape_time')
def render_escape_time(family, params, surface, view_bounds=None, rng=None):
    """
    Mandelbrot / Julia sets by escape time, z <- z² + c.

    Params (defaults):
        max_iter (400, capped at 300), escape_radius (2.0),
        bounds ([-2.5, 1.5, -1.5, 1.5]), palette ('gray'),
        julia: c_re, c_im (-0.8, 0.156),
        mandelbrot: centre + zoom derive the window from the aspect ratio
    """
    max_iter = _count(params, 'max_iter', 400, ESCAPE_MAX_ITER, floor=1)
    if view_bounds is not None:
        bounds = view_bounds
    elif family == 'mandelbrot' and params.get('centre') is not None and params.get('zoom'):
        bounds = mandelbrot_view(params['centre'], params['zoom'], surface.aspect)
    else:
        bounds = _get(params, 'bounds', ESCAPE_BOUNDS)
    bounds = validate_bounds(bounds)

    julia = family == 'julia'
    p = _family_params('julia', params) if julia else params
    c_re = float(p.get('c_re', 0.0))
    c_im = float(p.get('c_im', 0.0))
    escape_radius = float(_get(params, 'escape_radius', 2.0))

    xs, ys = pixel_grid(bounds, surface.width, surface.height)
    iterations = compute_escape_time(xs, ys, julia, c_re, c_im, escape_radius, max_iter)

    palette = get_palette(_get(params, 'palette', DEFAULT_PALETTE), max_iter)
    surface.put_rgb(palette[iterations])

    return {
        'bounds': bounds,
        'max_iter': max_iter,
        'iterations': int(iterations.max()),
        'inside': int((iterations >= max_iter).sum()),
    }


@register('newton_basins')
def render_newton_basins(family, params, surface, view_bounds=None, rng=None):
    """
    Basins of attraction of Newton's method on z^n - 1.

    Params (defaults):
        polynomial ('z**3 - 1', n parsed from 'z**n'), max_iter (40,
        capped at 50), tolerance (1e-6), bounds ([-2, 2, -2, 2])

    Converged pixels take the colour of the root they reached (hue from
    its angle); pixels that never converge keep the background tone.
    """
    n = parse_degree(params.get('polynomial'))
    max_iter = _count(params, 'max_iter', 40, NEWTON_MAX_ITER, floor=1)
    tol = float(_get(params, 'tolerance', 1e-6))
    bounds = validate_bounds(view_bounds if view_bounds is not None
                             else _get(params, 'bounds', NEWTON_BOUNDS))

    xs, ys = pixel_grid(bounds, surface.width, surface.height)
    roots, iterations = compute_newton(xs, ys, n, max_iter, tol)

    rgb = np.empty((surface.height, surface.width, 3), dtype=np.uint8)
    rgb[:] = NEWTON_BACKGROUND
    converged = roots >= 0
    rgb[converged] = create_root_palette(n)[roots[converged]]
    surface.put_rgb(rgb)

    return {
        'bounds': bounds,
        'degree': n,
        'max_iter': max_iter,
        'iterations': int(iterations.max()),
        'converged': int(converged.sum()),
    }


@register('iter_map')
def render_iter_map(family, params, surface, view_bounds=None, rng=None):
    """
    Chaotic 2D maps (de Jong, Clifford, Ikeda, Gumowski-Mira).

    Params (defaults):
        steps (50000, capped at 80000), discard (1000), family
        coefficients (see FAMILY_DEFAULTS)

    Starts from (0.1, 0). Each plotted point removes a fixed amount of
    grey from the pixel under it, so density shows up as darkness.
    """
    if family not in MAP_IDS:
        raise ValueError(f"iter_map cannot draw family {family!r}")
    map_id, keys = MAP_IDS[family]
    steps = _count(params, 'steps', 50000, ITER_MAP_MAX_STEPS)
    discard = max(0, int(_get(params, 'discard', 1000)))
    bounds = validate_bounds(view_bounds if view_bounds is not None
                             else _get(params, 'bounds', ITER_MAP_BOUNDS))

    xs, ys = iterate_map(map_id, _coeffs(family, params, keys), steps, *ITER_MAP_SEED)
    plotted = surface.ink(xs, ys, bounds, ITER_MAP_INK, start=discard + 1)

    return {'bounds': bounds, 'steps': steps, 'plotted': plotted}


@register('ode')
def render_ode(family, params, surface, view_bounds=None, rng=None):
    """
    Strange attractors of 3D flows (Lorenz, Rössler, Aizawa, Halvorsen).

    Params (defaults):
        steps (8000, capped at 15000), dt (0.01), xyz0 ([0.1, 0, 0]),
        family coefficients (see FAMILY_DEFAULTS)

    Integrated with RK4, projected obliquely with
    (x*0.8 + z*0.2, y*0.8 - z*0.1), every other step joined into one
    translucent path.
    """
    if family not in ODE_IDS:
        raise ValueError(f"ode cannot draw family {family!r}")
    ode_id, keys = ODE_IDS[family]
    steps = _count(params, 'steps', 8000, ODE_MAX_STEPS)
    dt = float(_get(params, 'dt', 0.01))
    x0, y0, z0 = (float(v) for v in _get(params, 'xyz0', ODE_SEED))
    bounds = validate_bounds(view_bounds if view_bounds is not None
                             else _get(params, 'bounds', ODE_BOUNDS))

    states = integrate_ode(ode_id, _coeffs(family, params, keys), steps, dt, x0, y0, z0)
    sampled = states[::2]
    with np.errstate(invalid='ignore', over='ignore'):
        xs = sampled[:, 0] * 0.8 + sampled[:, 2] * 0.2
        ys = sampled[:, 1] * 0.8 - sampled[:, 2] * 0.1
    segments = surface.stroke(xs, ys, bounds, INK, INK_ALPHA)

    return {'bounds': bounds, 'steps': steps, 'vertices': len(xs), 'segments': segments}


@register('parametric_2d')
def render_parametric_2d(family, params, surface, view_bounds=None, rng=None):
    """
    Lissajous figures and spirographs as one continuous stroke.

    Params (defaults):
        samples (3000, capped at 20000), plus the family's shape
        parameters (see FAMILY_DEFAULTS)
    """
    samples = _count(params, 'samples', 3000, CURVE_MAX_SAMPLES, floor=2)
    p = _family_params(family, params)
    if family == 'lissajous':
        xs, ys = lissajous(float(p['A']), float(p['B']), float(p['a']), float(p['b']),
                           float(p['delta']), samples)
    elif family == 'spirograph':
        xs, ys = spirograph(float(p['R']), float(p['r']), float(p['d']), p['kind'], samples)
    else:
        raise ValueError(f"parametric_2d cannot draw family {family!r}")

    bounds = validate_bounds(view_bounds if view_bounds is not None else _curve_bounds(surface))
    segments = surface.stroke(xs, ys, bounds, INK, INK_ALPHA)
    return {'bounds': bounds, 'samples': samples, 'segments': segments,
            'path': (xs, ys)}


@register('polar_2d')
def render_polar_2d(family, params, surface, view_bounds=None, rng=None):
    """
    Superformula and rose curves as one continuous stroke.

    Params (defaults):
        samples (2000, capped at 20000), plus the family's shape
        parameters (see FAMILY_DEFAULTS)
    """
    samples = _count(params, 'samples', 2000, CURVE_MAX_SAMPLES, floor=2)
    p = _family_params(family, params)
    if family == 'superformula':
        xs, ys = superformula(float(p['m']), float(p['a']), float(p['b']),
                              float(p['n1']), float(p['n2']), float(p['n3']), samples)
    elif family == 'rose_curve':
        xs, ys = rose_curve(p['k_num'], p['k_den'], float(p['A']), samples)
    else:
        raise ValueError(f"polar_2d cannot draw family {family!r}")

    bounds = validate_bounds(view_bounds if view_bounds is not None else _curve_bounds(surface))
    segments = surface.stroke(xs, ys, bounds, INK, INK_ALPHA)
    return {'bounds': bounds, 'samples': samples, 'segments': segments,
            'path': (xs, ys)}


@register('point_polar')
def render_point_polar(family, params, surface, view_bounds=None, rng=None):
    """
    Phyllotaxis scatter: one translucent dot per point, no path.

    Params (defaults):
        n_points (1500, capped at 3000), scale (0.7),
        divergence_deg (137.507, the golden angle)
    """
    n = _count(params, 'n_points', 1500, PHYLLOTAXIS_MAX_POINTS, floor=1)
    scale = float(_get(params, 'scale', 0.7))
    divergence = float(_get(params, 'divergence_deg', GOLDEN_ANGLE_DEG))

    xs, ys = phyllotaxis(n, scale, divergence)
    bounds = validate_bounds(view_bounds if view_bounds is not None
                             else _curve_bounds(surface, margin=1.0))
    plotted = surface.dots(xs, ys, bounds, INK, INK_ALPHA)
    return {'bounds': bounds, 'points': n, 'plotted': plotted}


@register('scalar_field')
def render_scalar_field(family, params, surface, view_bounds=None, rng=None):
    """
    Interference of a few plane waves mapped to grey.

    Params (defaults):
        k_vectors ([[1, 0, 1], [0.309, 0.951, 1], [-0.809, 0.588, 1]],
        each (kx, ky[, kmag=1]); at most 8 are used),
        phases ([0, 1, 2]; missing phases are 0)
    """
    raw_waves = list(_get(params, 'k_vectors', DEFAULT_WAVES))[:SCALAR_FIELD_MAX_WAVES]
    if not raw_waves:
        raise ValueError("scalar_field needs at least one wave")
    waves = np.array([(w[0], w[1], w[2] if len(w) > 2 else 1.0) for w in raw_waves],
                     dtype=np.float64)
    raw_phases = list(_get(params, 'phases', DEFAULT_PHASES))
    phases = np.array([float(raw_phases[i]) if i < len(raw_phases) and raw_phases[i] is not None else 0.0
                       for i in range(len(waves))], dtype=np.float64)
    bounds = validate_bounds(view_bounds if view_bounds is not None else FIELD_BOUNDS)

    xs, ys = pixel_grid(bounds, surface.width, surface.height)
    field = compute_scalar_field(xs, ys, waves, phases)
    intensity = (240 - np.floor(190 * (field * 0.5 + 0.5))).clip(0, 255).astype(np.uint8)
    surface.put_rgb(np.repeat(intensity[:, :, np.newaxis], 3, axis=2))

    return {'bounds': bounds, 'waves': len(waves)}


@register('ifs')
def render_ifs(family, params, surface, view_bounds=None, rng=None):
    """
    Iterated function system drawn with the chaos game.

    Params (defaults):
        maps (the Barnsley fern), points (30000, capped at 50000),
        discard (100), seed (0; used only when no rng is passed)

    Args:
        rng: numpy Generator supplying the map choices. Pass one to
             control the stream; otherwise a generator seeded from
             params['seed'] is used so the output is reproducible.
    """
    maps = _get(params, 'maps', FERN_MAPS)
    if not maps:
        raise ValueError("ifs needs at least one affine map")
    coeffs = np.array([[m['a'], m['b'], m['c'], m['d'], m['e'], m['f']] for m in maps],
                      dtype=np.float64)
    probs = np.array([m.get('p', 1.0 / len(maps)) for m in maps], dtype=np.float64)
    points = _count(params, 'points', 30000, IFS_MAX_POINTS)
    discard = max(0, int(_get(params, 'discard', 100)))
    bounds = validate_bounds(view_bounds if view_bounds is not None
                             else _get(params, 'bounds', IFS_BOUNDS))

    if rng is None:
        rng = np.random.default_rng(int(_get(params, 'seed', 0)))
    xs, ys = run_ifs(coeffs, probs, rng.random(points), 0.0, 0.0)
    plotted = surface.dots(xs, ys, bounds, INK, INK_ALPHA, start=discard + 1)

    kept_x = xs[discard + 1:]
    kept_y = ys[discard + 1:]
    extent = None
    if len(kept_x):
        extent = (float(kept_x.min()), float(kept_x.max()),
                  float(kept_y.min()), float(kept_y.max()))
    return {'bounds': bounds, 'points': points, 'plotted': plotted, 'extent': extent}


@register('reaction_diffusion')
def render_reaction_diffusion(family, params, surface, view_bounds=None, rng=None):
    """
    Spots / stripes preview of a Gray-Scott system.

    Not a simulation: a fixed sum of sines is banded through a phase set
    by the feed and kill rates, so nearby (F, k) give nearby pictures.

    Params (defaults):
        F (0.04), k (0.06)
    """
    feed = float(_get(params, 'F', 0.04))
    kill = float(_get(params, 'k', 0.06))
    grey = compute_rd_preview(surface.width, surface.height, feed, kill)
    surface.put_rgb(np.repeat(grey[:, :, np.newaxis], 3, axis=2))
    return {'F': feed, 'k': kill}


@register('dla')
def render_dla(family, params, surface, view_bounds=None, rng=None):
    """
    Diffusion-limited aggregation grown from the centre pixel.

    Params (defaults):
        walkers (4000, capped at 8000), max_steps (2000 per walker,
        capped at 5000), seed (0; used only when no rng is passed)

    Args:
        rng: numpy Generator; one draw from it seeds the walk
    """
    walkers = _count(params, 'walkers', 4000, DLA_MAX_WALKERS)
    max_steps = _count(params, 'max_steps', 2000, DLA_MAX_STEPS)
    if rng is None:
        rng = np.random.default_rng(int(_get(params, 'seed', 0)))

    grid = np.zeros((surface.height, surface.width), dtype=np.bool_)
    grid[surface.height // 2, surface.width // 2] = True
    stuck = dla_grow(grid, walkers, max_steps, int(rng.integers(0, 2 ** 31 - 1)))

    surface.pixels[grid, :3] = INK
    surface.pixels[grid, 3] = 255
    return {'walkers': walkers, 'max_steps': max_steps, 'stuck': stuck,
            'cluster': int(grid.sum())}


def render_preset(preset, surface, rng=None, bounds=None, background=BACKGROUND):
    """
    Render one preset onto a surface.

    Args:
        preset: Catalog entry (family, params, renderer_hint)
        surface: RenderSurface to draw into
        rng: Optional numpy Generator for renderers that sample randomly
        bounds: Optional world window overriding the preset's own
        background: Colour filled before drawing (None to draw on top
                    of what is already there)

    Returns:
        Stats dict from the renderer plus 'renderer', 'family' and
        'elapsed' (seconds)

    Raises:
        UnknownRendererError if the preset's renderer type is not registered
    """
    kind = renderer_type(preset)
    try:
        render = RENDERERS[kind]
    except KeyError:
        raise UnknownRendererError(kind) from None

    family = preset.get('family')
    params = preset.get('params') or {}
    view_bounds = bounds if bounds is not None else preset.get('view_bounds')

    if background is not None:
        surface.fill(background)

    start = time.perf_counter()
    stats = render(family, params, surface, view_bounds=view_bounds, rng=rng)
    stats['renderer'] = kind
    stats['family'] = family
    stats['elapsed'] = time.perf_counter() - start
    logger.debug("Rendered %s (%s) at %dx%d in %.3fs",
                 preset.get('id', family), kind, surface.width, surface.height, stats['elapsed'])
    return stats
