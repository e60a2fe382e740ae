"""
Preset catalog and the index -> preset accessor.

A preset is a plain dict, exactly as stored in presets.json:

    {
        "id": "lorenz:03",
        "family": "lorenz",
        "preset_index": 3,
        "params": {"sigma": 10, "rho": 28, "beta": 2.667, ...},
        "renderer_hint": {"type": "ode"},
        "view_bounds": [-30, 30, -30, 30],      # optional
        "notes": "classic butterfly"            # optional
    }

The catalog is read-only after loading and is passed to whoever needs
it, so tests can hand in their own small catalogs. get_preset_for_quote()
falls back to the packaged catalog for callers that don't care.
"""

import copy
import json
import logging
import os
from types import MappingProxyType

from .errors import EmptyCatalogError


logger = logging.getLogger(__name__)

CATALOG_PATH = os.path.join(os.path.dirname(__file__), 'presets.json')

# Fixed family order used to turn an index into a family.
# Changing the order changes which preset every index maps to.
FAMILIES = (
    'julia', 'mandelbrot', 'newton', 'de_jong', 'clifford',
    'ikeda', 'gumowski_mira', 'lorenz', 'rossler', 'aizawa',
    'halvorsen', 'lissajous', 'spirograph', 'superformula',
    'rose_curve', 'phyllotaxis', 'scalar_field', 'ifs',
)

# Every family is drawn by exactly one renderer
RENDERER_FOR_FAMILY = MappingProxyType({
    'julia': 'escape_time',
    'mandelbrot': 'escape_time',
    'newton': 'newton_basins',
    'de_jong': 'iter_map',
    'clifford': 'iter_map',
    'ikeda': 'iter_map',
    'gumowski_mira': 'iter_map',
    'lorenz': 'ode',
    'rossler': 'ode',
    'aizawa': 'ode',
    'halvorsen': 'ode',
    'lissajous': 'parametric_2d',
    'spirograph': 'parametric_2d',
    'superformula': 'polar_2d',
    'rose_curve': 'polar_2d',
    'phyllotaxis': 'point_polar',
    'scalar_field': 'scalar_field',
    'ifs': 'ifs',
    # Slow previews, reachable by family or id but never by index
    'reaction_diffusion': 'reaction_diffusion',
    'dla': 'dla',
})

DEFAULT_RENDERER = 'escape_time'


def renderer_type(preset):
    """
    The renderer a preset asks for.

    Without a renderer_hint the family decides; unknown families get
    escape_time.
    """
    hint = preset.get('renderer_hint') or {}
    return hint.get('type') or RENDERER_FOR_FAMILY.get(preset.get('family'), DEFAULT_RENDERER)


def _normalize_entry(entry):
    """
    Private copy of an entry with the implied renderer hint filled in.

    params is exposed read-only so catalog entries can't be changed
    through the presets handed out.
    """
    entry = dict(entry)
    entry['params'] = dict(entry.get('params') or {})
    entry = copy.deepcopy(entry)
    family = entry.get('family')
    if family not in RENDERER_FOR_FAMILY:
        logger.warning("Preset %r has unknown family %r", entry.get('id'), family)
    if not (entry.get('renderer_hint') or {}).get('type') and family in RENDERER_FOR_FAMILY:
        entry['renderer_hint'] = {'type': RENDERER_FOR_FAMILY[family]}
    entry['params'] = MappingProxyType(entry['params'])
    return entry


class PresetCatalog:
    """
    Immutable, ordered collection of presets.

    Usage:
        catalog = PresetCatalog(entries)
        preset = catalog.preset_for_quote(42)
    """

    def __init__(self, entries):
        self._entries = tuple(_normalize_entry(e) for e in entries)
        self._by_family = {}
        for entry in self._entries:
            self._by_family.setdefault(entry.get('family'), []).append(entry)

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __getitem__(self, i):
        return self._entries[i]

    def preset_for_quote(self, index):
        """
        Deterministically pick the preset for a quote index.

        The family is FAMILIES[index % 18]; within that family the
        (index // 18)-th preset is used, wrapping around. If the catalog
        has no preset of that family the first catalog entry is returned.

        Raises:
            EmptyCatalogError if the catalog is empty
        """
        if not self._entries:
            raise EmptyCatalogError("Cannot pick a preset from an empty catalog")

        family = FAMILIES[index % len(FAMILIES)]
        matching = self._by_family.get(family)
        if not matching:
            logger.warning("No presets for family %r (index %d), using first entry", family, index)
            return self._entries[0]

        preset_index = (index // len(FAMILIES)) % len(matching)
        return matching[preset_index]

    def families(self):
        """Sorted list of the families present in the catalog."""
        return sorted(f for f in self._by_family if f is not None)

    def get(self, preset_id):
        """Look up a preset by id (None if missing)."""
        for entry in self._entries:
            if entry.get('id') == preset_id:
                return entry
        return None

    def filter(self, family=None, query=''):
        """
        Presets of one family and/or whose id or family contains `query`.

        Matching on the query is case-insensitive.
        """
        q = query.strip().lower()
        out = []
        for entry in self._entries:
            if family is not None and entry.get('family') != family:
                continue
            if q and q not in str(entry.get('id', '')).lower() and q not in str(entry.get('family', '')).lower():
                continue
            out.append(entry)
        return out


def load_catalog(path=None):
    """
    Load a catalog from a JSON file holding a list of preset dicts.

    Args:
        path: JSON file (default: the packaged presets.json)

    Raises:
        OSError / json.JSONDecodeError if the file can't be read
    """
    path = path or CATALOG_PATH
    with open(path, 'r', encoding='utf-8') as f:
        entries = json.load(f)
    if isinstance(entries, dict):
        entries = entries.get('presets', [])
    catalog = PresetCatalog(entries)
    logger.debug("Loaded %d presets from %s", len(catalog), path)
    return catalog


_default_catalog = None


def default_catalog():
    """The packaged catalog, loaded on first use."""
    global _default_catalog
    if _default_catalog is None:
        _default_catalog = load_catalog()
    return _default_catalog


def get_preset_for_quote(index, catalog=None):
    """Pick the preset for an index from `catalog` (default: packaged one)."""
    if catalog is None:
        catalog = default_catalog()
    return catalog.preset_for_quote(index)
