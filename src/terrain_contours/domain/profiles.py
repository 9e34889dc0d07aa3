import logging
from pathlib import Path

import tomlkit

from terrain_contours.domain.settings import PipelineSettings

logger = logging.getLogger(__name__)


def load_profile(path: str | Path) -> PipelineSettings:
    """
    Load and validate a TOML profile into PipelineSettings.

    Keys may live at the top level or inside a ``[pipeline]`` table.
    """
    p = Path(path)
    if not p.exists():
        msg = f'Profile not found: {p}'
        raise FileNotFoundError(msg)
    data = tomlkit.parse(p.read_text(encoding='utf-8')).unwrap()
    section = data.get('pipeline')
    if isinstance(section, dict):
        flat = {k: v for k, v in data.items() if k != 'pipeline'}
        flat.update(section)
        data = flat
    settings = PipelineSettings.model_validate(data)
    logger.info('Loaded profile %s (zoom=%d)', p, settings.zoom)
    return settings


def save_profile(path: str | Path, settings: PipelineSettings) -> Path:
    """Write settings to a TOML file under a ``[pipeline]`` table."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    doc = tomlkit.document()
    table = tomlkit.table()
    for key, value in settings.model_dump().items():
        if key == 'cache_max_tiles' and value is None:
            value = 0
        table.add(key, value)
    doc.add('pipeline', table)
    p.write_text(tomlkit.dumps(doc), encoding='utf-8')
    return p
