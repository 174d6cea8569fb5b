"""Shell settings, with environment overrides."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_GAS_LIMIT = 100
UNLIMITED = ('unlimited', 'none', '0')


@dataclass(frozen=True)
class Settings:
    prompt: str = '>> '
    capture_prompt: str = 'i> '
    history_path: Path = Path('history.txt')
    capture_history_path: Path = Path('interactive_history.txt')
    gas_limit: Optional[int] = DEFAULT_GAS_LIMIT
    log_level: str = 'WARNING'

    @classmethod
    def from_env(cls, environ=None):
        env = os.environ if environ is None else environ
        defaults = cls()
        return cls(
            prompt=env.get('FORTH_PROMPT', defaults.prompt),
            capture_prompt=env.get('FORTH_CAPTURE_PROMPT', defaults.capture_prompt),
            history_path=Path(env.get('FORTH_HISTORY', defaults.history_path)),
            capture_history_path=Path(
                env.get('FORTH_CAPTURE_HISTORY', defaults.capture_history_path)
            ),
            gas_limit=_gas_limit(env.get('FORTH_GAS_LIMIT'), defaults.gas_limit),
            log_level=env.get('FORTH_LOG_LEVEL', defaults.log_level).upper(),
        )


def _gas_limit(raw, default):
    if raw is None:
        return default
    if raw.strip().lower() in UNLIMITED:
        return None
    try:
        parsed = int(raw)
    except ValueError:
        logger.warning('ignoring FORTH_GAS_LIMIT=%r, using %s', raw, default)
        return default
    if parsed < 0:
        logger.warning('ignoring negative FORTH_GAS_LIMIT=%r, using %s', raw, default)
        return default
    return parsed
