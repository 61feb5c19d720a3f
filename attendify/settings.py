"""Environment-driven configuration."""

import os
from typing import List

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _parse_presets(raw: str) -> List[float]:
    presets = []
    for item in raw.split(','):
        item = item.strip()
        if item:
            presets.append(float(item))
    return presets


DEFAULT_THRESHOLD = float(os.getenv('DEFAULT_THRESHOLD', '75'))
THRESHOLD_PRESETS = _parse_presets(os.getenv('THRESHOLD_PRESETS', '60,65,70,75,80,85'))

MAX_INPUT_SIZE_KB = int(os.getenv('MAX_INPUT_SIZE_KB', '256'))
MAX_INPUT_SIZE = MAX_INPUT_SIZE_KB * 1024

ALLOW_ORIGINS = os.getenv('ALLOW_ORIGINS', '*').split(',')
DEBUG = os.getenv('DEBUG', 'False').lower() == 'true'

# Local-only by default
HOST = os.getenv('HOST', '127.0.0.1')
PORT = int(os.getenv('PORT', '8000'))

LOG_LEVEL = os.getenv('ATTENDIFY_LOG_LEVEL', 'INFO').upper()
