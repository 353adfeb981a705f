"""
Configuration settings for citeresolve
"""

import copy
import os
from typing import Dict, Any

# Default configuration
DEFAULT_CONFIG = {
    # Bibliographic data service
    "inspire": {
        "base_url": "https://inspirehep.net/api",
        "timeout": 30,
        "max_retries": 3,
    },

    # Reference-list parsing
    "parsing": {
        "max_label": 1500,
        "max_entry_length": 2000,
        "page_chunk_size": 8000,
    },

    # Resolution thresholds (empirically tuned)
    "matching": {
        "strict_mode_enabled": True,
        "strict_mismatch_count": 5,
        "strict_ratio": 0.85,
        "well_aligned_rate": 0.95,
        "over_parsed_ratio": 1.05,
        "min_strict_coverage": 0.5,
        "window_buffer": 3,
        "window_retry_buffer": 8,
    },

    # Output Settings
    "output": {
        "logs_dir": "logs",
    },

    "debug": False,
}


def get_config() -> Dict[str, Any]:
    """Get configuration with environment variable overrides"""
    config = copy.deepcopy(DEFAULT_CONFIG)

    # Override with environment variables if present
    if os.getenv("CITERESOLVE_DEBUG"):
        config["debug"] = os.getenv("CITERESOLVE_DEBUG").lower() == "true"

    if os.getenv("CITERESOLVE_INSPIRE_URL"):
        config["inspire"]["base_url"] = os.getenv("CITERESOLVE_INSPIRE_URL").rstrip("/")

    if os.getenv("CITERESOLVE_TIMEOUT"):
        config["inspire"]["timeout"] = int(os.getenv("CITERESOLVE_TIMEOUT"))

    if os.getenv("CITERESOLVE_MAX_RETRIES"):
        config["inspire"]["max_retries"] = int(os.getenv("CITERESOLVE_MAX_RETRIES"))

    if os.getenv("CITERESOLVE_STRICT_MODE"):
        config["matching"]["strict_mode_enabled"] = os.getenv("CITERESOLVE_STRICT_MODE").lower() == "true"

    if os.getenv("CITERESOLVE_MAX_LABEL"):
        config["parsing"]["max_label"] = int(os.getenv("CITERESOLVE_MAX_LABEL"))

    if os.getenv("CITERESOLVE_LOGS_DIR"):
        config["output"]["logs_dir"] = os.getenv("CITERESOLVE_LOGS_DIR")

    return config
