"""
Consolidated utilities module.
This module re-exports commonly used utilities from specialized modules.
"""

# Logging utilities
from .logging_utils import setup_logging

# Configuration management
from .config import config, ServiceConfig

# Caching utilities
from .cache import Cache

# File and text processing utilities
from .file_utils import (
    generate_hash,
    sanitize_filename,
    is_pptx_filename,
    output_filename,
    validate_text_length,
    truncate_with_ellipsis,
    file_extension,
)

__all__ = [
    # Logging
    'setup_logging',
    # Config
    'config',
    'ServiceConfig',
    # Cache
    'Cache',
    # File utilities
    'generate_hash',
    'sanitize_filename',
    'is_pptx_filename',
    'output_filename',
    'validate_text_length',
    'truncate_with_ellipsis',
    'file_extension',
]
