#!/usr/bin/env python3
"""
Readers Module
Rig readers for the file source (USD) and the scene source (Maya ASCII)
"""

from pathlib import Path

from .base_reader import BaseReader, ExtractionError

# Supported file extensions
USD_EXTENSIONS = {'.usd', '.usda', '.usdc'}
MAYA_EXTENSIONS = {'.ma'}
SUPPORTED_EXTENSIONS = USD_EXTENSIONS | MAYA_EXTENSIONS


def create_reader(input_file, progress_callback=None, **options):
    """Factory function to create appropriate reader based on file extension

    Args:
        input_file: Path to input scene file
        progress_callback: Optional progress callback passed to the reader
        **options: Reader-specific options (e.g. strict_bind for Maya)

    Returns:
        BaseReader: USDReader or MayaReader instance

    Raises:
        ValueError: If file extension is not supported
    """
    if not is_supported_format(input_file):
        raise ValueError(
            f"Unsupported file format: {Path(input_file).suffix.lower()}\n"
            f"Supported formats: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
        )

    if get_file_type(input_file) == 'usd':
        # Lazy import to avoid requiring USD when only reading Maya files
        from .usd_reader import USDReader
        return USDReader(input_file, progress_callback=progress_callback)

    from .maya_reader import MayaReader
    return MayaReader(input_file, progress_callback=progress_callback,
                      strict_bind=options.get('strict_bind', False))


def get_file_type(input_file):
    """Get the file type string for a given file

    Args:
        input_file: Path to input scene file

    Returns:
        str: 'usd', 'maya', or 'unknown'
    """
    ext = Path(input_file).suffix.lower()
    if ext in USD_EXTENSIONS:
        return 'usd'
    elif ext in MAYA_EXTENSIONS:
        return 'maya'
    return 'unknown'


def is_supported_format(input_file):
    """Check if a file has a supported format"""
    ext = Path(input_file).suffix.lower()
    return ext in SUPPORTED_EXTENSIONS


__all__ = [
    'BaseReader',
    'ExtractionError',
    'create_reader',
    'get_file_type',
    'is_supported_format',
    'USD_EXTENSIONS',
    'MAYA_EXTENSIONS',
    'SUPPORTED_EXTENSIONS',
]
