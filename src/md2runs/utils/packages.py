"""Helpers for checking installed optional packages."""

#  Copyright (c) 2025 Tom Villani, Ph.D.

# src/md2runs/utils/packages.py
from __future__ import annotations

from importlib import metadata
from typing import Optional, Tuple


def get_package_version(package_name: str) -> Optional[str]:
    """Get the installed version of a distribution.

    Parameters
    ----------
    package_name : str
        Distribution name as used by pip (e.g. "Pillow", not "PIL")

    Returns
    -------
    str or None
        Version string if the distribution is installed, None otherwise

    """
    try:
        return metadata.version(package_name)
    except metadata.PackageNotFoundError:
        return None


def check_version_requirement(package_name: str, version_spec: str) -> Tuple[bool, Optional[str]]:
    """Check if an installed distribution meets a version requirement.

    Parameters
    ----------
    package_name : str
        Distribution name
    version_spec : str
        Version specification (e.g., ">=3.0.0")

    Returns
    -------
    tuple
        (meets_requirement, installed_version)

    """
    installed_version = get_package_version(package_name)
    if not installed_version:
        return False, None

    from packaging import version
    from packaging.specifiers import SpecifierSet

    spec = SpecifierSet(version_spec)
    return version.parse(installed_version) in spec, installed_version
