# -*- coding: utf-8 -*-
# Tincture: Mixing and mapping colors across the CSS Color 4 spaces
#
# Copyright (c) 2026 opticsWolf
#
# SPDX-License-Identifier: LGPL-3.0-or-later

"""
Project metadata for the opticsWolf Tincture.
"""

from typing import Final

# Metadata Definitions
__title__: Final[str] = "Tincture"
__description__: Final[str] = (
    "Color conversion, CSS gamut mapping and premultiplied interpolation "
    "across the fourteen CSS Color 4 color spaces."
)
__version__: Final[str] = "0.1.0"
__author__: Final[str] = "opticsWolf"
__license__: Final[str] = "LGPL-3.0-or-later"
__copyright__: Final[str] = "Copyright (c) 2026 opticsWolf"

def metadata_summary() -> dict[str, str]:
    """Returns a dictionary of project metadata for introspection."""
    return {
        "title": __title__,
        "version": __version__,
        "author": __author__,
        "license": __license__,
        "description": __description__,
    }
