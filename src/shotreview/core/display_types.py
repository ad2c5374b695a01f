# -*- coding: utf-8 -*-
"""App Store Connect screenshot display types and their accepted sizes."""

from __future__ import annotations


# Portrait sizes; landscape is the same pair swapped.
DISPLAY_TYPE_SIZES: dict[str, tuple[tuple[int, int], ...]] = {
    "APP_IPHONE_69": ((1320, 2868), (1290, 2796), (1260, 2736)),
    "APP_IPHONE_67": ((1290, 2796), (1284, 2778), (1242, 2688)),
    "APP_IPHONE_65": ((1284, 2778), (1242, 2688)),
    "APP_IPHONE_61": ((1206, 2622), (1179, 2556), (1170, 2532), (1125, 2436), (1080, 2340)),
    "APP_IPHONE_58": ((1170, 2532), (1125, 2436), (1080, 2340)),
    "APP_IPHONE_55": ((1242, 2208),),
    "APP_IPHONE_47": ((750, 1334),),
    "APP_IPAD_PRO_3GEN_129": ((2064, 2752), (2048, 2732)),
    "APP_IPAD_PRO_129": ((2048, 2732),),
    "APP_IPAD_PRO_3GEN_11": ((1668, 2420), (1668, 2388), (1640, 2360), (1488, 2266)),
    "APP_IPAD_105": ((1668, 2224),),
    "APP_DESKTOP": ((800, 1280), (900, 1440), (1600, 2560), (1800, 2880)),
}


def _build_lookup() -> dict[tuple[int, int], frozenset[str]]:
    lookup: dict[tuple[int, int], set[str]] = {}
    for display_type, sizes in DISPLAY_TYPE_SIZES.items():
        for width, height in sizes:
            lookup.setdefault((width, height), set()).add(display_type)
            lookup.setdefault((height, width), set()).add(display_type)
    return {size: frozenset(names) for size, names in lookup.items()}


_SIZE_LOOKUP = _build_lookup()


def match_display_types(width: int, height: int) -> frozenset[str]:
    """Return every display type that accepts an image of this size."""
    return _SIZE_LOOKUP.get((int(width), int(height)), frozenset())


def is_valid_app_store_size(width: int, height: int) -> bool:
    return bool(match_display_types(width, height))
