"""Zero-shot label vocabulary for lead-photo classification.

KEEP_LABELS describe genuine apparel and accessory photos; REJECT_LABELS
describe packaging, receipts and unusable photos. Both are sent on every
request, keep labels first.
"""

from __future__ import annotations

KEEP_LABELS: tuple[str, ...] = (
    "a hat or cap",
    "a beanie",
    "a jacket or coat",
    "a leather jacket",
    "a sweater or knitwear",
    "a shirt or top",
    "pants or trousers",
    "shorts",
    "a designer handbag",
    "a leather bag",
    "a luxury wallet",
    "designer shoes",
    "leather shoes or boots",
    "sunglasses",
    "a watch",
    "jewelry",
    "fashion accessories",
)

REJECT_LABELS: tuple[str, ...] = (
    "an empty box",
    "a cardboard box",
    "a shopping bag",
    "a paper bag",
    "a receipt",
    "a blurry photo",
    "a logo tag only",
    "a dust bag only",
)

ALL_LABELS: tuple[str, ...] = KEEP_LABELS + REJECT_LABELS
REJECT_LABEL_SET: frozenset[str] = frozenset(REJECT_LABELS)
