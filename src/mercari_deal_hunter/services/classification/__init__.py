"""Lead-photo classification gate."""

from mercari_deal_hunter.services.classification.gate import (
    ClassificationGate,
    Decision,
    ImageClassifier,
)
from mercari_deal_hunter.services.classification.labels import (
    ALL_LABELS,
    KEEP_LABELS,
    REJECT_LABELS,
)

__all__ = [
    "ALL_LABELS",
    "ClassificationGate",
    "Decision",
    "ImageClassifier",
    "KEEP_LABELS",
    "REJECT_LABELS",
]
