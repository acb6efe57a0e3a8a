import logging
from typing import Iterable, Optional, Tuple

import numpy as np

logger = logging.getLogger(__name__)

NEUTRAL = 3

RATING_SCALE = {
    # satisfaction wording
    "Muito Satisfeito": 5,
    "Satisfeito": 4,
    "Neutro": 3,
    "Insatisfeito": 2,
    "Muito Insatisfeito": 1,
    # agreement wording used by the wizard
    "Concordo totalmente": 5,
    "Concordo": 4,
    "Não concordo e nem discordo": 3,
    "Discordo": 2,
    "Discordo totalmente": 1,
}


def rating_to_number(label: object) -> int:
    """Map a rating label onto 1-5. Unknown labels count as neutral and are logged."""
    if isinstance(label, str) and label in RATING_SCALE:
        return RATING_SCALE[label]
    logger.warning(
        "Unrecognised rating label %r, counted as %d",
        label, NEUTRAL,
        extra={"rating_label": label, "event": "unknown_rating_label"},
    )
    return NEUTRAL


def weighted_average(ratings: Iterable[Tuple[str, int]]) -> Optional[float]:
    """Count-weighted mean of (label, count) pairs; None when there are no answers."""
    pairs = [(label, int(count)) for label, count in ratings if count]
    if not pairs:
        return None
    values = np.array([rating_to_number(label) for label, _ in pairs], dtype=float)
    weights = np.array([count for _, count in pairs], dtype=float)
    if weights.sum() <= 0:
        return None
    return float(np.average(values, weights=weights))
