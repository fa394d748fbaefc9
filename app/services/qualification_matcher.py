"""
Qualification matching
Normalizes free-text education strings to a ranked level and gates
applications on a job's education requirement.
"""
import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from app.config import settings

logger = logging.getLogger(__name__)


class QualificationLevel(str, Enum):
    """Canonical levels, declared lowest to highest."""

    HIGH_SCHOOL = "high_school"
    DIPLOMA = "diploma"
    ASSOCIATE = "associate"
    BACHELORS = "bachelors"
    MASTERS = "masters"
    PHD = "phd"

    @property
    def rank(self) -> int:
        return _LEVEL_ORDER.index(self)


_LEVEL_ORDER: List[QualificationLevel] = list(QualificationLevel)


DEFAULT_QUALIFICATION_ALIASES: Dict[QualificationLevel, List[str]] = {
    QualificationLevel.HIGH_SCHOOL: [
        "high school", "secondary", "ssc", "hsc", "hssc", "10th", "12th",
        "matric", "intermediate", "junior college", "cbse", "a level", "o level",
    ],
    QualificationLevel.DIPLOMA: ["diploma", "polytechnic", "certificate course"],
    QualificationLevel.ASSOCIATE: ["associate"],
    QualificationLevel.BACHELORS: [
        "bachelor", "undergraduate", "graduate", "graduation", "grad", "college degree",
        "btech", "beng", "bsc", "bcom", "bca", "bba", "ba", "bs",
    ],
    QualificationLevel.MASTERS: [
        "master", "postgraduate", "postgraduation", "mtech", "msc", "mba",
        "mca", "mcom", "ma", "ms",
    ],
    QualificationLevel.PHD: ["phd", "doctorate", "doctoral", "doctor of philosophy", "dphil"],
}


def _fold(text: str) -> str:
    """Lower-case, drop dots/apostrophes ("B.Tech" -> "btech") and collapse everything else to spaces."""
    text = str(text).strip().lower()
    text = re.sub(r"[.'’]", "", text)
    text = re.sub(r"[^a-z0-9]+", " ", text)
    # "post graduate" -> "postgraduate"
    text = re.sub(r"\bpost graduat", "postgraduat", text)
    return text.strip()


@dataclass(frozen=True)
class EligibilityResult:
    eligible: bool
    message: str


class QualificationMatcher:
    """
    Maps free text to a QualificationLevel using an alias table.

    Levels are tried lowest first and the first alias hit wins. An alias
    matches when it appears at the start of a word of the folded text, so
    "masters" matches "master" while "mba" does not match "ba". Aliases of
    four characters or fewer only match whole words.
    """

    def __init__(self, aliases: Optional[Mapping[QualificationLevel, Sequence[str]]] = None):
        table = aliases if aliases is not None else DEFAULT_QUALIFICATION_ALIASES
        self._patterns = []
        for level in _LEVEL_ORDER:
            folded = [_fold(alias) for alias in table.get(level, [])]
            folded = [alias for alias in folded if alias]
            if not folded:
                continue
            pattern = re.compile(r"(?<![a-z0-9])(?:" + "|".join(self._alias_regex(a) for a in folded) + ")")
            self._patterns.append((level, pattern))

    @staticmethod
    def _alias_regex(alias: str) -> str:
        # Short aliases ("ba", "ma", "grad") must be whole words
        if len(alias) <= 4:
            return re.escape(alias) + r"(?![a-z0-9])"
        return re.escape(alias)

    def normalize(self, text: Optional[str]) -> Optional[QualificationLevel]:
        """Return the canonical level for ``text`` or None when unrecognized."""
        if not text:
            return None
        folded = _fold(text)
        if not folded:
            return None
        for level, pattern in self._patterns:
            if pattern.search(folded):
                return level
        return None

    def check_eligibility(
        self,
        required: Optional[str],
        applicant_qualifications: Iterable[Optional[str]],
    ) -> EligibilityResult:
        """
        Decide whether an applicant's education satisfies ``required``.

        Args:
            required: Job's free-text education requirement
            applicant_qualifications: Degree strings of the applicant's education records

        Returns:
            EligibilityResult; the message names the requirement and, on
            rejection, the applicant's best recognized qualification.
        """
        required_level = self.normalize(required)
        if required_level is None:
            logger.warning(f"Unknown job qualification: {required!r}")
            return EligibilityResult(
                True,
                f"Job qualification '{required}' not recognized, proceeding with application",
            )

        records = list(applicant_qualifications)
        if not records:
            return EligibilityResult(
                False,
                f"No education records found. Please add your qualifications to apply. Required: {required}",
            )

        best_text = None
        best_level = None
        for text in records:
            level = self.normalize(text)
            if level is None:
                continue
            if best_level is None or level.rank > best_level.rank:
                best_level, best_text = level, text

        if best_level is None:
            return EligibilityResult(
                False,
                "None of your qualifications are recognized. "
                f"Please update your education details. Required: {required}",
            )

        if best_level.rank >= required_level.rank:
            return EligibilityResult(
                True,
                f"Qualification requirements met. Your highest qualification: {best_text}, Required: {required}",
            )

        return EligibilityResult(
            False,
            f"You are not eligible. Required: {required}, but your highest qualification is: {best_text}",
        )


def load_alias_table(path: str) -> Dict[QualificationLevel, List[str]]:
    """Read a JSON alias table: {"bachelors": ["bachelor", "btech"], ...}."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    table: Dict[QualificationLevel, List[str]] = {}
    for name, aliases in raw.items():
        try:
            level = QualificationLevel(name)
        except ValueError:
            raise ValueError(
                f"Unknown qualification level '{name}'. "
                f"Available levels: {', '.join(level.value for level in _LEVEL_ORDER)}"
            )
        if not isinstance(aliases, list):
            raise ValueError(f"Aliases for '{name}' must be a list of strings")
        table[level] = [str(alias) for alias in aliases]
    return table


@lru_cache(maxsize=1)
def get_qualification_matcher() -> QualificationMatcher:
    """Matcher built from QUALIFICATION_ALIASES_PATH, or the default table."""
    if settings.QUALIFICATION_ALIASES_PATH:
        logger.info(f"Loading qualification aliases from {settings.QUALIFICATION_ALIASES_PATH}")
        return QualificationMatcher(load_alias_table(settings.QUALIFICATION_ALIASES_PATH))
    return QualificationMatcher()
