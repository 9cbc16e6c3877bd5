"""
Field detection service.

Suggests which contact field each spreadsheet column maps to, with a
0–100 confidence score.

Scoring combines four independent signals per candidate field:
  1. Fuzzy text similarity of the header to label/id/keywords (0–60)
  2. Shape of the sample values vs. the field's data type     (0–40)
  3. Keyword bonus for synonyms found in the header           (0–30)
  4. Legacy word overlap with label and id                    (0–20)

Only the top fuzzy candidates are scored in detail. When the fuzzy
index finds nothing, every field is scored on word overlap and data
shape alone. Anything at or below the threshold stays unmapped.
"""

import logging
import re
from collections.abc import Iterable, Sequence

from rapidfuzz import fuzz, process

from contact_import.core.config import settings
from contact_import.core.field_catalog import require_catalog
from contact_import.core.keywords import get_field_keywords
from contact_import.schemas.fields import (
    ContactFieldDefinition,
    DetectedFieldMapping,
    FieldScore,
)
from contact_import.services.normalization import (
    EMAIL_PATTERN,
    FALSE_TOKENS,
    TRUE_TOKENS,
    normalize_header,
    parse_datetime,
    parse_number,
    round_half_up,
    strip_to_alphanum,
)

logger = logging.getLogger(__name__)

# Index weights: a label hit counts more than an id hit, which counts
# more than a synonym hit.
LABEL_WEIGHT = 1.0
LABEL_WORD_WEIGHT = 0.85
ID_WEIGHT = 0.95
KEYWORD_WEIGHT = 0.9

MIN_TOKEN_LENGTH = 2

FUZZY_MAX = 60
DATA_MAX = 40
KEYWORD_MAX = 30
KEYWORD_STEP = 15
LEGACY_MAX = 20
LEGACY_EXACT = 25
LEGACY_LABEL_WORD = 10
LEGACY_ID_WORD = 8


# ─── Sample Patterns ──────────────────────────────────────────

_STRICT_EMAIL = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")
_PHONE = re.compile(r"^\+?[\d\s\-().]{10,20}$")
_LOOSE_PHONE = re.compile(r"^\+?[\d\s\-()]{7,20}$")
_DIGIT_RUN = re.compile(r"\d{3,}")
_NUMBER = re.compile(r"^-?\d*\.?\d+$")
_DATE_SHAPE = re.compile(r"^\d{4}-\d{2}-\d{2}|^\d{1,2}/\d{1,2}/\d{2,4}|^\d{1,2}-\d{1,2}-\d{2,4}")
_YEAR = re.compile(r"\d{4}")
_BOOLEAN_TOKENS = TRUE_TOKENS | FALSE_TOKENS


def analyze_value_pattern(value: str, data_type: str) -> tuple[bool, bool]:
    """
    Classify one sample against a data type.

    Returns (exact, partial): exact when the value fully conforms,
    partial when it only looks related (e.g. contains '@' for email).
    """
    trimmed = value.strip()
    if not trimmed:
        return False, False

    if data_type == "email":
        return bool(_STRICT_EMAIL.match(trimmed)), "@" in trimmed
    if data_type == "phone":
        has_digits = bool(_DIGIT_RUN.search(trimmed))
        return bool(_PHONE.match(trimmed)) and has_digits, has_digits
    if data_type == "number":
        return bool(_NUMBER.match(trimmed)), any(c.isdigit() for c in trimmed)
    if data_type == "datetime":
        parses = parse_datetime(trimmed) is not None
        return parses and bool(_DATE_SHAPE.match(trimmed)), parses or bool(_YEAR.search(trimmed))
    if data_type == "checkbox":
        return trimmed.lower() in _BOOLEAN_TOKENS, False
    return len(trimmed) < 200, True


def matches_field_type(value: str, data_type: str) -> bool:
    """Looser single-test conformance used on the fallback path."""
    trimmed = value.strip()
    if not trimmed:
        return False

    if data_type == "email":
        return bool(EMAIL_PATTERN.match(trimmed))
    if data_type == "phone":
        return bool(_LOOSE_PHONE.match(trimmed))
    if data_type == "number":
        return parse_number(trimmed) is not None
    if data_type == "datetime":
        return parse_datetime(trimmed) is not None
    if data_type == "checkbox":
        return trimmed.lower() in _BOOLEAN_TOKENS
    return True


def _tokens(text: str) -> list[str]:
    return [t for t in re.split(r"[\s_-]+", text) if len(t) >= MIN_TOKEN_LENGTH]


def _overlaps(a: str, b: str) -> bool:
    return a in b or b in a


# ─── Matcher ──────────────────────────────────────────────────

class FieldMatcher:
    """
    Header → field suggestion engine over one field catalog.

    The fuzzy index is built once per instance; the keyword table is
    shared read-only configuration.
    """

    def __init__(self, field_catalog: Iterable[ContactFieldDefinition] | None):
        self._fields = require_catalog(field_catalog)
        self._choices: list[str] = []
        self._owners: list[tuple[int, float]] = []
        for idx, field in enumerate(self._fields):
            self._index_field(idx, field)

    def _index_field(self, idx: int, field: ContactFieldDefinition) -> None:
        label = normalize_header(field.label)
        entries = [(label, LABEL_WEIGHT), (strip_to_alphanum(field.label), LABEL_WEIGHT)]
        entries += [(word, LABEL_WORD_WEIGHT) for word in _tokens(label)]
        entries.append((field.id.lower(), ID_WEIGHT))
        entries += [(strip_to_alphanum(kw), KEYWORD_WEIGHT) for kw in get_field_keywords(field.id)]

        seen: set[str] = set()
        for choice, weight in entries:
            if not choice or choice in seen:
                continue
            seen.add(choice)
            self._choices.append(choice)
            self._owners.append((idx, weight))

    # ─── Public API ───────────────────────────────────────────

    def get_available_fields(self) -> list[ContactFieldDefinition]:
        return list(self._fields)

    def detect_fields(
        self,
        headers: Sequence[str],
        sample_rows: Sequence[Sequence[str]],
    ) -> list[DetectedFieldMapping]:
        """Suggest a target field for every header, in header order."""
        logger.debug("Detecting fields for %d headers", len(headers))
        leading_rows = list(sample_rows[: settings.SAMPLE_ROW_LIMIT])

        detected: list[DetectedFieldMapping] = []
        for index, header in enumerate(headers):
            samples = [
                str(row[index]).strip()
                for row in leading_rows
                if index < len(row) and row[index] is not None and str(row[index]).strip()
            ]
            best = self._best_match(normalize_header(header), samples)
            if best is None:
                logger.debug("No field suggested for %r", header)
                detected.append(DetectedFieldMapping(
                    source_header=header,
                    sample_values=samples[: settings.SAMPLE_DISPLAY_LIMIT],
                ))
                continue

            field, score = best
            logger.debug("Header %r → %s (%d)", header, field.id, score.total)
            detected.append(DetectedFieldMapping(
                source_header=header,
                target_field_id=field.id,
                confidence=score.total,
                classification="core" if field.is_core else "custom",
                sample_values=samples[: settings.SAMPLE_DISPLAY_LIMIT],
            ))

        mapped = sum(1 for d in detected if d.target_field_id)
        logger.info("Field detection mapped %d of %d headers", mapped, len(detected))
        return detected

    def search_fields(self, query: str) -> list[ContactFieldDefinition]:
        """Fields ranked by fuzzy similarity to a free-text query, for manual selection."""
        if not query.strip():
            return list(self._fields)
        ranked = self._fuzzy_candidates(normalize_header(query))
        return [self._fields[idx] for idx, _ in ranked[: settings.SEARCH_RESULT_LIMIT]]

    def explain_header(self, header: str, samples: Sequence[str] = ()) -> list[FieldScore]:
        """Score breakdown for every field evaluated for this header."""
        clean = normalize_header(header)
        values = [s.strip() for s in samples if s and s.strip()]
        candidates = self._fuzzy_candidates(clean)[: settings.FUZZY_CANDIDATE_LIMIT]
        if not candidates:
            return [self._fallback_score(clean, values, f) for f in self._fields]
        return [
            self._combined_score(clean, values, self._fields[idx], similarity)
            for idx, similarity in candidates
        ]

    # ─── Matching ─────────────────────────────────────────────

    def _best_match(
        self,
        header: str,
        samples: list[str],
    ) -> tuple[ContactFieldDefinition, FieldScore] | None:
        candidates = self._fuzzy_candidates(header)
        if candidates:
            scored = [
                (self._fields[idx], self._combined_score(header, samples, self._fields[idx], similarity))
                for idx, similarity in candidates[: settings.FUZZY_CANDIDATE_LIMIT]
            ]
        else:
            scored = [(f, self._fallback_score(header, samples, f)) for f in self._fields]

        best: tuple[ContactFieldDefinition, FieldScore] | None = None
        for field, score in scored:
            logger.debug("  %s: %s", field.id, score.model_dump(exclude={"field_id"}))
            if score.total <= settings.MATCH_THRESHOLD:
                continue
            if best is None or score.total > best[1].total:
                best = (field, score)
            elif score.total == best[1].total and field.is_core and not best[0].is_core:
                best = (field, score)
        return best

    def _fuzzy_candidates(self, header: str) -> list[tuple[int, float]]:
        """
        Fields whose best weighted similarity clears the cutoff.

        Returns (field index, similarity 0–1) sorted by similarity,
        then catalog order.
        """
        queries = {header, strip_to_alphanum(header), *_tokens(header)}
        queries.discard("")
        cutoff = settings.FUZZY_SCORE_CUTOFF

        best: dict[int, float] = {}
        for query in queries:
            hits = process.extract(
                query,
                self._choices,
                scorer=fuzz.ratio,
                score_cutoff=cutoff,
                limit=None,
            )
            for _, score, choice_idx in hits:
                field_idx, weight = self._owners[choice_idx]
                similarity = score / 100.0 * weight
                if similarity > best.get(field_idx, 0.0):
                    best[field_idx] = similarity

        ranked = [(idx, sim) for idx, sim in best.items() if sim * 100.0 >= cutoff]
        ranked.sort(key=lambda item: (-item[1], item[0]))
        return ranked

    # ─── Scoring ──────────────────────────────────────────────

    def _combined_score(
        self,
        header: str,
        samples: list[str],
        field: ContactFieldDefinition,
        similarity: float,
    ) -> FieldScore:
        fuzzy_score = round_half_up(min(similarity, 1.0) * FUZZY_MAX)
        data_score = self.data_score(samples, field)
        keyword_bonus = self.keyword_bonus(header, field.id)
        legacy_bonus = self.legacy_similarity(header, field)
        return FieldScore(
            field_id=field.id,
            fuzzy_score=fuzzy_score,
            data_score=data_score,
            keyword_bonus=keyword_bonus,
            legacy_bonus=legacy_bonus,
            total=min(fuzzy_score + data_score + keyword_bonus + legacy_bonus, 100),
            method="fuzzy",
        )

    def _fallback_score(
        self,
        header: str,
        samples: list[str],
        field: ContactFieldDefinition,
    ) -> FieldScore:
        legacy_bonus = self.legacy_similarity(header, field)
        data_score = self.simple_data_score(samples, field)
        return FieldScore(
            field_id=field.id,
            data_score=data_score,
            legacy_bonus=legacy_bonus,
            total=min(legacy_bonus + data_score, 100),
            method="fallback",
        )

    @staticmethod
    def data_score(samples: Sequence[str], field: ContactFieldDefinition) -> int:
        """Exact conformance earns 0.4/percent, partial 0.2/percent, capped at 40."""
        if not samples:
            return 0
        exact = partial = 0
        for value in samples:
            is_exact, is_partial = analyze_value_pattern(value, field.data_type)
            if is_exact:
                exact += 1
            elif is_partial:
                partial += 1
        exact_pct = exact / len(samples) * 100
        partial_pct = partial / len(samples) * 100
        return round_half_up(min(exact_pct * 0.4 + partial_pct * 0.2, DATA_MAX))

    @staticmethod
    def simple_data_score(samples: Sequence[str], field: ContactFieldDefinition) -> int:
        if not samples:
            return 0
        matches = sum(1 for value in samples if matches_field_type(value, field.data_type))
        return round_half_up(matches / len(samples) * 100 * 0.4)

    @staticmethod
    def keyword_bonus(header: str, field_id: str) -> int:
        words = _tokens(header)
        bonus = 0
        for keyword in get_field_keywords(field_id):
            if any(_overlaps(word, keyword) for word in words):
                bonus += KEYWORD_STEP
        return min(bonus, KEYWORD_MAX)

    @staticmethod
    def legacy_similarity(header: str, field: ContactFieldDefinition) -> int:
        label = field.label.lower()
        field_id = field.id.lower()
        label_words = _tokens(label)

        score = 0
        if header == label or header == field_id:
            score += LEGACY_EXACT
        for word in _tokens(header):
            if any(_overlaps(word, label_word) for label_word in label_words):
                score += LEGACY_LABEL_WORD
            if _overlaps(word, field_id):
                score += LEGACY_ID_WORD
        return min(score, LEGACY_MAX)
