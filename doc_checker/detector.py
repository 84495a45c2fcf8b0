# doc_checker/detector.py
"""
Heuristic contradiction detection.

Three independent passes run over the whole corpus and are concatenated in
order: time, numerical, policy. Each pass emits at most one finding, except
the policy pass which emits one per opposing keyword pair that fires.
"""
import logging
import re
import time
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Pattern, Sequence, Tuple

from doc_checker.models import (
    ConflictingStatement,
    Contradiction,
    ContradictionType,
    DocumentRecord,
    Severity,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanPattern:
    category: str
    regex: str


# Alternation order matters: earlier entries win at the same text position.
TIME_PATTERNS: Tuple[ScanPattern, ...] = (
    ScanPattern("clock", r"\d{1,2}:\d{2}\s?(?:AM|PM)"),
    ScanPattern("hour", r"\d{1,2}\s?(?:AM|PM)"),
    ScanPattern("midnight", r"midnight"),
    ScanPattern("noon", r"noon"),
    ScanPattern("deadline", r"before\s+\d{1,2}:\d{2}"),
)

NUMERIC_PATTERNS: Tuple[ScanPattern, ...] = (
    ScanPattern("percentage", r"\d+%"),
    ScanPattern("duration", r"\d+\s?(?:days?|weeks?|months?)"),
    ScanPattern("amount", r"\$\d+"),
)

POLICY_KEYWORDS: Tuple[str, ...] = (
    "required", "mandatory", "optional", "prohibited", "allowed", "forbidden",
)

OPPOSING_PAIRS: Tuple[Tuple[str, str], ...] = (
    ("required", "optional"),
    ("mandatory", "optional"),
    ("allowed", "prohibited"),
    ("allowed", "forbidden"),
)

TIME_LOCATION = "Section 1"
NUMERIC_LOCATION = "Requirements Section"
POLICY_LOCATION = "Policy Section"


class Match(NamedTuple):
    document: str
    statement: str
    category: str


def compile_patterns(patterns: Sequence[ScanPattern]) -> Pattern:
    """Join a pattern table into one case-insensitive alternation with named groups."""
    body = "|".join(f"(?P<{p.category}>{p.regex})" for p in patterns)
    return re.compile(body, re.IGNORECASE | re.ASCII)


_TIME_RE = compile_patterns(TIME_PATTERNS)
_NUMERIC_RE = compile_patterns(NUMERIC_PATTERNS)


def _now_ms() -> int:
    return int(time.time() * 1000)


def scan(documents: Iterable[DocumentRecord], pattern: Pattern) -> List[Match]:
    """All matches of `pattern` across `documents`, in document then text order."""
    found = []
    for doc in documents:
        for m in pattern.finditer(doc.content):
            found.append(Match(doc.name, m.group(0), m.lastgroup or ""))
    return found


def _statements(matches: Iterable[Match], location: str) -> List[ConflictingStatement]:
    return [
        ConflictingStatement(document=m.document, statement=m.statement, location=location)
        for m in matches
    ]


def find_time_conflicts(documents: Sequence[DocumentRecord]) -> List[Contradiction]:
    matches = scan(documents, _TIME_RE)
    if len(matches) <= 1:
        return []
    if len({m.statement.lower() for m in matches}) <= 1:
        return []
    return [Contradiction(
        id=f"time-{_now_ms()}",
        type=ContradictionType.TIME_CONFLICT,
        severity=Severity.HIGH,
        documents=[m.document for m in matches],
        conflicting_statements=_statements(matches, TIME_LOCATION),
        explanation="Multiple documents specify different time requirements or deadlines.",
        suggestion="Standardize all time requirements across documents to avoid confusion.",
    )]


def find_numerical_conflicts(documents: Sequence[DocumentRecord]) -> List[Contradiction]:
    matches = scan(documents, _NUMERIC_RE)
    if len(matches) <= 1:
        return []
    percentages = [m for m in matches if m.category == "percentage"]
    unused = len(matches) - len(percentages)
    if unused:
        # duration and amount values are collected but never compared
        logger.debug("Numerical pass: %d duration/amount matches not compared", unused)
    if len(percentages) <= 1:
        return []
    if len({m.statement for m in percentages}) <= 1:
        return []
    return [Contradiction(
        id=f"numerical-{_now_ms()}",
        type=ContradictionType.NUMERICAL_CONFLICT,
        severity=Severity.MEDIUM,
        documents=[m.document for m in percentages],
        conflicting_statements=_statements(percentages, NUMERIC_LOCATION),
        explanation="Documents contain different percentage requirements or thresholds.",
        suggestion="Review and align all percentage-based requirements across documents.",
    )]


def policy_sentences(documents: Iterable[DocumentRecord]) -> List[Match]:
    """Period-delimited sentences that mention at least one policy keyword."""
    found = []
    for doc in documents:
        for sentence in doc.content.split("."):
            lowered = sentence.lower()
            if any(k in lowered for k in POLICY_KEYWORDS):
                found.append(Match(doc.name, sentence.strip(), "policy"))
    return found


def find_policy_conflicts(documents: Sequence[DocumentRecord]) -> List[Contradiction]:
    policies = policy_sentences(documents)
    if len(policies) <= 1:
        return []

    stamp = _now_ms()
    out = []
    for positive, negative in OPPOSING_PAIRS:
        pos = [p for p in policies if positive in p.statement.lower()]
        neg = [p for p in policies if negative in p.statement.lower()]
        if not pos or not neg:
            continue
        out.append(Contradiction(
            id=f"policy-{stamp}-{positive}-{negative}",
            type=ContradictionType.POLICY_CONFLICT,
            severity=Severity.HIGH,
            documents=[p.document for p in pos + neg],
            conflicting_statements=_statements(pos + neg, POLICY_LOCATION),
            explanation=(
                f"Documents contain conflicting policies regarding "
                f"{positive} vs {negative} requirements."
            ),
            suggestion=(
                f"Clarify whether the requirement is {positive} or {negative} "
                f"and update all documents consistently."
            ),
        ))
    return out


PASSES = (find_time_conflicts, find_numerical_conflicts, find_policy_conflicts)


def detect_contradictions(documents: Sequence[DocumentRecord]) -> List[Contradiction]:
    """Run every pass over `documents` and concatenate the findings."""
    contradictions: List[Contradiction] = []
    for run_pass in PASSES:
        contradictions.extend(run_pass(documents))
    logger.info(
        "Detected %d contradictions across %d documents",
        len(contradictions), len(documents),
    )
    return contradictions
