"""Response normalizer for LLM insight replies.

LLMs asked for "a JSON array of insights" answer in many shapes: fenced
code blocks, an array buried in prose, ``{"insights": [...]}``,
``{"advice": ["..."]}``, nested ``{"financialAnalysis": {...: {"comment"}}}``
objects, or a single bare object. This module maps all of them onto the
fixed ``Insight`` schema.

Extraction is an ordered chain of decoders. Each decoder returns a list of
insights, or ``None`` when the text does not have its shape, and the first
non-``None`` result wins. Field values are classified with ordered keyword
rule tables (first matching row wins).

Both public parsers are total: they never raise, whatever the input.
"""

import json
import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import structlog

from expense_insights.schemas.insight import (
    BudgetSuggestion,
    Insight,
    InsightType,
    Severity,
)

logger = structlog.get_logger()

MAX_ANALYSIS_INSIGHTS = 5
MAX_MESSAGE_LENGTH = 120

DEFAULT_TITLE = "Financial Analysis"
DEFAULT_MESSAGE = "Analysis provided"

BUDGET_EXPLANATION = "Balanced budget for your income level."
FALLBACK_BUDGET_EXPLANATION = (
    "Suggested based on common financial guidelines (80% spending, 20% savings)."
)
SPEND_SHARE = Decimal("0.8")
SAVINGS_SHARE = Decimal("0.2")

# ── Classification rules (ordered, first match wins) ──────────────

TYPE_RULES: list[tuple[tuple[str, ...], InsightType]] = [
    (("budget", "alert"), InsightType.BUDGET_ALERT),
    (("pattern", "spending"), InsightType.SPENDING_PATTERN),
    (("saving", "opportunity"), InsightType.SAVINGS_OPPORTUNITY),
    (("health", "financial"), InsightType.FINANCIAL_HEALTH),
]

SEVERITY_RULES: list[tuple[tuple[str, ...], Severity]] = [
    (("high", "critical"), Severity.HIGH),
    (("medium", "moderate"), Severity.MEDIUM),
]

# String values the LLM uses for a negative ``actionable``
FALSE_STRINGS = frozenset({"false", "no", "0"})


@dataclass(frozen=True)
class AdviceRule:
    """How a plain advice sentence containing one of ``keywords`` is presented."""
    keywords: tuple[str, ...]
    type: InsightType
    title: str
    severity: Severity
    actionable: bool = True


ADVICE_RULES: list[AdviceRule] = [
    AdviceRule(("great", "good work"), InsightType.FINANCIAL_HEALTH, "Great Job!", Severity.LOW, actionable=False),
    AdviceRule(("spend less", "save"), InsightType.SAVINGS_OPPORTUNITY, "Save Money", Severity.MEDIUM),
    AdviceRule(("budget",), InsightType.BUDGET_ALERT, "Budget Update", Severity.LOW),
    AdviceRule(("spending",), InsightType.SPENDING_PATTERN, "Spending Tip", Severity.LOW),
]
DEFAULT_ADVICE_RULE = AdviceRule((), InsightType.RECOMMENDATION, "Money Tip", Severity.LOW)

# ── Regex patterns ──────────────────────────────────────────────

_CODE_FENCE_RE = re.compile(r"```(?:json)?\n?")
# Greedy: first "[" to the last "]"
_ARRAY_RE = re.compile(r"\[.*\]", re.DOTALL)
_CAMEL_BOUNDARY_RE = re.compile(r"([A-Z])")
_ANALYSIS_SUFFIX_RE = re.compile(r"Analysis$")


# ---------------------------------------------------------------------------
# Field normalization
# ---------------------------------------------------------------------------

def _match_rules(value: Any, rules, default):
    text = str(value).lower() if value is not None else ""
    for keywords, result in rules:
        if any(keyword in text for keyword in keywords):
            return result
    return default


def normalize_type(value: Any) -> InsightType:
    return _match_rules(value, TYPE_RULES, InsightType.RECOMMENDATION)


def normalize_severity(value: Any) -> Severity:
    return _match_rules(value, SEVERITY_RULES, Severity.LOW)


def normalize_actionable(value: Any) -> bool:
    """Absent means actionable; only explicit negatives turn it off."""
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return True


def _first_present(candidate: Mapping, *keys: str) -> Any:
    """Value of the first key holding a truthy value, else None."""
    for key in keys:
        value = candidate.get(key)
        if value:
            return value
    return None


def _as_text(value: Any, default: str) -> str:
    if value is None:
        return default
    return value if isinstance(value, str) else str(value)


def normalize_insight(candidate: Mapping) -> Insight:
    """Map one loosely-shaped object onto the Insight schema."""
    category = candidate.get("category")
    return Insight(
        type=normalize_type(_first_present(candidate, "type", "metric") or "recommendation"),
        title=_as_text(_first_present(candidate, "title", "metric"), DEFAULT_TITLE),
        message=_as_text(
            _first_present(candidate, "message", "interpretation", "comment"),
            DEFAULT_MESSAGE,
        ),
        severity=normalize_severity(_first_present(candidate, "severity") or "medium"),
        actionable=normalize_actionable(candidate.get("actionable")),
        category=None if category is None else str(category),
    )


def normalize_insights(candidates: list) -> list[Insight]:
    """Normalize every object candidate; non-objects are dropped."""
    insights = []
    for candidate in candidates:
        if isinstance(candidate, Mapping):
            insights.append(normalize_insight(candidate))
        else:
            logger.debug("insight_candidate_dropped", kind=type(candidate).__name__)
    return insights


def truncate_message(message: str, limit: int = MAX_MESSAGE_LENGTH) -> str:
    if len(message) <= limit:
        return message
    return message[: limit - 3] + "..."


def advice_to_insights(advice: list) -> list[Insight]:
    """One insight per advice sentence, classified by its wording."""
    insights = []
    for message in advice:
        if not isinstance(message, str):
            continue
        text = message.lower()
        rule = next(
            (r for r in ADVICE_RULES if any(k in text for k in r.keywords)),
            DEFAULT_ADVICE_RULE,
        )
        insights.append(Insight(
            type=rule.type,
            title=rule.title,
            message=truncate_message(message),
            severity=rule.severity,
            actionable=rule.actionable,
        ))
    return insights


def format_section_title(key: str) -> str:
    """'spendingTrendAnalysis' -> 'Spending Trend'."""
    title = _CAMEL_BOUNDARY_RE.sub(r" \1", key)
    title = title[:1].upper() + title[1:]
    title = _ANALYSIS_SUFFIX_RE.sub("", title).strip()
    return title or DEFAULT_TITLE


def _has_comment(section: Any) -> bool:
    return isinstance(section, Mapping) and bool(section.get("comment"))


def analysis_to_insights(document: Mapping) -> list[Insight]:
    """One insight per commented section of a nested analysis object."""
    sections = document.get("financialAnalysis")
    if not isinstance(sections, Mapping):
        sections = document

    insights = []
    for key, section in sections.items():
        if not _has_comment(section):
            continue
        insights.append(Insight(
            type=normalize_type(key),
            title=format_section_title(key),
            message=_as_text(section["comment"], DEFAULT_MESSAGE),
            severity=Severity.MEDIUM,
            actionable=True,
        ))
    return insights[:MAX_ANALYSIS_INSIGHTS]


# ---------------------------------------------------------------------------
# Text-level decoders
# ---------------------------------------------------------------------------

def strip_code_fences(text: str) -> str:
    """Remove every ```json / ``` marker, wherever it appears."""
    return _CODE_FENCE_RE.sub("", text)


def _try_parse_json(text: str) -> Any | None:
    try:
        return json.loads(text)
    except (ValueError, RecursionError):
        return None


def _as_candidates(value: Any) -> list | None:
    if isinstance(value, list):
        return value
    if isinstance(value, Mapping):
        return [value]
    return None


def _is_set(value: Any) -> bool:
    """JSON-style truthiness: empty arrays and objects count as set."""
    return value is not None and value is not False and value != 0 and value != ""


def _is_commented_analysis(document: Mapping) -> bool:
    return bool(document) and all(_has_comment(v) for v in document.values())


def _decode_embedded_array(text: str) -> list[Insight] | None:
    """An array of objects somewhere in the text."""
    match = _ARRAY_RE.search(text)
    if not match:
        return None
    parsed = _try_parse_json(match.group())
    if not isinstance(parsed, list):
        return None
    if parsed and not any(isinstance(item, Mapping) for item in parsed):
        # e.g. the strings of an "advice" list: let the document decoder see the wrapper
        return None
    return normalize_insights(parsed)


def _decode_document(text: str) -> list[Insight] | None:
    """The whole text as one JSON value, dispatched on its shape."""
    parsed = _try_parse_json(text)
    if isinstance(parsed, list):
        return normalize_insights(parsed)
    if not isinstance(parsed, Mapping):
        return None

    if _is_set(parsed.get("insights")):
        candidates = _as_candidates(parsed["insights"])
        return normalize_insights(candidates) if candidates is not None else []
    if _is_set(parsed.get("advice")):
        advice = parsed["advice"]
        if isinstance(advice, str):
            advice = [advice]
        return advice_to_insights(advice if isinstance(advice, list) else [])
    if _is_set(parsed.get("financialAnalysis")) or _is_commented_analysis(parsed):
        return analysis_to_insights(parsed)
    if _is_set(parsed.get("insightSummary")):
        candidates = _as_candidates(parsed["insightSummary"])
        return normalize_insights(candidates) if candidates is not None else []
    return normalize_insights([parsed])


_DECODERS: list[Callable[[str], list[Insight] | None]] = [
    _decode_embedded_array,
    _decode_document,
]


def parse_insights(content: str) -> list[Insight]:
    """Turn a raw LLM reply into insights; ``[]`` when nothing is recognizable."""
    cleaned = strip_code_fences(content or "").strip()
    for decoder in _DECODERS:
        try:
            result = decoder(cleaned)
        except (TypeError, ValueError, AttributeError) as e:
            logger.warning("insights_decoder_failed", decoder=decoder.__name__, error=str(e))
            continue
        if result is not None:
            return result

    logger.warning("insights_parse_failed", response=cleaned[:200])
    return []


# ---------------------------------------------------------------------------
# Budget suggestion
# ---------------------------------------------------------------------------

def round_half_up(value: float | Decimal) -> float:
    """Round to the nearest unit, halves away from zero (2.5 -> 3)."""
    return float(Decimal(str(value)).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def fallback_budget_suggestion(income: float) -> BudgetSuggestion:
    """Deterministic 80/20 split, used whenever the LLM cannot be relied on."""
    amount = Decimal(str(income))
    return BudgetSuggestion(
        monthly_spend=round_half_up(amount * SPEND_SHARE),
        savings_goal=round_half_up(amount * SAVINGS_SHARE),
        explanation=FALLBACK_BUDGET_EXPLANATION,
    )


def _positive_number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return float(value)


def parse_budget_suggestion(content: str, income: float) -> BudgetSuggestion:
    """Read ``{monthlySpend, savingsGoal, explanation}``; fill gaps from the 80/20 split."""
    parsed = _try_parse_json(strip_code_fences(content or "").strip())
    if not isinstance(parsed, Mapping):
        logger.warning("budget_suggestion_parse_failed", response=(content or "")[:200])
        return fallback_budget_suggestion(income)

    fallback = fallback_budget_suggestion(income)
    explanation = parsed.get("explanation")
    return BudgetSuggestion(
        monthly_spend=_positive_number(parsed.get("monthlySpend")) or fallback.monthly_spend,
        savings_goal=_positive_number(parsed.get("savingsGoal")) or fallback.savings_goal,
        explanation=explanation if isinstance(explanation, str) and explanation.strip() else BUDGET_EXPLANATION,
    )
