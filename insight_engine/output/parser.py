"""
Insight Reconciler

Recovers a typed InsightRecord from the model's free-form reply.

Fallback chain:
1. Direct JSON parse of the message body
2. First top-level brace-delimited object found in the text
   (handles prose or code fences around valid JSON)
3. Plain-text fallback: first 500 characters as the summary
4. Call failure: fixed "unavailable" summary

Every branch returns a complete record; nothing is raised to the caller.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from .schemas import (
    InsightRecord,
    QuickWinAction,
    Recommendation,
    REQUIRED_FIELDS,
    validate_insight,
)

logger = logging.getLogger(__name__)

FALLBACK_SUMMARY_CHARS = 500
MAX_SCAN_CANDIDATES = 5
UNAVAILABLE_SUMMARY = "AI analysis unavailable — review data manually"


@dataclass(frozen=True)
class ModelReply:
    """Reply envelope from the LLM call layer."""
    succeeded: bool
    message_text: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "ModelReply":
        """
        Build a reply from the inbound envelope.

        Accepts ``{"succeeded", "messageText", "errorMessage"}`` as well as a
        raw Messages API body (``content`` blocks) or a chat-completions body
        (``choices[0].message.content``).
        """
        if not isinstance(data, dict):
            return cls(succeeded=False, error_message="Malformed reply envelope")

        error = data.get("errorMessage") or data.get("error_message")
        if isinstance(data.get("error"), dict):
            error = error or data["error"].get("message") or "Model call failed"

        text = data.get("messageText") or data.get("message_text")
        if text is None and isinstance(data.get("content"), list):
            text = "".join(
                block.get("text", "") for block in data["content"]
                if isinstance(block, dict)
            )
        if text is None and isinstance(data.get("choices"), list) and data["choices"]:
            choice = data["choices"][0]
            if isinstance(choice, dict) and isinstance(choice.get("message"), dict):
                text = choice["message"].get("content")

        succeeded = bool(data.get("succeeded", error is None)) and not error
        return cls(
            succeeded=succeeded,
            message_text=str(text) if text is not None else None,
            error_message=str(error) if error else None,
        )


class InsightReconciler:
    """
    Reconciles model replies into InsightRecord.

    Parsers are tried in order; the first one that yields a JSON object with
    at least one known field wins.
    """

    def reconcile(
        self,
        reply: Optional[ModelReply],
        raw_data: Optional[Dict[str, Any]] = None,
    ) -> InsightRecord:
        """
        Reconcile a reply into an InsightRecord.

        Args:
            reply: Reply envelope; None is treated as a failed call
            raw_data: Prompt context bundle threaded from build_prompt

        Returns:
            InsightRecord, degraded if structured parsing was impossible
        """
        site = (raw_data or {}).get("site_url") or "site"

        if reply is None or not reply.succeeded or not (reply.message_text or "").strip():
            reason = reply.error_message if reply is not None else "no reply"
            logger.warning(f"AI analysis unavailable for {site}: {reason or 'empty reply'}")
            return self.unavailable()

        text = reply.message_text

        methods = [
            ("json", self._parse_direct),
            ("json_scan", self._parse_scanned),
        ]

        for method_name, parser_fn in methods:
            try:
                data = parser_fn(text)
                if data is None:
                    continue
                record = self._to_record(data, method_name)
            except (ValueError, TypeError, AttributeError, RecursionError) as e:
                logger.debug(f"{method_name} parsing failed: {e}")
                continue

            is_valid, errors = validate_insight(data)
            if not is_valid:
                logger.info(f"Insight reply for {site} incomplete: {'; '.join(errors)}")
            logger.debug(f"Successfully parsed insight with {method_name}")
            return record

        logger.warning(f"Could not parse insight JSON for {site}; using text fallback")
        return InsightRecord(
            executive_summary=text[:FALLBACK_SUMMARY_CHARS],
            parse_degraded=True,
            parse_method="text",
        )

    def unavailable(self) -> InsightRecord:
        """Record used when the model call itself failed."""
        return InsightRecord(
            executive_summary=UNAVAILABLE_SUMMARY,
            parse_degraded=True,
            parse_method="unavailable",
        )

    # =========================================================================
    # PARSERS
    # =========================================================================

    def _parse_direct(self, text: str) -> Optional[Dict[str, Any]]:
        """Parse the whole reply as the target object."""
        data = json.loads(text)
        return data if self._looks_like_insight(data) else None

    def _parse_scanned(self, text: str) -> Optional[Dict[str, Any]]:
        """Parse the first top-level brace-delimited object in the text."""
        for candidate in self._iter_objects(text):
            try:
                data = json.loads(candidate)
            except (ValueError, RecursionError):
                continue
            if self._looks_like_insight(data):
                return data
        return None

    def _iter_objects(self, text: str) -> Iterator[str]:
        """
        Yield top-level ``{...}`` substrings in order of appearance.

        Braces inside JSON strings are ignored. At most
        MAX_SCAN_CANDIDATES opening braces are tried.
        """
        attempts = 0
        start = text.find("{")
        while start != -1 and attempts < MAX_SCAN_CANDIDATES:
            attempts += 1
            end = self._matching_brace(text, start)
            if end == -1:
                # Unbalanced brace in prose; try the next opening brace
                start = text.find("{", start + 1)
                continue
            yield text[start:end + 1]
            start = text.find("{", end + 1)

    def _matching_brace(self, text: str, start: int) -> int:
        depth = 0
        in_string = False
        escaped = False
        for index in range(start, len(text)):
            char = text[index]
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue
            if char == '"':
                in_string = True
            elif char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    return index
        return -1

    def _looks_like_insight(self, data: Any) -> bool:
        if not isinstance(data, dict):
            return False
        known = set(REQUIRED_FIELDS) | {
            "executive_summary", "keyword_clusters", "quick_wins",
            "competitive_gap",
        }
        return any(key in data for key in known)

    # =========================================================================
    # CONVERSION
    # =========================================================================

    def _to_record(self, data: Dict[str, Any], method: str) -> InsightRecord:
        """Convert a parsed object, defaulting every missing field."""
        return InsightRecord(
            executive_summary=self._text(self._get(data, "executiveSummary", "executive_summary")),
            keyword_clusters=self._clusters(self._get(data, "keywordClusters", "keyword_clusters")),
            quick_wins=self._quick_wins(self._get(data, "quickWins", "quick_wins")),
            competitive_gap=self._text(self._get(data, "competitiveGap", "competitive_gap")),
            recommendations=self._recommendations(data.get("recommendations")),
            parse_degraded=False,
            parse_method=method,
        )

    def _get(self, data: Dict[str, Any], *names: str) -> Any:
        for name in names:
            if data.get(name) is not None:
                return data[name]
        return None

    def _text(self, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, (dict, list)):
            return json.dumps(value, ensure_ascii=False)
        return str(value).strip()

    def _clusters(self, value: Any) -> Dict[str, List[str]]:
        clusters: Dict[str, List[str]] = {}
        if isinstance(value, list):
            # [{"name": ..., "keywords": [...]}] variant
            value = {
                str(item.get("name") or item.get("cluster") or f"Cluster {i}"): item.get("keywords")
                for i, item in enumerate(value, start=1)
                if isinstance(item, dict)
            }
        if not isinstance(value, dict):
            return clusters

        for name, keywords in value.items():
            if isinstance(keywords, str):
                keywords = [keywords]
            if not isinstance(keywords, list):
                continue
            clusters[str(name)] = [str(k).strip() for k in keywords if str(k).strip()]
        return clusters

    def _quick_wins(self, value: Any) -> List[QuickWinAction]:
        quick_wins = []
        for item in value if isinstance(value, list) else []:
            if isinstance(item, str) and item.strip():
                quick_wins.append(QuickWinAction(keyword=item.strip()))
            elif isinstance(item, dict):
                keyword = self._text(self._get(item, "keyword", "term", "query"))
                if not keyword:
                    continue
                quick_wins.append(QuickWinAction(
                    keyword=keyword,
                    action=self._text(item.get("action")),
                    expected_impact=self._text(self._get(item, "expectedImpact", "expected_impact", "impact")),
                ))
        return quick_wins

    def _recommendations(self, value: Any) -> List[Recommendation]:
        recommendations = []
        for index, item in enumerate(value if isinstance(value, list) else [], start=1):
            if isinstance(item, str) and item.strip():
                recommendations.append(Recommendation(priority=index, action=item.strip()))
            elif isinstance(item, dict):
                action = self._text(item.get("action"))
                if not action:
                    continue
                recommendations.append(Recommendation(
                    priority=self._priority(item.get("priority"), default=index),
                    action=action,
                    impact=self._text(item.get("impact")),
                ))
        # Stable: equal priorities keep reply order
        return sorted(recommendations, key=lambda r: r.priority)

    def _priority(self, value: Any, default: int) -> int:
        if isinstance(value, str):
            # Accept "P1", "1", "priority 2"
            digits = "".join(ch for ch in value if ch.isdigit())
            value = digits or None
        try:
            return int(value)
        except (TypeError, ValueError, OverflowError):
            return default
