# search_client.py - LangGraph + Claude search over a CSV snapshot

import re
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from typing_extensions import TypedDict

import anthropic
from langgraph.graph import StateGraph, END

from brc_navigator.errors import SearchError
from brc_navigator.settings import DEFAULT_MODEL, DEFAULT_TEMPERATURE

logger = logging.getLogger(__name__)

MAX_RESULTS = 10

SYSTEM_PROMPT = (
    "You are an expert data analyst who finds the most relevant entries in a spreadsheet "
    "for a user's query. You answer with JSON only."
)

SEARCH_PROMPT_TEMPLATE = """
The spreadsheet is provided below as CSV. The first line holds the column names and
the "row_index" column identifies each row.
```
{content}
```

User query: "{query}"

SEARCH GUIDELINES:
1. Look for exact matches and for semantically related entries.
2. Expand abbreviations in the query using the context and domain of the data.
3. Accept partial matches (a search for "revenue" matches "quarterly revenue").
4. Match text fields on concepts, not only on literal words.
5. Infer what the user is trying to find instead of matching the words alone.

For every matching row, explain why it matches and copy its column values.

Respond with ONLY this JSON object, nothing before or after it:
{{
  "results": [
    {{
      "rowIndex": <value of the row_index column>,
      "cells": {{"<column name>": "<value>"}},
      "matchReason": "<why this row matches the query>"
    }}
  ],
  "explanation": "<one or two sentences on how you searched>"
}}

Order results from most to least relevant and return at most {max_results}.
If nothing matches, return an empty "results" array.
"""

FENCE_REGEX = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.S | re.I)


@dataclass
class SearchConfig:
    api_key: str = ""
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = 4096
    max_results: int = MAX_RESULTS
    timeout: float = 60.0


@dataclass
class SearchResultItem:
    row_index: Optional[int]
    cells: Dict[str, str]
    match_reason: str = ""


@dataclass
class SearchResponse:
    results: List[SearchResultItem] = field(default_factory=list)
    explanation: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "results": [
                {"rowIndex": r.row_index, "cells": dict(r.cells), "matchReason": r.match_reason}
                for r in self.results
            ],
            "explanation": self.explanation,
        }


class SearchState(TypedDict):
    query: str
    content: str
    prompt: Optional[str]
    raw_response: Optional[str]
    response: Optional[SearchResponse]


def build_search_prompt(query: str, content: str, max_results: int = MAX_RESULTS) -> str:
    return SEARCH_PROMPT_TEMPLATE.format(content=content, query=query, max_results=max_results)


def _extract_json_text(text: str) -> str:
    text = text.strip()
    fence = FENCE_REGEX.search(text)
    if fence:
        text = fence.group(1).strip()
    start = text.find("{")
    end = text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1]
    return text


def _as_row_index(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def parse_search_response(text: str, max_results: int = MAX_RESULTS) -> SearchResponse:
    """
    Parse the model's answer into a SearchResponse.

    Raises SearchError for an empty answer or anything outside the
    {"results": [...], "explanation": ...} schema. An empty results
    list is a valid answer.
    """
    if not text or not text.strip():
        raise SearchError("Failed to analyze spreadsheet: the model returned an empty response")

    try:
        payload = json.loads(_extract_json_text(text))
    except json.JSONDecodeError as e:
        raise SearchError(f"Failed to analyze spreadsheet: response is not valid JSON ({e})") from e

    if not isinstance(payload, dict):
        raise SearchError("Failed to analyze spreadsheet: expected a JSON object")

    raw_results = payload.get("results")
    if not isinstance(raw_results, list):
        raise SearchError("Failed to analyze spreadsheet: 'results' must be a list")

    results = []
    for item in raw_results:
        if not isinstance(item, dict):
            raise SearchError("Failed to analyze spreadsheet: each result must be an object")
        cells = item.get("cells", {})
        if not isinstance(cells, dict):
            raise SearchError("Failed to analyze spreadsheet: 'cells' must be an object")
        results.append(SearchResultItem(
            row_index=_as_row_index(item.get("rowIndex", item.get("rowNumber"))),
            cells={str(k): "" if v is None else str(v) for k, v in cells.items()},
            match_reason=str(item.get("matchReason") or ""),
        ))

    if len(results) > max_results:
        logger.warning(f"Model returned {len(results)} results, keeping the first {max_results}")
        results = results[:max_results]

    explanation = payload.get("explanation")
    return SearchResponse(results=results, explanation="" if explanation is None else str(explanation))


class SearchClient:
    """Delegates relevance ranking of spreadsheet rows to Claude, one request per search."""

    def __init__(self, config: SearchConfig, client: Optional[Any] = None):
        self.config = config
        self._client = client
        self.graph = self._build_graph()

    @property
    def client(self):
        if self._client is None:
            if not self.config.api_key:
                raise SearchError("Claude API key not found in Streamlit secrets, secrets.toml or ANTHROPIC_API_KEY.")
            self._client = anthropic.Anthropic(api_key=self.config.api_key, timeout=self.config.timeout)
        return self._client

    def _build_graph(self):
        workflow = StateGraph(SearchState)

        workflow.add_node("prompt", self._prompt_node)
        workflow.add_node("generate", self._generate_node)
        workflow.add_node("parse", self._parse_node)

        workflow.set_entry_point("prompt")
        workflow.add_edge("prompt", "generate")
        workflow.add_edge("generate", "parse")
        workflow.add_edge("parse", END)

        return workflow.compile()

    def _prompt_node(self, state: SearchState) -> SearchState:
        prompt = build_search_prompt(state["query"], state["content"], self.config.max_results)
        return {**state, "prompt": prompt}

    def _generate_node(self, state: SearchState) -> SearchState:
        logger.info(f"🧠 Sending query to Claude ({self.config.model}): '{state['query']}'")
        try:
            response = self.client.messages.create(
                model=self.config.model,
                max_tokens=self.config.max_tokens,
                temperature=float(self.config.temperature),
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": state["prompt"]}],
            )
        except anthropic.APIStatusError as e:
            logger.error(f"Claude API returned {e.status_code}: {e.message}")
            raise SearchError(f"Failed to analyze spreadsheet: {e.status_code} {e.message}") from e
        except anthropic.APIError as e:
            logger.error(f"Claude API request failed: {e}")
            raise SearchError(f"Failed to analyze spreadsheet: {e}") from e

        text = "".join(block.text for block in response.content if block.type == "text")
        return {**state, "raw_response": text}

    def _parse_node(self, state: SearchState) -> SearchState:
        try:
            parsed = parse_search_response(state["raw_response"] or "", self.config.max_results)
        except SearchError:
            logger.error(f"Unparseable model response: {(state['raw_response'] or '')[:200]!r}")
            raise
        logger.info(f"📊 Model returned {len(parsed.results)} result(s)")
        return {**state, "response": parsed}

    def search(self, query: str, spreadsheet_csv: str) -> SearchResponse:
        initial_state = SearchState(
            query=query,
            content=spreadsheet_csv,
            prompt=None,
            raw_response=None,
            response=None,
        )
        final_state = self.graph.invoke(initial_state)
        return final_state["response"]


def analyze_spreadsheet(
    query: str,
    content: str,
    model: str = DEFAULT_MODEL,
    temperature: float = DEFAULT_TEMPERATURE,
    api_key: str = "",
    client: Optional[Any] = None,
) -> Dict[str, Any]:
    """Endpoint-shaped search call returning {"results": [...], "explanation": ...}."""
    config = SearchConfig(api_key=api_key, model=model, temperature=float(temperature))
    return SearchClient(config, client=client).search(query, content).to_dict()
