r"""Build and query the full-text search index for the docs graph.

Each document contributes one record per searchable section, or a single
record holding its whole text when it has no sections. Records are indexed
with lunr using weighted ``title``, ``section`` and ``text`` fields, and
queries combine exact, prefix, and fuzzy matching per term.

Example
-------
>>> from docsgraph.search import get_snippet
>>> get_snippet("Install the CLI with pip.", "cli")
'Install the CLI with pip.'
"""

from __future__ import annotations

import collections.abc as cabc
import dataclasses as dc
import html
import logging
import math
import re
import typing as typ

import msgspec
from lunr.builder import Builder
from lunr.index import Index
from lunr.query import Query
from lunr.stemmer import stemmer
from lunr.trimmer import trimmer

from docsgraph.config.models import SearchSettings
from docsgraph.errors import ConfigurationError

if typ.TYPE_CHECKING:
    from pathlib import Path

    from docsgraph.models import DocsGraph

logger = logging.getLogger(__name__)

INDEX_FIELDS = ("title", "section", "text")
STORE_FIELDS = (
    "title",
    "section",
    "section_id",
    "section_icon",
    "url",
    "anchor",
    "text",
)
_TERM_PATTERN = re.compile(r"\w+")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_SETTINGS_FIELDS = frozenset(field.name for field in dc.fields(SearchSettings))


@dc.dataclass(slots=True, frozen=True)
class SearchRecord:
    """One indexed search entry.

    Attributes
    ----------
    id : int
        Strictly increasing identifier starting at 1.
    title : str
        Heading title, or the document title for whole-document records.
    section : str
        Section label; ``"{section} › {document}"`` for heading records.
    url : str
        Route path of the owning document.
    anchor : str
        Heading id, empty for whole-document records.
    text : str
        Indexed text, truncated to the configured maximum length.
    """

    id: int
    title: str
    section: str
    section_id: str
    section_icon: str
    url: str
    anchor: str
    text: str


@dc.dataclass(slots=True, frozen=True)
class SearchHit:
    """A query result with its stored fields and relevance score."""

    id: str
    title: str
    section: str
    section_id: str
    section_icon: str
    url: str
    anchor: str
    text: str
    score: float


def build_search_records(
    graph: DocsGraph, *, max_text_length: int = 600
) -> list[SearchRecord]:
    """Flatten the graph's documents into search records.

    Parameters
    ----------
    graph : DocsGraph
        Assembled docs graph.
    max_text_length : int, optional
        Maximum number of characters of text stored per record.

    Returns
    -------
    list[SearchRecord]
        Records in graph document order.
    """
    icons = {section.id: section.icon for section in graph.sections}
    records: list[SearchRecord] = []

    def _append(**fields: str) -> None:
        records.append(SearchRecord(id=len(records) + 1, **fields))

    for doc in graph.docs:
        icon = icons.get(doc.section_id, "")
        if not doc.search_sections:
            if doc.plain_text:
                _append(
                    title=doc.title,
                    section=doc.section_title,
                    section_id=doc.section_id,
                    section_icon=icon,
                    url=doc.route_path,
                    anchor="",
                    text=doc.plain_text[:max_text_length],
                )
            continue
        for section in doc.search_sections:
            _append(
                title=section.heading or doc.title,
                section=f"{doc.section_title} › {doc.title}",
                section_id=doc.section_id,
                section_icon=icon,
                url=doc.route_path,
                anchor=section.anchor,
                text=section.text[:max_text_length],
            )
    return records


def _build_lunr_index(
    records: cabc.Sequence[SearchRecord], boost: cabc.Mapping[str, int]
) -> Index:
    builder = Builder()
    builder.pipeline.add(trimmer, stemmer)
    builder.search_pipeline.add(stemmer)
    builder.ref("id")
    for field in INDEX_FIELDS:
        builder.field(field, boost=boost.get(field, 1))
    for record in records:
        # Token lists skip lunr's whitespace tokenizer.
        builder.add(
            {
                "id": str(record.id),
                "title": query_terms(record.title),
                "section": query_terms(record.section),
                "text": query_terms(record.text),
            }
        )
    return builder.build()


def query_terms(query: str) -> list[str]:
    """Return the lowercase word terms of ``query``.

    Punctuation separates words, so ``docs.yaml`` yields ``docs`` and ``yaml``
    both here and when records are indexed.
    """
    return _TERM_PATTERN.findall(query.lower())


class SearchIndex:
    """A lunr index with the stored fields of every record."""

    def __init__(
        self,
        index: Index,
        documents: cabc.Mapping[str, SearchRecord],
        settings: SearchSettings | None = None,
    ) -> None:
        self.index = index
        self.documents = dict(documents)
        self.settings = settings or SearchSettings()

    @classmethod
    def build(
        cls,
        records: cabc.Sequence[SearchRecord],
        settings: SearchSettings | None = None,
    ) -> SearchIndex:
        """Index ``records`` with the configured field boosts."""
        resolved = settings or SearchSettings()
        index = _build_lunr_index(records, resolved.boost)
        logger.info("indexed %d search records", len(records))
        return cls(index, {str(record.id): record for record in records}, resolved)

    @classmethod
    def from_graph(
        cls, graph: DocsGraph, settings: SearchSettings | None = None
    ) -> SearchIndex:
        """Build the index for every document of ``graph``."""
        resolved = settings or SearchSettings()
        records = build_search_records(
            graph, max_text_length=resolved.max_index_text_length
        )
        return cls.build(records, resolved)

    def to_payload(self) -> dict[str, typ.Any]:
        """Return the JSON-ready ``{"options", "documents", "index"}`` mapping."""
        return {
            "options": {
                "fields": list(INDEX_FIELDS),
                "store_fields": list(STORE_FIELDS),
                **msgspec.to_builtins(self.settings),
            },
            "documents": {
                key: msgspec.to_builtins(record)
                for key, record in self.documents.items()
            },
            "index": self.index.serialize(),
        }

    @classmethod
    def from_payload(cls, payload: cabc.Mapping[str, typ.Any]) -> SearchIndex:
        """Rebuild a search index from its serialized mapping.

        Raises
        ------
        ConfigurationError
            If the payload does not have the expected shape.
        """
        try:
            options = {
                key: value
                for key, value in payload["options"].items()
                if key in _SETTINGS_FIELDS
            }
            settings = msgspec.convert(options, SearchSettings)
            documents = msgspec.convert(
                payload["documents"], dict[str, SearchRecord]
            )
            index = Index.load(payload["index"])
        except (AttributeError, KeyError, TypeError, msgspec.ValidationError) as exc:
            msg = f"Malformed search index payload: {exc}"
            raise ConfigurationError(msg) from exc
        return cls(index, documents, settings)

    @classmethod
    def load(cls, path: Path) -> SearchIndex:
        """Load a ``search-index.json`` artifact."""
        try:
            payload = msgspec.json.decode(path.read_bytes())
        except msgspec.DecodeError as exc:
            msg = f"Cannot decode search index '{path}': {exc}"
            raise ConfigurationError(msg) from exc
        if not isinstance(payload, dict):
            msg = f"Search index '{path}' must hold a JSON object"
            raise ConfigurationError(msg)
        return cls.from_payload(payload)

    def _term_scores(self, term: str) -> dict[str, float]:
        query = self.index.create_query()
        query.term(term)
        if self.settings.prefix:
            query.term(term, wildcard=Query.WILDCARD_TRAILING, use_pipeline=False)
        distance = self._edit_distance(term)
        if distance:
            query.term(term, edit_distance=distance, use_pipeline=False)
        return {result["ref"]: result["score"] for result in self.index.query(query)}

    def _edit_distance(self, term: str) -> int:
        fuzzy = self.settings.fuzzy
        if fuzzy <= 0:
            return 0
        if fuzzy >= 1:
            return int(fuzzy)
        return math.floor(len(term) * fuzzy + 0.5)

    def search(self, query: str, *, combine_with: str | None = None) -> list[SearchHit]:
        """Return hits for ``query``, best first.

        Every term matches exactly, as a prefix, or within the fuzzy edit
        distance. With ``AND`` a record must match every term; with ``OR``
        any term suffices. Scores of matching terms are summed.
        """
        terms = query_terms(query)
        if not terms:
            return []
        mode = (combine_with or self.settings.combine_with).upper()

        scores: dict[str, float] | None = None
        for term in terms:
            term_scores = self._term_scores(term)
            if scores is None:
                scores = term_scores
            elif mode == "AND":
                scores = {
                    ref: score + term_scores[ref]
                    for ref, score in scores.items()
                    if ref in term_scores
                }
            else:
                for ref, score in term_scores.items():
                    scores[ref] = scores.get(ref, 0.0) + score

        ranked = sorted(
            (scores or {}).items(), key=lambda item: (-item[1], int(item[0]))
        )
        hits: list[SearchHit] = []
        for ref, score in ranked:
            record = self.documents.get(ref)
            if record is None:
                continue
            hits.append(
                SearchHit(
                    id=ref,
                    title=record.title,
                    section=record.section,
                    section_id=record.section_id,
                    section_icon=record.section_icon,
                    url=record.url,
                    anchor=record.anchor,
                    text=record.text,
                    score=score,
                )
            )
        return hits

    def snippet(self, text: str, query: str) -> str:
        """Return a result snippet using the configured length and ellipsis."""
        return get_snippet(
            text,
            query,
            self.settings.snippet_max_length,
            context_chars=self.settings.snippet_context_chars,
            ellipsis=self.settings.ellipsis,
        )

    def highlight(self, text: str, query: str) -> str:
        """Highlight ``query`` terms in ``text`` with the configured tag."""
        return highlight_match(text, query, tag=self.settings.highlight_tag)


def _escape_text(value: str) -> str:
    return html.escape(value, quote=False)


def highlight_match(text: str, query: str, *, tag: str = "mark") -> str:
    """HTML-escape ``text`` and wrap every query term occurrence in ``tag``.

    Examples
    --------
    >>> highlight_match("Use <b>pip</b> install", "pip")
    'Use &lt;b&gt;<mark>pip</mark>&lt;/b&gt; install'
    """
    escaped = _escape_text(text)
    terms = query.split()
    if not terms:
        return escaped
    pattern = re.compile(
        "(" + "|".join(re.escape(term) for term in terms) + ")", re.IGNORECASE
    )
    return pattern.sub(rf"<{tag}>\1</{tag}>", escaped)


def get_snippet(
    text: str,
    query: str,
    max_length: int = 140,
    *,
    context_chars: int = 40,
    ellipsis: str = "...",
) -> str:
    """Return a window of ``text`` around the first matching query term.

    The window starts ``context_chars`` before the match and spans
    ``max_length`` characters; ``ellipsis`` marks cut-off ends.
    """
    normalized = _WHITESPACE_PATTERN.sub(" ", text).strip()
    if not normalized:
        return ""
    snippet_length = max(max_length, 1)
    if len(normalized) <= snippet_length:
        return normalized

    lower_text = normalized.lower()
    match_index = 0
    for term in query.strip().lower().split():
        index = lower_text.find(term)
        if index >= 0:
            match_index = index
            break

    start = max(match_index - context_chars, 0)
    end = min(start + snippet_length, len(normalized))
    snippet = normalized[start:end].strip()
    if start > 0:
        snippet = f"{ellipsis}{snippet}"
    if end < len(normalized):
        snippet = f"{snippet}{ellipsis}"
    return snippet


__all__ = [
    "INDEX_FIELDS",
    "STORE_FIELDS",
    "SearchHit",
    "SearchIndex",
    "SearchRecord",
    "build_search_records",
    "get_snippet",
    "highlight_match",
    "query_terms",
]
