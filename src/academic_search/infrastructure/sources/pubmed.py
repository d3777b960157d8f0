"""
PubMed Adapter - NCBI E-utilities

Two-step search:
1. esearch.fcgi (JSON) - relevance-sorted PMID list
2. efetch.fcgi (XML)   - article records for those PMIDs

API Documentation: https://www.ncbi.nlm.nih.gov/books/NBK25501/

Rate Limits:
- Without API key: 3 requests/second
- With API key: 10 requests/second
"""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any

import defusedxml.ElementTree as ET  # Security: prevent XML attacks
from defusedxml import DefusedXmlException

from academic_search.application.search.credibility import PUBMED_BASE_CREDIBILITY
from academic_search.config import DEFAULT_NCBI_EMAIL, DEFAULT_REQUEST_TIMEOUT
from academic_search.core.async_utils import ProviderRateLimiter
from academic_search.core.exceptions import ProviderErrorKind
from academic_search.domain.entities import Paper, Provider, SearchQuery, SourceType
from academic_search.infrastructure.sources.base_client import ProviderAdapter

logger = logging.getLogger(__name__)

EUTILS_BASE = "https://eutils.ncbi.nlm.nih.gov/entrez/eutils"
ESEARCH_URL = f"{EUTILS_BASE}/esearch.fcgi"
EFETCH_URL = f"{EUTILS_BASE}/efetch.fcgi"

PUBMED_ARTICLE_URL = "https://pubmed.ncbi.nlm.nih.gov/{pmid}/"
DOI_URL = "https://doi.org/{doi}"

_YEAR = re.compile(r"\d{4}")


class PubMedAdapter(ProviderAdapter):
    """
    PubMed search adapter.

    Usage:
        adapter = PubMedAdapter(api_key="...")
        result = await adapter.search(SearchQuery(query="covid", providers=["pubmed"]))
    """

    provider = Provider.PUBMED
    _service_name = "PubMed"

    def __init__(
        self,
        rate_limiter: ProviderRateLimiter | None = None,
        api_key: str | None = None,
        email: str | None = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
    ):
        self._api_key = api_key
        self._email = email or DEFAULT_NCBI_EMAIL
        super().__init__(rate_limiter=rate_limiter, base_url=EUTILS_BASE, timeout=timeout)

    def _common_params(self) -> dict[str, str]:
        params = {"db": "pubmed", "tool": "academic-search", "email": self._email}
        if self._api_key:
            params["api_key"] = self._api_key
        return params

    @staticmethod
    def build_term(query: SearchQuery) -> str:
        """Append a publication-date range to the query when years are given."""
        term = query.text
        if query.year_from or query.year_to:
            from_year = query.year_from or 1900
            to_year = query.year_to or datetime.now(timezone.utc).year
            term += f' AND ("{from_year}"[Date - Publication] : "{to_year}"[Date - Publication])'
        return term

    async def _search(self, query: SearchQuery, limit: int) -> list[Paper]:
        params = self._common_params()
        params.update(
            {
                "term": self.build_term(query),
                "retmax": str(limit),
                "retmode": "json",
                "sort": "relevance",
            }
        )
        data = await self._make_request(ESEARCH_URL, params=params)
        id_list = self._extract_ids(data)
        if not id_list:
            return []

        params = self._common_params()
        params.update({"id": ",".join(id_list), "retmode": "xml"})
        xml_text = await self._make_request(EFETCH_URL, params=params, expect_json=False)
        return self.parse_articles(xml_text)

    def _extract_ids(self, data: Any) -> list[str]:
        try:
            id_list = data["esearchresult"]["idlist"]
        except (KeyError, TypeError) as e:
            raise self._error(ProviderErrorKind.PARSE, f"unexpected esearch response: {e}") from e
        return [str(pmid) for pmid in id_list or []]

    def parse_articles(self, xml_text: str) -> list[Paper]:
        """Parse efetch XML into Papers, dropping records without title or authors."""
        try:
            root = ET.fromstring(xml_text)
        except (ET.ParseError, DefusedXmlException) as e:
            raise self._error(ProviderErrorKind.PARSE, f"invalid efetch XML: {e}") from e

        papers: list[Paper] = []
        for article in root.iter("PubmedArticle"):
            pmid = (article.findtext(".//PMID") or "").strip()
            doi = (article.findtext(".//ArticleIdList/ArticleId[@IdType='doi']") or "").strip()

            paper = self._make_paper(
                id=pmid,
                title=_element_text(article.find(".//ArticleTitle")),
                authors=_authors(article),
                source=(article.findtext(".//Journal/Title") or "").strip(),
                url=DOI_URL.format(doi=doi) if doi else PUBMED_ARTICLE_URL.format(pmid=pmid),
                source_type=SourceType.JOURNAL,
                credibility_score=PUBMED_BASE_CREDIBILITY,
                peer_reviewed=True,
                year=_publication_year(article),
                abstract=" ".join(
                    text for text in (_element_text(e) for e in article.iter("AbstractText")) if text
                ),
                doi=doi,
            )
            if paper is None:
                logger.debug(f"PubMed: dropping record {pmid or '?'} without title or authors")
                continue
            papers.append(paper)
        return papers


def _element_text(element: Any) -> str:
    """Full text of an element including inline markup (<i>, <sup>, ...)."""
    if element is None:
        return ""
    return " ".join("".join(element.itertext()).split())


def _authors(article: Any) -> list[str]:
    authors = []
    for author in article.iter("Author"):
        last_name = (author.findtext("LastName") or "").strip()
        fore_name = (author.findtext("ForeName") or "").strip()
        if last_name and fore_name:
            authors.append(f"{fore_name} {last_name}")
    return authors


def _publication_year(article: Any) -> str | None:
    pub_date = article.find(".//PubDate")
    if pub_date is None:
        return None
    year = (pub_date.findtext("Year") or "").strip()
    if year:
        return year
    match = _YEAR.search(pub_date.findtext("MedlineDate") or "")
    return match.group(0) if match else None
