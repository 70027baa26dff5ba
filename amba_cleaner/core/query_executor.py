"""
Batched Query Executor Module
=============================

Runs Azure Resource Graph queries over a management group scope of any
size.

Resource Graph accepts at most 10 management groups per request and
returns at most 100 rows per page. The executor hides both limits: it
splits the scope into chunks of 10, follows the skip token of every full
page, and concatenates the rows in chunk-then-page order.

Classes
-------
QueryResultPage
    One page returned by Resource Graph.
BatchedQueryExecutor
    Chunking and paging query runner.

Example
-------
>>> executor = BatchedQueryExecutor(azure_client)
>>> rows = executor.execute(
...     "resources | where tags['_deployed_by_amba'] =~ 'True' | project id",
...     scope,
... )

Notes
-----
The executor never retries and never swallows errors. A failed request
raises :class:`QueryError` and the run stops. Rows are not de-duplicated
here; scanners do that.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from azure.core.exceptions import AzureError
from azure.mgmt.resourcegraph.models import QueryRequest, QueryRequestOptions

from amba_cleaner.core.azure_client import AzureClient
from amba_cleaner.core.exceptions import QueryError

# Module logger
logger = logging.getLogger(__name__)

# Resource Graph limits
MAX_MANAGEMENT_GROUPS_PER_QUERY = 10
PAGE_SIZE = 100


def chunk_scope(scope: Sequence[str], size: int = MAX_MANAGEMENT_GROUPS_PER_QUERY) -> List[List[str]]:
    """
    Split a management group scope into fixed-size chunks.

    Parameters
    ----------
    scope : sequence of str
        Management group IDs.
    size : int, default=10
        Maximum chunk size. The last chunk may be smaller.

    Returns
    -------
    list of list of str
        Chunks in scope order. An empty scope yields no chunks.

    Example
    -------
    >>> chunk_scope([str(i) for i in range(12)])
    [['0', '1', '2', '3', '4', '5', '6', '7', '8', '9'], ['10', '11']]
    """
    if size < 1:
        raise ValueError("chunk size must be at least 1")
    return [list(scope[i:i + size]) for i in range(0, len(scope), size)]


@dataclass
class QueryResultPage:
    """
    One page of Resource Graph results.

    Attributes:
        items: Rows on this page, as dictionaries
        continuation_token: Skip token for the next page, if any
    """

    items: List[Dict[str, Any]] = field(default_factory=list)
    continuation_token: Optional[str] = None

    @classmethod
    def from_response(cls, response: Any) -> QueryResultPage:
        """Build a page from an SDK ``QueryResponse``."""
        return cls(
            items=list(response.data or []),
            continuation_token=response.skip_token,
        )


class BatchedQueryExecutor:
    """
    Executes Resource Graph queries across a management group scope.

    Parameters
    ----------
    azure_client : AzureClient
        Client used to reach Resource Graph.
    batch_size : int, default=10
        Management groups per request.
    page_size : int, default=100
        Rows per page. A page shorter than this ends paging for a chunk.

    Attributes
    ----------
    request_count : int
        Number of Resource Graph requests issued so far.
    """

    def __init__(
        self,
        azure_client: AzureClient,
        batch_size: int = MAX_MANAGEMENT_GROUPS_PER_QUERY,
        page_size: int = PAGE_SIZE,
    ) -> None:
        self.azure_client = azure_client
        self.batch_size = batch_size
        self.page_size = page_size
        self.request_count = 0
        self._graph_client = None

    @property
    def graph_client(self):
        """Lazy load Resource Graph client."""
        if self._graph_client is None:
            self._graph_client = self.azure_client.get_resource_graph_client()
        return self._graph_client

    def execute(self, query: str, scope: Sequence[str]) -> List[Dict[str, Any]]:
        """
        Run a query over every management group in scope.

        Parameters
        ----------
        query : str
            Resource Graph (KQL) query.
        scope : sequence of str
            Management group IDs.

        Returns
        -------
        list of dict
            All matching rows, chunk by chunk, page by page.

        Raises
        ------
        QueryError
            If any request fails.
        """
        chunks = chunk_scope(scope, self.batch_size)
        logger.debug(
            f"Querying {len(scope)} management group(s) in {len(chunks)} batch(es)"
        )

        records: List[Dict[str, Any]] = []
        for chunk in chunks:
            records.extend(self._execute_chunk(query, chunk))
        return records

    def _execute_chunk(self, query: str, chunk: List[str]) -> List[Dict[str, Any]]:
        """Run a query over one chunk, following skip tokens of full pages."""
        records: List[Dict[str, Any]] = []
        token: Optional[str] = None

        while True:
            page = self.fetch_page(query, chunk, token)
            records.extend(page.items)
            if len(page.items) < self.page_size or not page.continuation_token:
                break
            token = page.continuation_token
            logger.debug(f"Following skip token after {len(records)} row(s)")

        return records

    def fetch_page(
        self,
        query: str,
        chunk: List[str],
        continuation_token: Optional[str] = None,
    ) -> QueryResultPage:
        """
        Issue a single Resource Graph request.

        Parameters
        ----------
        query : str
            Resource Graph (KQL) query.
        chunk : list of str
            At most ``batch_size`` management group IDs.
        continuation_token : str, optional
            Skip token from the previous page.

        Returns
        -------
        QueryResultPage
            The page returned by Resource Graph.

        Raises
        ------
        QueryError
            If the request fails.
        """
        options = QueryRequestOptions(
            top=self.page_size,
            skip_token=continuation_token,
            result_format="objectArray",
        )
        request = QueryRequest(
            query=query,
            management_groups=chunk,
            options=options,
        )

        self.request_count += 1
        try:
            response = self.graph_client.resources(request)
        except AzureError as e:
            raise QueryError(
                f"Resource Graph query failed: {e.message or e}",
                details={
                    "status_code": getattr(e, "status_code", None),
                    "management_groups": chunk,
                },
            )

        return QueryResultPage.from_response(response)
