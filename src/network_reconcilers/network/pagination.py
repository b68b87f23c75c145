"""Cursor-based pagination over EC2 describe calls."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional

from network_reconcilers.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Page:
    """One page of a listing and the cursor for the next one."""
    items: List[Any] = field(default_factory=list)
    next_token: Optional[str] = None


ListPage = Callable[[Optional[str]], Page]


def paginate(list_page: ListPage) -> Iterator[Any]:
    """Lazily iterate every item across all pages of a listing.

    The first call passes no cursor. Following calls pass the cursor returned
    by the previous page until a page comes back without one. Each call to
    paginate() starts a fresh scan.

    Args:
        list_page: Fetches one page given the previous cursor (None first)

    Yields:
        Items in page order
    """
    token = None
    pages = 0
    while True:
        page = list_page(token)
        pages += 1
        yield from page.items
        if not page.next_token:
            break
        token = page.next_token
    logger.debug(f"Listing finished after {pages} page(s)")


def describe_pages(describe: Callable[..., Dict[str, Any]], result_key: str, **params) -> ListPage:
    """Adapt a boto3 describe_* call to a ListPage.

    Args:
        describe: Bound client method, e.g. client.describe_route_tables
        result_key: Key of the item list in the response
        **params: Request parameters sent with every page

    Returns:
        Function fetching one page for a cursor
    """
    def list_page(token: Optional[str]) -> Page:
        request = dict(params)
        if token:
            request['NextToken'] = token
        response = describe(**request) or {}
        return Page(items=response.get(result_key) or [], next_token=response.get('NextToken'))

    return list_page
