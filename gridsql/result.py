from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional, Union

from .columns import Button


@dataclass(frozen=True)
class PaginationDescriptor:
    """
    Where we are in the result set.

    Attributes:
        page: Current page number, starting with 1.
        limit: Page size.
        total: Total number of rows; ``None`` when not counted (simple pagination).
        last_page: Number of the last page; ``None`` when not counted.
        has_more: Is there a next page?
        simple: Was it a simple pagination (no count query)?
    """

    page: int
    limit: int
    total: Optional[int] = None
    last_page: Optional[int] = None
    has_more: bool = False
    simple: bool = False

    @classmethod
    def counted(cls, page: int, limit: int, total: int) -> 'PaginationDescriptor':
        last_page = max((total + limit - 1) // limit, 1)
        return cls(page=page, limit=limit, total=total, last_page=last_page,
                   has_more=page < last_page, simple=False)

    def to_dict(self) -> dict:
        return dict(page=self.page, limit=self.limit, total=self.total,
                    last_page=self.last_page, has_more=self.has_more, simple=self.simple)


@dataclass(frozen=True)
class GridResult:
    """
    Everything a grid has to show: created once per request, never changed.

    Attributes:
        id: The grid identifier.
        headers: Column metadata: list of {key, label, visible, sortable}.
        data: Rows (list of dicts); a single row dict for GridView.first().
        pagination: Where we are in the result set; ``None`` for first().
        simple: Was simple pagination used?
        request_params: The request parameters, as they came.
        filter: The filters applied (request parameters the grid did not recognize).
        page: Current page.
        order_by: Sort direction.
        search: Search text.
        limit: Page size.
        sort_name: The column actually sorted by.
        counts: Allowed page sizes.
        search_input: Is free-text search enabled?
        export_data: Exported rows; ``None`` when not exporting.
        form_action: The URL the grid form submits to.
        button_create: The "create" button, if routes are enabled.
    """

    id: str
    headers: List[dict]
    data: Union[List[dict], dict]
    pagination: Optional[PaginationDescriptor] = None
    simple: bool = False
    request_params: Mapping[str, Any] = field(default_factory=dict)
    filter: Mapping[str, Any] = field(default_factory=dict)
    page: int = 1
    order_by: Optional[str] = None
    search: str = ''
    limit: Optional[int] = None
    sort_name: Optional[str] = None
    counts: Mapping[int, Any] = field(default_factory=dict)
    search_input: bool = False
    export_data: Optional[List[dict]] = None
    form_action: str = ''
    button_create: Optional[Button] = None

    def to_dict(self) -> dict:
        """ Plain data, ready to be serialized """
        return dict(
            id=self.id,
            headers=self.headers,
            data=self.data,
            pagination=self.pagination.to_dict() if self.pagination else None,
            simple=self.simple,
            request_params=dict(self.request_params),
            filter=dict(self.filter),
            page=self.page,
            order_by=self.order_by,
            search=self.search,
            limit=self.limit,
            sort_name=self.sort_name,
            counts=dict(self.counts),
            search_input=self.search_input,
            export_data=self.export_data,
            form_action=self.form_action,
            button_create=self.button_create.to_dict() if self.button_create else None,
        )
