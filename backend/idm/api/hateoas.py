"""
Redbard IDM - Hypermedia
HAL response models and route templating for links

Links are built from a fixed table of route templates rather than by
introspecting the router, so a link can be computed from nothing but the
request's base URL, a route name and its parameters.
"""

import math
import re
from typing import Any, Dict, List, Optional
from urllib.parse import quote, urlencode

from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


# Route name -> path template. The users router declares its paths from here.
ROUTES: Dict[str, str] = {
    "users": "/users",
    "user": "/users/{id}",
    "signup": "/users/signup",
    "signin": "/users/signin",
}

_PATH_PARAM = re.compile(r"{(\w+)}")

SELF = "self"
NEXT = "next"


def link_to(base_url: str, route_name: str, **params: Any) -> str:
    """
    Render an absolute URL for a named route

    Path parameters are substituted into the template; any remaining
    parameters become the query string, in the order given.

    Raises:
        KeyError: unknown route name
        ValueError: a path parameter was not supplied
    """
    template = ROUTES[route_name]
    path_names = _PATH_PARAM.findall(template)

    missing = [name for name in path_names if params.get(name) is None]
    if missing:
        raise ValueError(f"Missing path parameters for route '{route_name}': {missing}")

    path = template
    for name in path_names:
        path = path.replace("{" + name + "}", quote(str(params.pop(name)), safe=""))

    url = base_url.rstrip("/") + path
    if params:
        url += "?" + urlencode(params)
    return url


class Link(BaseModel):
    rel: str
    href: str


class PageMetadata(BaseModel):
    """Collection metadata for a paged response"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    size: int
    total_elements: int
    total_pages: int
    number: int

    @classmethod
    def of(cls, size: int, number: int, total_elements: int) -> "PageMetadata":
        total_pages = math.ceil(total_elements / size) if size > 0 else 0
        return cls(size=size, number=number, total_elements=total_elements, total_pages=total_pages)


def _render_links(links: List[Link]) -> Dict[str, Dict[str, str]]:
    return {link.rel: {"href": link.href} for link in links}


class EntityModel:
    """A single record plus its links"""

    def __init__(self, content: BaseModel, links: Optional[List[Link]] = None):
        self.content = content
        self.links = list(links or [])

    def add(self, link: Link) -> "EntityModel":
        self.links.append(link)
        return self

    def get_link(self, rel: str) -> Optional[Link]:
        return next((link for link in self.links if link.rel == rel), None)

    def get_required_link(self, rel: str) -> Link:
        link = self.get_link(rel)
        if link is None:
            raise LookupError(f"No link with rel '{rel}' found")
        return link

    def to_dict(self) -> Dict[str, Any]:
        body = self.content.to_dict()
        if self.links:
            body["_links"] = _render_links(self.links)
        return body


class PagedModel:
    """A page of entity models with page metadata and collection links"""

    def __init__(
        self,
        content: List[EntityModel],
        metadata: PageMetadata,
        links: Optional[List[Link]] = None,
        relation: str = "content",
    ):
        self.content = list(content)
        self.metadata = metadata
        self.links = list(links or [])
        self.relation = relation

    def get_link(self, rel: str) -> Optional[Link]:
        return next((link for link in self.links if link.rel == rel), None)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if self.content:
            body["_embedded"] = {self.relation: [item.to_dict() for item in self.content]}
        if self.links:
            body["_links"] = _render_links(self.links)
        body["page"] = self.metadata.model_dump(by_alias=True)
        return body


class HALResponse(JSONResponse):
    media_type = "application/hal+json"

    def render(self, content: Any) -> bytes:
        if isinstance(content, (EntityModel, PagedModel)):
            content = content.to_dict()
        return super().render(content)
