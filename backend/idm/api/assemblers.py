"""
Redbard IDM - Model Assemblers
"""

from idm.api.hateoas import EntityModel, Link, SELF, link_to
from idm.schemas.user import UserDTO


class UserModelAssembler:
    """Wraps user records in entity models carrying their self link"""

    def __init__(self, base_url: str):
        self.base_url = base_url

    def to_model(self, user: UserDTO) -> EntityModel:
        return EntityModel(user, [Link(rel=SELF, href=link_to(self.base_url, "user", id=user.id))])
