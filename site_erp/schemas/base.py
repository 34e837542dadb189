from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire (siteId, expenseDate, isAuto)."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class SiteRef(CamelModel):
    id: str
    site_name: str


class DeleteResponse(CamelModel):
    id: str
