from pydantic import BaseModel


class CategoryIn(BaseModel):
    name: str | None = None
    description: str | None = ""
