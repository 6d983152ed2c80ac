from pydantic import AliasChoices, BaseModel, Field
from knowledge_base.files.attachments import Attachment


class ArticleCreateIn(BaseModel):
    title: str | None = None
    content: str | None = None
    category_id: int | None = Field(default=None, validation_alias=AliasChoices("category_id", "categoryId"))
    enable_slideshow: bool = Field(default=False, validation_alias=AliasChoices("enable_slideshow", "enableSlideshow"))
    files: list[Attachment] = Field(default_factory=list)
    images: list[Attachment] = Field(default_factory=list)


class ArticleUpdateIn(ArticleCreateIn):
    """Update payload.

    ``files``/``images`` carry only newly added attachments; existing ones
    are dropped by listing their ids in the ``*_to_remove`` fields.
    """

    enable_slideshow: bool | None = Field(default=None, validation_alias=AliasChoices("enable_slideshow", "enableSlideshow"))
    files_to_remove: list[str | int] = Field(default_factory=list, validation_alias=AliasChoices("files_to_remove", "filesToRemove"))
    images_to_remove: list[str | int] = Field(default_factory=list, validation_alias=AliasChoices("images_to_remove", "imagesToRemove"))


class OrphanDeleteIn(BaseModel):
    filenames: list[str]
