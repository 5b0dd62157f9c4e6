from datetime import datetime
from typing import Annotated

from shoreline_server.types import MEDIA_FOLDER_REGEX, Field, OPModel


class ProjectImageModel(OPModel):
    id: Annotated[str, Field(title="Image ID")]
    image_url: Annotated[str, Field(title="Image URL")]
    image_public_id: Annotated[str, Field(title="Media library public ID")]
    sort_order: Annotated[int, Field(title="Position in the gallery")] = 0


class ProjectModel(OPModel):
    id: Annotated[str, Field(title="Project ID")]
    title: Annotated[str, Field(title="Title", examples=["Walnut dining table"])]
    description: Annotated[str | None, Field(title="Description")] = None
    featured: Annotated[bool, Field(title="Featured on the home page")] = False
    image_url: Annotated[str | None, Field(title="Thumbnail URL")] = None
    image_public_id: Annotated[str | None, Field(title="Thumbnail public ID")] = None
    media_folder: Annotated[
        str | None,
        Field(
            title="Media folder",
            description="Folder of the media library the images are stored in",
            examples=["projects/20260213-214530"],
        ),
    ] = None
    display_order: Annotated[int, Field(title="Order within the day")] = 0
    date_is_month_only: Annotated[
        bool,
        Field(
            title="Date is month only",
            description="Only the month of the project date is meaningful",
        ),
    ] = False
    created_at: Annotated[datetime, Field(title="Project date")]
    updated_at: Annotated[datetime, Field(title="Last modified")]
    images: Annotated[list[ProjectImageModel], Field(default_factory=list)]
    tags: Annotated[list[str], Field(default_factory=list)]


class ProjectListModel(OPModel):
    projects: list[ProjectModel]
    has_more: bool = False


class UploadedImageModel(OPModel):
    """Image uploaded by the browser directly to the media library"""

    secure_url: Annotated[str, Field(title="Delivery URL", min_length=1)]
    public_id: Annotated[str, Field(title="Public ID", min_length=1)]


class ProjectDateFields(OPModel):
    project_date_year: Annotated[int | None, Field(ge=1970)] = None
    project_date_month: Annotated[int | None, Field(ge=1, le=12)] = None
    project_date_day: Annotated[int | None, Field(ge=1, le=31)] = None
    date_is_month_only: bool | None = None

    @property
    def has_explicit_date(self) -> bool:
        return (
            self.project_date_year is not None and self.project_date_month is not None
        )


class ProjectPostModel(ProjectDateFields):
    title: Annotated[str, Field(title="Title", min_length=1)]
    description: str | None = None
    tags: Annotated[list[str], Field(default_factory=list)]
    featured: bool = False
    thumbnail_index: Annotated[int, Field(title="Thumbnail image index")] = 0
    uploaded_images: Annotated[
        list[UploadedImageModel],
        Field(default_factory=list, title="Uploaded images"),
    ]
    media_folder: Annotated[
        str | None,
        Field(title="Upload folder", pattern=MEDIA_FOLDER_REGEX),
    ] = None


class ProjectPatchModel(ProjectDateFields):
    title: Annotated[str, Field(title="Title", min_length=1)]
    description: str | None = None
    tags: Annotated[list[str], Field(default_factory=list)]
    featured: bool = False
    thumbnail_index: int = 0
    keep_public_ids: Annotated[
        list[str] | None,
        Field(
            title="Images to keep",
            description="Public IDs of existing images which stay in the project. "
            "Images not listed are deleted. When omitted, all images are kept.",
        ),
    ] = None
    uploaded_images: Annotated[
        list[UploadedImageModel],
        Field(default_factory=list, title="Newly uploaded images"),
    ]


class ProjectOrderModel(OPModel):
    ordered_ids: Annotated[
        list[str],
        Field(
            title="Ordered project IDs",
            description="Project IDs in the order they should be listed",
            min_length=1,
        ),
    ]
