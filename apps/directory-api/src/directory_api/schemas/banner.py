from pydantic import BaseModel


class BannerInput(BaseModel):
    title: str | None = None
    subtitle: str | None = None
    image: str | None = None
    link: str | None = None
    is_active: bool | None = None
    order: int | None = None
