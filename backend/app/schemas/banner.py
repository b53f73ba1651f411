from pydantic import BaseModel


class BannerResponse(BaseModel):
    id: int
    link: str
    url: str
    job_id: int | None
    created_at: str
