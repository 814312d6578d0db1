from dataclasses import dataclass


@dataclass(frozen=True)
class Classification:
    code: str
    category: str
    summary: str
    qr_image_url: str | None = None
    source: str = "primary"  # "primary" | "fallback"
