# backend/app/services/link_generator.py

from app.core.config import settings

def generate_public_url(survey_id: str) -> str:
    return f"{settings.PUBLIC_BASE_URL.rstrip('/')}/f/{survey_id}"
