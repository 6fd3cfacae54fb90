"""Template registry and HTML rendering (Jinja2, autoescaped)."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape
from pydantic import BaseModel

from promokit.render.promo_data import TemplatePromoData

TEMPLATES_DIR = Path(__file__).parent / "templates"

SOCIAL_TEMPLATE_ID = "social-square"
EMAIL_TEMPLATE_ID = "email"


class TemplateDefinition(BaseModel):
    id: str
    name: str
    description: str
    preview_bg_color: str
    category: str = "general"


TEMPLATES: List[TemplateDefinition] = [
    TemplateDefinition(
        id="classic",
        name="Classic Grid",
        description="Clean grid layout with logo header",
        preview_bg_color="#1a1a2e",
    ),
    TemplateDefinition(
        id="modern",
        name="Modern Stripe",
        description="Bold color stripe with product cards",
        preview_bg_color="#e94560",
    ),
    TemplateDefinition(
        id="bold",
        name="Bold Promo",
        description="High-contrast promotional layout",
        preview_bg_color="#16213e",
    ),
]


def get_template(template_id: Optional[str]) -> TemplateDefinition:
    """Print template by id; unknown or missing ids fall back to the first (classic)."""
    for template in TEMPLATES:
        if template.id == template_id:
            return template
    return TEMPLATES[0]


@lru_cache
def get_environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "j2"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _render(name: str, context: Dict[str, Any]) -> str:
    return get_environment().get_template(f"{name}.html.j2").render(**context)


def render_template(template_id: Optional[str], data: TemplatePromoData) -> str:
    """HTML for one of the print templates (classic/modern/bold) or the social square."""
    name = template_id if template_id == SOCIAL_TEMPLATE_ID else get_template(template_id).id
    return _render(name, data.model_dump())


def render_email(data: TemplatePromoData, email_copy: Dict[str, str]) -> str:
    """HTML email body. `email_copy` carries subject/preheader/bodyHtml (may be empty)."""
    context = data.model_dump()
    context["email_copy"] = {
        "subject": email_copy.get("subject") or "",
        "preheader": email_copy.get("preheader") or "",
        "body_html": email_copy.get("bodyHtml") or "",
    }
    return _render(EMAIL_TEMPLATE_ID, context)
