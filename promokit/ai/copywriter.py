"""
Generated marketing copy (social captions, email subject/preheader).

Strictly best effort: without OPENAI_API_KEY, or on any API/JSON failure,
every field comes back as an empty string and the owning job carries on.
"""

from __future__ import annotations

import json
import logging
from typing import Dict, Optional, Sequence

from openai import OpenAI

from promokit.core.config import get_settings
from promokit.render.promo_data import TemplatePromoData

logger = logging.getLogger(__name__)

SUMMARY_ITEM_LIMIT = 8
SOCIAL_FIELDS = ("facebook", "instagram", "linkedin")
EMAIL_FIELDS = ("subject", "preheader", "bodyHtml")


def build_promo_summary(data: TemplatePromoData) -> str:
    items = "\n".join(
        f"- {item.name}: {item.price}{' / ' + item.unit if item.unit else ''}"
        for item in data.items[:SUMMARY_ITEM_LIMIT]
    )
    lines = [
        f"Company: {data.brand.name}",
        f"Promo title: {data.promo.title}",
        f"Subhead: {data.promo.subhead}" if data.promo.subhead else None,
        f"CTA: {data.promo.cta}" if data.promo.cta else None,
        f"Featured products:\n{items}",
    ]
    return "\n".join(line for line in lines if line)


def _empty(fields: Sequence[str]) -> Dict[str, str]:
    return {name: "" for name in fields}


class Copywriter:
    """OpenAI chat completions wrapper returning fixed-shape JSON copy."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, client: Optional[OpenAI] = None):
        settings = get_settings()
        self.api_key = settings.OPENAI_API_KEY if api_key is None else api_key
        self.model = model or settings.OPENAI_MODEL
        self.timeout = settings.OPENAI_TIMEOUT_SECONDS
        self._client = client

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    @property
    def client(self) -> OpenAI:
        if self._client is None:
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=1)
        return self._client

    def _complete_json(self, prompt: str, fields: Sequence[str], label: str) -> Dict[str, str]:
        if not self.enabled:
            return _empty(fields)

        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": prompt}],
                max_tokens=600,
                temperature=0.7,
            )
            content = (response.choices[0].message.content or "").strip()
            # No fence stripping: anything but a bare JSON object counts as failure.
            data = json.loads(content)
            if not isinstance(data, dict):
                raise ValueError("response is not a JSON object")
        except Exception as e:
            logger.warning(f"{label} failed (non-fatal): {e}")
            return _empty(fields)

        return {name: str(data.get(name) or "") for name in fields}

    def generate_social_captions(self, data: TemplatePromoData) -> Dict[str, str]:
        prompt = f"""You are a marketing copywriter for a building materials dealer. Write short, engaging social media captions for this promotional flyer.

{build_promo_summary(data)}

Return ONLY valid JSON with this exact structure (no markdown, no extra text):
{{"facebook":"...","instagram":"...","linkedin":"..."}}

Guidelines:
- Facebook: 1-2 sentences, friendly and direct, include a call to action
- Instagram: punchy, emoji-friendly, up to 150 chars, hashtag line at end
- LinkedIn: professional tone, 1-2 sentences, business-focused"""
        return self._complete_json(prompt, SOCIAL_FIELDS, "generate_social_captions")

    def generate_email_copy(self, data: TemplatePromoData) -> Dict[str, str]:
        prompt = f"""You are an email copywriter for a building materials dealer. Write professional email marketing copy for this promotional flyer.

{build_promo_summary(data)}

Return ONLY valid JSON with this exact structure (no markdown, no extra text):
{{"subject":"...","preheader":"...","bodyHtml":"..."}}

Guidelines:
- subject: compelling email subject line, under 60 chars
- preheader: preview text shown in inbox, under 90 chars
- bodyHtml: 1-2 short paragraphs of HTML (use <p> tags only), conversational and professional tone, no more than 80 words total"""
        return self._complete_json(prompt, EMAIL_FIELDS, "generate_email_copy")
