"""Promokit - promo asset generation pipeline."""
