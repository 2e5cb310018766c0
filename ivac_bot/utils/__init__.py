"""Utility helpers."""

from .masking import mask_email, mask_form, mask_otp, mask_password, mask_phone, mask_token

__all__ = ["mask_email", "mask_form", "mask_otp", "mask_password", "mask_phone", "mask_token"]
