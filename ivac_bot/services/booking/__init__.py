"""Booking package - page parsing, slot policy and form builders."""

from .challenge_detector import find_challenge_widget, has_challenge_widget
from .request_builders import (
    build_application_info_form,
    build_mobile_verify_form,
    build_otp_send_form,
    build_otp_verify_form,
    build_password_form,
    build_payment_form,
    build_personal_info_form,
    build_slot_time_form,
    serialize_family_members,
)
from .slot_selector import Slot, SlotSelector, parse_slots, select_slot
from .token_extractor import extract_token

__all__ = [
    "extract_token",
    "find_challenge_widget",
    "has_challenge_widget",
    "Slot",
    "SlotSelector",
    "parse_slots",
    "select_slot",
    "build_application_info_form",
    "build_mobile_verify_form",
    "build_otp_send_form",
    "build_otp_verify_form",
    "build_password_form",
    "build_payment_form",
    "build_personal_info_form",
    "build_slot_time_form",
    "serialize_family_members",
]
