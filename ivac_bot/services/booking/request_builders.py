"""Form payload builders for each portal submission.

Every builder is pure: given the same inputs it returns the same ordered
mapping of field name to string value, ready for url-encoding.
"""

from typing import Dict, Optional, Sequence, Union

from ...core.config.config_models import (
    ApplicationRequest,
    FamilyMember,
    PaymentMethod,
    PersonalInfo,
)

FormFields = Dict[str, str]


def build_mobile_verify_form(token: str, mobile_number: str) -> FormFields:
    """Fields for the mobile-verify step."""
    return {"_token": token, "mobile_no": mobile_number}


def build_password_form(token: str, password: str) -> FormFields:
    """Fields for the password (login-auth-submit) step."""
    return {"_token": token, "password": password}


def build_otp_send_form(token: str, resend: bool = False) -> FormFields:
    """Fields for requesting an OTP; `resend` is 1 on any re-trigger."""
    return {"_token": token, "resend": "1" if resend else "0"}


def build_otp_verify_form(token: str, otp: str) -> FormFields:
    """Fields for OTP verification."""
    return {"_token": token, "otp": otp}


def build_application_info_form(token: str, application: ApplicationRequest) -> FormFields:
    """
    Fields for the application-info step.

    The web file ID is submitted twice (value and confirmation).
    """
    return {
        "_token": token,
        "highcom": application.highcom,
        "webfile_id": application.web_file_id,
        "webfile_id_repeat": application.web_file_id,
        "ivac_id": application.ivac_id,
        "visa_type": application.visa_type,
        "family_count": str(application.family_count),
        "visit_purpose": application.visit_purpose,
    }


def serialize_family_members(members: Sequence[FamilyMember]) -> FormFields:
    """
    Serialize family members with 1-based positional indices.

    Each member's file number is sent twice (`webfile_no` and
    `again_webfile_no`) with identical values.
    """
    fields: FormFields = {}
    for index, member in enumerate(members, start=1):
        fields[f"family[{index}][name]"] = member.name
        fields[f"family[{index}][webfile_no]"] = member.web_file_no
        fields[f"family[{index}][again_webfile_no]"] = member.web_file_no
    return fields


def build_personal_info_form(
    token: str, personal: PersonalInfo, web_file_id: str
) -> FormFields:
    """Fields for the personal-info step, family block last."""
    fields: FormFields = {
        "_token": token,
        "full__name": personal.full_name,
        "email_name": personal.email,
        "pho_ne": personal.phone,
        "web_file_id": web_file_id,
    }
    fields.update(serialize_family_members(personal.family_members))
    return fields


def build_slot_time_form(token: str, appointment_date: str) -> FormFields:
    """Fields for the slot-time lookup."""
    return {"_token": token, "appointment_date": appointment_date}


def build_payment_form(
    token: str,
    appointment_date: str,
    appointment_time: Union[int, str],
    challenge_token: Optional[str],
    payment_method: PaymentMethod,
) -> FormFields:
    """
    Fields for the payment submission.

    The solved challenge token travels in `hash_param`; it is empty when the
    portal showed no challenge.
    """
    return {
        "_token": token,
        "appointment_date": appointment_date,
        "appointment_time": str(appointment_time),
        "hash_param": challenge_token or "",
        "selected_payment[name]": payment_method.name,
        "selected_payment[slug]": payment_method.slug,
        "selected_payment[link]": payment_method.link,
    }
