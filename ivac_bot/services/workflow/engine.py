"""Session workflow engine - drives one booking run through the portal."""

import asyncio
import functools
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Tuple
from urllib.parse import urlparse

from loguru import logger

from ...constants import Endpoints, Headers, PageMarkers, Retries
from ...core.config.config_models import RunConfig
from ...core.enums import WorkflowState
from ...core.exceptions import (
    ApplicationSubmissionError,
    ChallengeRequiredTimeout,
    InvalidOtpError,
    InvalidTransitionError,
    IvacBotError,
    MobileVerificationError,
    NoSlotAvailableError,
    OtpSendError,
    PasswordAuthError,
    PaymentError,
    PersonalSubmissionError,
    RunCancelledError,
    TokenMissingError,
    TransportError,
    ValidationError,
)
from ...core.logger import run_id_ctx
from ...core.retry import RetryController
from ...utils.masking import mask_form, mask_token, truncate_url
from ..booking.challenge_detector import find_challenge_widget
from ..booking.request_builders import (
    build_application_info_form,
    build_mobile_verify_form,
    build_otp_send_form,
    build_otp_verify_form,
    build_password_form,
    build_payment_form,
    build_personal_info_form,
    build_slot_time_form,
)
from ..booking.slot_selector import Slot, SlotSelector, parse_slots
from ..booking.token_extractor import extract_token
from ..session.session_state import SessionState
from ..session.suspension import OneShotSignal
from ..transport.base import Transport, TransportResponse

SuspendHook = Callable[[WorkflowState, "WorkflowEngine"], Awaitable[None]]

# States from which the application step may start, once login is complete
_LOGGED_IN_STATES = (
    WorkflowState.AUTH_STARTED,
    WorkflowState.PASSWORD_SUBMITTED,
    WorkflowState.OTP_VERIFIED,
)


@dataclass(frozen=True)
class WorkflowResult:
    """Summary of a finished run."""

    run_id: str
    state: WorkflowState
    appointment_date: Optional[str]
    slot: Optional[Slot]
    payment_url: Optional[str]
    hash_param: Optional[str]
    history: Tuple[WorkflowState, ...]

    @property
    def completed(self) -> bool:
        return self.state == WorkflowState.COMPLETE

    def to_dict(self) -> Dict[str, Any]:
        """Convert result to dictionary."""
        return {
            "run_id": self.run_id,
            "state": self.state.value,
            "appointment_date": self.appointment_date,
            "appointment_time": self.slot.time_display if self.slot else None,
            "payment_url": self.payment_url,
            "history": [s.value for s in self.history],
        }


def workflow_step(func):
    """Tag IvacBotErrors raised by a step with the state they were raised in."""

    @functools.wraps(func)
    async def wrapper(self: "WorkflowEngine", *args, **kwargs):
        try:
            return await func(self, *args, **kwargs)
        except IvacBotError as e:
            if e.state is None:
                e.state = self.state.value
            raise

    return wrapper


class WorkflowEngine:
    """
    State machine for a single booking run.

    Steps run strictly in order: login page, mobile verification, password,
    OTP, application info, personal info, slot selection, challenge, payment.
    Each step is a public coroutine so callers can drive the run by hand;
    `run()` drives the whole sequence and marks the run FAILED on any error.

    The two suspension points (OTP and challenge token) block on one-shot
    signals fulfilled through `supply_otp()` and `supply_challenge_token()`.
    Values may be supplied before the engine reaches the suspension point.
    """

    def __init__(
        self,
        config: RunConfig,
        transport: Transport,
        retry: Optional[RetryController] = None,
        slot_selector: Optional[SlotSelector] = None,
        on_suspend: Optional[SuspendHook] = None,
    ):
        """
        Initialize workflow engine.

        Args:
            config: Immutable run configuration
            transport: HTTP transport used for every portal request
            retry: Retry controller (default: built from config.workflow)
            slot_selector: Slot policy (default: first slot with capacity)
            on_suspend: Coroutine called with (state, engine) when the run
                enters a suspension point
        """
        self.config = config
        self.transport = transport
        self.retry = retry or RetryController(
            max_attempts=config.workflow.retry_attempts,
            delay=config.workflow.retry_delay,
        )
        self.slot_selector = slot_selector or SlotSelector()
        self.on_suspend = on_suspend

        self.session = SessionState(selected_date=config.application.appointment_date)
        self.state = WorkflowState.INIT
        self.history: List[WorkflowState] = [WorkflowState.INIT]

        self._authenticated = False
        self._otp_required = False
        self._cancelled = False
        self.otp_signal: OneShotSignal[str] = OneShotSignal("OTP", validator=self._validate_otp)
        self.challenge_signal: OneShotSignal[str] = OneShotSignal(
            "challenge token",
            validator=self._validate_challenge_token,
            timeout_error=lambda _name, timeout: ChallengeRequiredTimeout(timeout),
        )

    # ------------------------------------------------------------------
    # Resume hooks
    # ------------------------------------------------------------------

    def supply_otp(self, otp: str) -> None:
        """
        Provide the OTP for the AWAITING_OTP suspension point.

        Raises:
            ValidationError: If the OTP is not exactly `otp_length` digits
            SignalAlreadyFulfilledError: If an OTP is already pending
        """
        self.otp_signal.supply(otp)

    def supply_challenge_token(self, token: str) -> None:
        """
        Provide the solved challenge token for the AWAITING_CHALLENGE point.

        Raises:
            ValidationError: If the token is empty
            SignalAlreadyFulfilledError: If a token was already supplied
        """
        self.challenge_signal.supply(token)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """
        Cancel the run.

        Pending and future suspension waits raise SuspensionCancelledError;
        every later step or portal request raises RunCancelledError.
        """
        logger.warning("Workflow run cancelled")
        self._cancelled = True
        self.otp_signal.cancel()
        self.challenge_signal.cancel()

    def _validate_otp(self, otp: Any) -> str:
        value = str(otp).strip() if otp is not None else ""
        length = self.config.workflow.otp_length
        if not value.isdigit():
            raise ValidationError("OTP must contain only digits", field="otp")
        if len(value) != length:
            raise ValidationError(f"OTP must be exactly {length} digits", field="otp")
        return value

    @staticmethod
    def _validate_challenge_token(token: Any) -> str:
        value = str(token).strip() if token is not None else ""
        if not value:
            raise ValidationError("Challenge token must not be empty", field="challenge_token")
        return value

    # ------------------------------------------------------------------
    # State handling
    # ------------------------------------------------------------------

    def _check_cancelled(self, step: str) -> None:
        if self._cancelled:
            raise RunCancelledError(step)

    def _expect(self, step: str, *states: WorkflowState) -> None:
        self._check_cancelled(step)
        if self.state not in states:
            raise InvalidTransitionError(
                step, self.state.value, " or ".join(s.value for s in states)
            )

    def _transition(self, new_state: WorkflowState) -> None:
        logger.info(f"State transition: {self.state.value} -> {new_state.value}")
        self.state = new_state
        self.history.append(new_state)

    def _fail(self, error: BaseException) -> None:
        if isinstance(error, IvacBotError) and error.state is None:
            error.state = self.state.value
        failed_in = self.state.value
        self._transition(WorkflowState.FAILED)
        if isinstance(error, IvacBotError):
            logger.error(f"Workflow failed in {failed_in}: {error.message}")
        elif isinstance(error, asyncio.CancelledError):
            logger.warning(f"Workflow cancelled in {failed_in}")
        else:
            logger.exception(f"Unexpected error in {failed_in}: {error}")

    async def _notify_suspended(self) -> None:
        if self.on_suspend is not None:
            await self.on_suspend(self.state, self)

    # ------------------------------------------------------------------
    # Transport helpers
    # ------------------------------------------------------------------

    def _absolute(self, url_or_path: str) -> str:
        if url_or_path.startswith(("http://", "https://")):
            return url_or_path
        return self.config.url(url_or_path)

    async def _send(
        self,
        method: str,
        url_or_path: str,
        data: Optional[Mapping[str, str]] = None,
        max_attempts: Optional[int] = None,
    ) -> TransportResponse:
        """Send a request through the retry controller with the run's cookie jar."""
        url = self._absolute(url_or_path)
        self._check_cancelled(f"{method} {urlparse(url).path or '/'}")
        headers = dict(Headers.FORM_POST) if data is not None else None
        if data is not None:
            logger.debug(f"{method} {truncate_url(url)} form={mask_form(data)}")
        else:
            logger.debug(f"{method} {truncate_url(url)}")

        if self.session.cookie_jar is None:
            self.session.cookie_jar = self.transport.create_cookie_jar()

        response = await self.retry.run(
            lambda: self.transport.request(
                method,
                url,
                headers=headers,
                data=data,
                cookie_jar=self.session.cookie_jar,
            ),
            max_attempts=max_attempts,
        )
        logger.debug(f"{method} {truncate_url(url)} -> {response.status}")
        return response

    @staticmethod
    def _json(response: TransportResponse) -> Dict[str, Any]:
        """Parse a JSON object body; anything else reads as an empty payload."""
        try:
            payload = response.json()
        except ValueError:
            logger.warning(f"Non-JSON response from {truncate_url(response.url)}")
            return {}
        return payload if isinstance(payload, dict) else {}

    def _refresh_token(self, body: str) -> None:
        token = extract_token(body)
        if token:
            self.session.token = token
            logger.debug(f"Token refreshed: {mask_token(token)}")

    def _require_token(self) -> str:
        if not self.session.token:
            raise TokenMissingError("No CSRF token available for the request")
        return self.session.token

    def _is_authenticated_url(self, url: str) -> bool:
        parsed = urlparse(url)
        return parsed.netloc == self.config.host and PageMarkers.LOGIN not in parsed.path

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    @workflow_step
    async def start(self) -> bool:
        """
        Open the login page and capture the CSRF token.

        Returns:
            True if the portal reports an existing authenticated session
            (the login steps can then be skipped)

        Raises:
            TokenMissingError: If the page carries no token
        """
        self._expect("start", WorkflowState.INIT)
        logger.info("Opening login page")
        response = await self._send("GET", Endpoints.LOGIN_PAGE)

        token = extract_token(response.body)
        if not token:
            raise TokenMissingError()
        self.session.token = token
        self._transition(WorkflowState.AUTH_STARTED)

        if self._is_authenticated_url(response.url):
            logger.info("Session already authenticated, skipping login")
            self._authenticated = True
        return self._authenticated

    @workflow_step
    async def verify_mobile(self) -> None:
        """Submit the mobile number; the portal answers with a redirect."""
        self._expect("verify_mobile", WorkflowState.AUTH_STARTED)
        form = build_mobile_verify_form(self._require_token(), self.config.login.mobile_number)
        response = await self._send("POST", Endpoints.MOBILE_VERIFY, form)

        if not response.is_redirect:
            raise MobileVerificationError(
                f"Mobile verification failed (HTTP {response.status})", status=response.status
            )
        logger.info("Mobile number verified")
        self._transition(WorkflowState.MOBILE_VERIFIED)

    @workflow_step
    async def submit_password(self) -> bool:
        """
        Submit the password.

        Returns:
            True when the portal redirects to the OTP page
        """
        self._expect("submit_password", WorkflowState.MOBILE_VERIFIED)
        form = build_password_form(
            self._require_token(), self.config.login.password.get_secret_value()
        )
        response = await self._send("POST", Endpoints.LOGIN_SUBMIT, form)

        if not response.is_redirect:
            raise PasswordAuthError(
                f"Password authentication failed (HTTP {response.status})",
                status=response.status,
            )
        self._transition(WorkflowState.PASSWORD_SUBMITTED)

        self._otp_required = PageMarkers.OTP in response.location
        if self._otp_required:
            logger.info("Password accepted, OTP required")
            return True

        logger.info("Password accepted, no OTP required")
        home = await self._send("GET", Endpoints.HOME)
        self._refresh_token(home.body)
        self._authenticated = True
        return False

    @workflow_step
    async def send_otp(self, resend: bool = False) -> None:
        """Ask the portal to send (or resend) the OTP."""
        self._expect("send_otp", WorkflowState.AWAITING_OTP)
        form = build_otp_send_form(self._require_token(), resend=resend)
        response = await self._send("POST", Endpoints.OTP_SEND, form)
        payload = self._json(response)

        if not payload.get("success"):
            action = "resend" if resend else "send"
            raise OtpSendError(payload.get("message") or f"Failed to {action} OTP")
        logger.info("OTP resent" if resend else "OTP sent")

    @workflow_step
    async def verify_otp(self, otp: str) -> Optional[str]:
        """
        Verify an OTP value.

        Returns:
            The `hash_param` returned by the portal, if any

        Raises:
            InvalidOtpError: If the portal rejects the OTP
        """
        self._expect("verify_otp", WorkflowState.AWAITING_OTP)
        otp = self._validate_otp(otp)
        self.session.otp_attempts += 1
        form = build_otp_verify_form(self._require_token(), otp)
        response = await self._send("POST", Endpoints.OTP_VERIFY, form)
        payload = self._json(response)

        if not payload.get("success"):
            raise InvalidOtpError(
                payload.get("message") or "Invalid OTP", attempts=self.session.otp_attempts
            )

        data = payload.get("data")
        self.session.hash_param = data.get("hash_param") if isinstance(data, dict) else None
        self.session.otp_verified = True
        self._authenticated = True
        logger.info("OTP verified")
        self._transition(WorkflowState.OTP_VERIFIED)
        return self.session.hash_param

    @workflow_step
    async def complete_otp(self) -> Optional[str]:
        """
        Run the OTP suspension point.

        Sends the OTP, waits for a supplied value and verifies it. A rejected
        OTP triggers a resend and a wait for a fresh value, up to
        `max_otp_attempts` verifications.

        Raises:
            OtpSendError: If the portal refuses to send the OTP
            SuspensionTimeoutError: If no OTP is supplied in time
            SuspensionCancelledError: If the wait is cancelled
            InvalidOtpError: When the last allowed OTP is rejected
        """
        self._expect("complete_otp", WorkflowState.PASSWORD_SUBMITTED)
        if not self._otp_required:
            raise InvalidTransitionError(
                "complete_otp", self.state.value, "an OTP redirect after password submission"
            )
        self._transition(WorkflowState.AWAITING_OTP)

        workflow = self.config.workflow
        resend = False
        while True:
            await self.send_otp(resend=resend)
            await self._notify_suspended()
            otp = await self.otp_signal.wait(workflow.otp_timeout)
            try:
                return await self.verify_otp(otp)
            except InvalidOtpError as e:
                if self.session.otp_attempts >= workflow.max_otp_attempts:
                    raise
                logger.warning(
                    f"{e.message} (attempt {self.session.otp_attempts}/"
                    f"{workflow.max_otp_attempts}), requesting a new OTP"
                )
                self._check_cancelled("OTP resend")
                self.otp_signal.reset()
                resend = True

    @workflow_step
    async def submit_application_info(self) -> None:
        """Submit the application identifiers."""
        self._expect("submit_application_info", *_LOGGED_IN_STATES)
        if not self._authenticated:
            raise InvalidTransitionError(
                "submit_application_info", self.state.value, "a completed login"
            )
        form = build_application_info_form(self._require_token(), self.config.application)
        response = await self._send("POST", Endpoints.APPLICATION_INFO, form)

        if not response.ok:
            raise ApplicationSubmissionError(
                f"Application info submission failed (HTTP {response.status})",
                status=response.status,
            )
        logger.info("Application info submitted")
        self._transition(WorkflowState.APPLICATION_SUBMITTED)

    @workflow_step
    async def submit_personal_info(self) -> None:
        """Submit contact details and the family block."""
        self._expect("submit_personal_info", WorkflowState.APPLICATION_SUBMITTED)
        form = build_personal_info_form(
            self._require_token(), self.config.personal, self.config.application.web_file_id
        )
        response = await self._send("POST", Endpoints.PERSONAL_INFO, form)

        if not response.ok:
            raise PersonalSubmissionError(
                f"Personal info submission failed (HTTP {response.status})",
                status=response.status,
            )
        logger.info(
            f"Personal info submitted ({len(self.config.personal.family_members)} family member(s))"
        )
        self._transition(WorkflowState.PERSONAL_SUBMITTED)

    @workflow_step
    async def select_slot(self, appointment_date: Optional[str] = None) -> Slot:
        """
        Load the slots for a date and pick one.

        On failure the state is left at PERSONAL_SUBMITTED, so a caller
        driving steps by hand may try another date.

        Args:
            appointment_date: Date to query (default: the configured date)

        Raises:
            ValidationError: If the date is not YYYY-MM-DD
            NoSlotAvailableError: If the portal returns no usable slot
        """
        self._expect("select_slot", WorkflowState.PERSONAL_SUBMITTED)
        date = appointment_date or self.config.application.appointment_date
        try:
            datetime.strptime(date, "%Y-%m-%d")
        except ValueError:
            raise ValidationError("Date must use YYYY-MM-DD format", field="appointment_date")

        form = build_slot_time_form(self._require_token(), date)
        response = await self._send("POST", Endpoints.SLOT_TIME, form)
        payload = self._json(response)

        data = payload.get("data")
        raw_slots = data.get("slot_times") if isinstance(data, dict) else None
        if not payload.get("success") or raw_slots is None:
            raise NoSlotAvailableError("Failed to load slot times", date=date)

        slots = parse_slots(raw_slots)
        logger.info(f"Received {len(slots)} slot(s) for {date}")
        slot = self.slot_selector.select(slots)
        if slot is None:
            raise NoSlotAvailableError(date=date)

        self.session.selected_date = date
        self.session.selected_slot = slot
        logger.info(f"Selected slot {slot.time_display} ({slot.available_slot} available)")
        self._transition(WorkflowState.SLOT_SELECTED)
        return slot

    async def _probe_challenge(self) -> Optional[str]:
        """
        Look for a challenge widget on the checkout page.

        A probe that times out or fails at the transport level counts as "no
        challenge"; a required challenge then surfaces as a payment error.
        """
        try:
            response = await asyncio.wait_for(
                self._send("GET", Endpoints.HOME),
                timeout=self.config.workflow.challenge_probe_timeout,
            )
        except asyncio.TimeoutError:
            logger.info("Challenge probe timed out, assuming no challenge")
            return None
        except TransportError as e:
            logger.warning(f"Challenge probe failed ({e.message}), assuming no challenge")
            return None
        self._refresh_token(response.body)
        return find_challenge_widget(response.body)

    @workflow_step
    async def resolve_challenge(self) -> Optional[str]:
        """
        Run the challenge suspension point.

        Returns:
            The supplied challenge token, or None when no challenge was shown

        Raises:
            ChallengeRequiredTimeout: If a challenge is shown and no token
                is supplied in time
            SuspensionCancelledError: If the wait is cancelled
        """
        self._expect("resolve_challenge", WorkflowState.SLOT_SELECTED)
        site_key = await self._probe_challenge()

        if site_key is None:
            logger.info("No challenge widget on checkout page")
            self.session.recaptcha_token = None
            self._transition(WorkflowState.CHALLENGE_SOLVED)
            return None

        logger.info(f"Challenge widget detected (sitekey: {mask_token(site_key)})")
        self._transition(WorkflowState.AWAITING_CHALLENGE)
        await self._notify_suspended()
        token = await self.challenge_signal.wait(self.config.workflow.challenge_timeout)
        self.session.recaptcha_token = token
        logger.info("Challenge token received")
        self._transition(WorkflowState.CHALLENGE_SOLVED)
        return token

    @workflow_step
    async def initiate_payment(self) -> Optional[str]:
        """
        Submit the payment selection (single attempt).

        Returns:
            Payment redirect URL, if the portal returned one

        Raises:
            PaymentError: If the portal does not report success
        """
        self._expect("initiate_payment", WorkflowState.CHALLENGE_SOLVED)
        slot = self.session.selected_slot
        form = build_payment_form(
            self._require_token(),
            self.session.selected_date or self.config.application.appointment_date,
            slot.hour if slot else "",
            self.session.recaptcha_token,
            self.config.payment,
        )
        response = await self._send(
            "POST", Endpoints.PAY_NOW, form, max_attempts=Retries.PAYMENT_ATTEMPTS
        )
        payload = self._json(response)

        if not payload.get("success"):
            raise PaymentError(payload.get("message") or "Payment failed")
        self._transition(WorkflowState.PAYMENT_INITIATED)

        url = payload.get("url")
        if url:
            self.session.payment_url = url
            if self._cancelled:
                logger.warning("Run cancelled after payment initiation, not following payment URL")
            else:
                logger.info(f"Following payment URL: {truncate_url(url)}")
                await self._send("GET", url)
        return url or None

    # ------------------------------------------------------------------
    # Full run
    # ------------------------------------------------------------------

    def result(self) -> WorkflowResult:
        """Snapshot of the run so far."""
        return WorkflowResult(
            run_id=self.session.run_id,
            state=self.state,
            appointment_date=self.session.selected_date,
            slot=self.session.selected_slot,
            payment_url=self.session.payment_url,
            hash_param=self.session.hash_param,
            history=tuple(self.history),
        )

    async def run(self) -> WorkflowResult:
        """
        Drive the run from INIT to COMPLETE.

        Any error moves the engine to FAILED; IvacBotErrors carry the name
        of the state they were raised in (`error.state`). The run's cookie
        jar is released however the run ends.

        Raises:
            IvacBotError: The first fatal error of the run
        """
        self._expect("run", WorkflowState.INIT)
        ctx_token = run_id_ctx.set(self.session.run_id)
        logger.info(f"Starting workflow run: {self.config.masked_summary()}")
        try:
            already_authenticated = await self.start()
            if not already_authenticated:
                await self.verify_mobile()
                if await self.submit_password():
                    await self.complete_otp()
            await self.submit_application_info()
            await self.submit_personal_info()
            await self.select_slot()
            await self.resolve_challenge()
            await self.initiate_payment()
            self._transition(WorkflowState.COMPLETE)
            logger.success("Workflow complete")
            return self.result()
        except (Exception, asyncio.CancelledError) as e:
            self._fail(e)
            raise
        finally:
            if self.session.cookie_jar is not None:
                await self.transport.release(self.session.cookie_jar)
            run_id_ctx.reset(ctx_token)
