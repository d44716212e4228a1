"""
Action Router

Routes parsed actions to intent handlers. Every action passes through the
security screen first:

1. raw user message -> prompt screen (block => reason "prompt_injection")
2. addresses / token address in params -> action screen
   (block => reason "sentinel_screen", warning => prepended to the reply)
3. the session gets a wallet if it has none
4. params are validated against the intent's model and the handler runs

`execute_action` never raises; failures come back as ActionResult.
"""

import logging
from typing import Dict, List, Optional

from pydantic import ValidationError as ParamsValidationError

from ..core.security import (
    ActionScreenParams,
    RiskLevel,
    ScreenResult,
    SecurityScreen,
    extract_addresses,
    extract_token_address,
    format_screen_message,
)
from .handlers import HANDLERS, ActionContext, AgentServices, HandlerSpec
from .models import ActionIntent, ActionResult, ParsedAction


logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Something went wrong while handling that request. Please try again."


def _blocked(result: ScreenResult, reason: str) -> ActionResult:
    return ActionResult(
        success=False,
        message=format_screen_message(result),
        data={"blocked": True, "reason": reason, "details": list(result.reasons)},
    )


class ActionRouter:
    def __init__(
        self,
        services: AgentServices,
        screen: SecurityScreen,
        handlers: Optional[Dict[str, HandlerSpec]] = None,
    ):
        self.services = services
        self.screen = screen
        self.handlers = dict(HANDLERS if handlers is None else handlers)

    async def execute_action(
        self,
        action: ParsedAction,
        user_message: Optional[str] = None,
        session_id: Optional[str] = None,
    ) -> ActionResult:
        warnings: List[str] = []

        # ── Prompt screen ──────────────────────────────────
        if user_message:
            prompt = self.screen.screen_prompt(user_message)
            if prompt.blocked:
                logger.warning(f"Blocked message for session {session_id}: {prompt.reasons}")
                return _blocked(prompt, "prompt_injection")
            if prompt.is_warning:
                warnings.extend(prompt.reasons)

        # ── Action screen ──────────────────────────────────
        addresses = extract_addresses(action.params)
        token_address = extract_token_address(action.params)
        if addresses or token_address:
            verdict = await self._screen_action(action, user_message, addresses, token_address)
            if verdict.blocked:
                logger.warning(f"Blocked {action.intent} for session {session_id}: {verdict.reasons}")
                return _blocked(verdict, "sentinel_screen")
            if verdict.is_warning:
                warnings.extend(verdict.reasons)

        # ── Dispatch ───────────────────────────────────────
        try:
            if session_id and not await self.services.wallets.has_wallet(session_id):
                await self.services.wallets.create_wallet(session_id)
            result = await self._dispatch(action, user_message, session_id)
        except Exception:
            logger.exception(f"Handler for {action.intent} failed (session {session_id})")
            result = ActionResult(success=False, message=GENERIC_FAILURE)

        if warnings:
            notice = format_screen_message(ScreenResult.from_risk(RiskLevel.WARNING, warnings))
            result = result.model_copy(update={"message": f"{notice}\n\n{result.message}"})
        return result

    async def _screen_action(
        self,
        action: ParsedAction,
        user_message: Optional[str],
        addresses: List[str],
        token_address: Optional[str],
    ) -> ScreenResult:
        params = ActionScreenParams(
            intent=action.intent,
            user_message=user_message or "",
            addresses=addresses,
            token_address=token_address,
            chain=str(action.params.get("chain") or "base"),
        )
        try:
            return await self.screen.screen_action(params, check_prompt=False)
        except Exception as exc:
            logger.exception(f"Action screen failed for {action.intent}")
            return ScreenResult.from_risk(RiskLevel.WARNING, [f"Security screen unavailable: {exc}"])

    async def _dispatch(
        self,
        action: ParsedAction,
        user_message: Optional[str],
        session_id: Optional[str],
    ) -> ActionResult:
        spec = self.handlers.get(action.intent) or self.handlers[ActionIntent.UNKNOWN.value]

        try:
            params = spec.params_model.model_validate(action.params)
        except ParamsValidationError as exc:
            fields = [".".join(str(part) for part in error["loc"]) for error in exc.errors()]
            return ActionResult(
                success=False,
                message=spec.usage or f"I couldn't read the details for {action.intent}. Please rephrase.",
                data={"invalid_params": fields},
            )

        ctx = ActionContext(
            services=self.services,
            session_id=session_id,
            raw_text=action.raw_text or user_message or "",
        )
        return await spec.handler(params, ctx)
