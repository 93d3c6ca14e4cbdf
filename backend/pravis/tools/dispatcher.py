import logging
from typing import Any, Callable, Dict, Optional, Union

from pydantic import ValidationError

from pravis.tools.base import NavigationTarget, SessionContext, ToolRequest
from pravis.tools.registry import ToolRegistry

logger = logging.getLogger("pravis.tools.dispatcher")


class IntentDispatcher:
    """
    Maps a tool request to exactly one navigation side effect.

    Unknown actions are logged and dropped: no navigation happens and nothing
    is raised to the caller.
    """
    def __init__(self, registry: ToolRegistry):
        self.registry = registry
        self._handlers: Dict[str, Callable[..., NavigationTarget]] = {}

    def register(self, handler_key: str, handler_func: Callable[..., NavigationTarget]):
        """
        Register a python function for a specific handler key.
        """
        self._handlers[handler_key] = handler_func

    def dispatch(
        self,
        tool_request: Union[ToolRequest, Dict[str, Any]],
        ctx: SessionContext,
    ) -> Optional[NavigationTarget]:
        """
        Resolve the handler for tool_request.action, build the navigation
        target and hand it to ctx.navigator. Returns the target, or None when
        nothing was navigated.
        """
        if isinstance(tool_request, dict):
            action = tool_request.get("action")
            params = tool_request.get("params") or {}
        else:
            action = tool_request.action
            params = tool_request.params or {}

        tool_spec = self.registry.get(action) if isinstance(action, str) else None
        if not tool_spec or not tool_spec.handler:
            logger.warning(f"Unhandled intent action: {action}")
            return None

        func = self._handlers.get(tool_spec.handler)
        if not func:
            logger.warning(f"No python implementation registered for handler key '{tool_spec.handler}' (action: {action})")
            return None

        validator = self.registry.validator_for(action)
        try:
            params = validator.model_validate(params).model_dump(exclude_none=True)
        except ValidationError as e:
            logger.warning(f"Intent '{action}' has invalid params {sorted(params)}: {e.error_count()} error(s)")
            return None

        ctx.pending_intent = ToolRequest(action=action, params=dict(params))
        try:
            target = func(ctx, **params)
            ctx.navigator.navigate(target.path, target.params)
        except Exception as e:
            logger.error(f"Navigation for '{action}' failed: {e}", exc_info=True)
            return None
        finally:
            ctx.pending_intent = None

        if ctx.session_logger:
            ctx.session_logger.info(f"NAVIGATE: {target.url} mode={target.mode} params={target.params}")
        return target
