from app.services.interactions.handlers import HandlerContext, HandlerResult, command, component, dispatch
from app.services.interactions.sequencer import DeleteMessage, EditMessage, FollowUp, run_follow_ups

__all__ = [
    "DeleteMessage",
    "EditMessage",
    "FollowUp",
    "HandlerContext",
    "HandlerResult",
    "command",
    "component",
    "dispatch",
    "run_follow_ups",
]
