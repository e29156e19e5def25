from typing import Any, Dict, Iterable

from registration.messaging import confirmation_message, whatsapp_link
from registration.state import (
    ATTACHMENT_FIELDS,
    DERIVED_FIELDS,
    FIELD_ORDER,
    Attachment,
    WizardState,
)

# checkpoint channels holding personal data
ENCRYPTED_CHANNELS = ("record", "value", "used_niks", "last_submission")


class WizardInputError(ValueError):
    """An edit or upload that the form itself would never produce."""


class WizardStepError(RuntimeError):
    """An action was requested in a step that does not offer it."""


class WizardSession:
    """One browser session driving the compiled registration graph.

    Every call is a single ``graph.invoke`` on the session's checkpoint
    thread; the checkpointer carries the form between calls.
    """

    def __init__(
        self,
        graph: Any,
        thread_id: str,
        whatsapp_number: str = "",
        encrypt_keys: Iterable[str] = ENCRYPTED_CHANNELS,
    ):
        self.graph = graph
        self.thread_id = thread_id
        self.whatsapp_number = whatsapp_number
        self.config = {
            "configurable": {
                "thread_id": thread_id,
                "encrypt_keys": list(encrypt_keys),
            }
        }

    @property
    def state(self) -> WizardState:
        values = self.graph.get_state(self.config).values
        if isinstance(values, WizardState):
            return values
        return WizardState(**(values or {}))

    def _invoke(self, update: Dict[str, Any]) -> WizardState:
        self.graph.invoke(update, self.config)
        return self.state

    def edit(self, field: str, value: str) -> WizardState:
        if field not in FIELD_ORDER:
            raise WizardInputError(f"Unknown field: {field}")
        if field in DERIVED_FIELDS:
            raise WizardInputError(f"Field {field} is computed and cannot be edited")
        return self._invoke({"action": "edit", "field": field, "value": value or ""})

    def attach(self, field: str, filename: str, content_type: str, size: int = 0) -> WizardState:
        if field not in ATTACHMENT_FIELDS:
            raise WizardInputError(f"Unknown attachment: {field}")
        if not (content_type or "").startswith("image/"):
            raise WizardInputError(f"Attachment {field} must be an image")
        meta = Attachment(filename=filename, content_type=content_type, size=size)
        return self._invoke({"action": "attach", "field": field, "value": meta.model_dump()})

    def next(self) -> WizardState:
        return self._invoke({"action": "next"})

    def back(self) -> WizardState:
        return self._invoke({"action": "back"})

    def submit(self) -> WizardState:
        return self._invoke({"action": "submit"})

    def reset(self) -> WizardState:
        return self._invoke({"action": "reset"})

    def whatsapp_link(self) -> str:
        state = self.state
        if state.step != "confirmation":
            raise WizardStepError("WhatsApp confirmation is only available after submission")
        return whatsapp_link(self.whatsapp_number, confirmation_message(state.last_submission))
