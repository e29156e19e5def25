import logging
from datetime import date
from typing import Any, Callable, Dict, Optional, Protocol

from langgraph.graph import END, START, StateGraph

from registration.client import SubmissionError
from registration.state import WizardState
from registration.validator import RegistrationValidator, compute_age, parse_birth_date

logger = logging.getLogger(__name__)

SUMMARY_FIELDS = ("opsId", "nama", "nik", "lokasi")


class Submitter(Protocol):
    def submit(self, payload: Dict[str, Any]) -> Dict[str, Any]: ...


def mask_nik(nik: str) -> str:
    if len(nik) <= 8:
        return "****"
    return f"{nik[:4]}{'*' * (len(nik) - 8)}{nik[-4:]}"


class RegistrationGraphFactory:
    def __init__(
        self,
        validator: RegistrationValidator,
        submitter: Submitter,
        today: Callable[[], date] = date.today,
    ):
        self.validator = validator
        self.submitter = submitter
        self.today = today

    @staticmethod
    def route(state: WizardState) -> str:
        """
        Map the incoming action onto a node. Actions that make no sense in the
        current step are dropped.
        """
        action, step = state.action, state.step
        if step == "form" and action in ("edit", "attach", "next"):
            return action
        if step == "review" and action == "back":
            return "back"
        if step == "review" and action == "submit" and not state.submitting:
            return "submit"
        if action == "reset":
            return "reset"
        logger.debug("ignoring action %r in step %r", action, step)
        return "ignore"

    def edit_node(self, state: WizardState) -> Dict[str, Any]:
        value = (state.value or "").strip() if isinstance(state.value, str) else ""
        record = dict(state.record)
        record[state.field] = value

        if state.field == "tanggalLahir":
            birth = parse_birth_date(value) if value else None
            record["umur"] = str(compute_age(birth, self.today())) if birth else ""

        errors = {k: v for k, v in state.errors.items() if k != state.field}
        return {"record": record, "errors": errors}

    @staticmethod
    def attach_node(state: WizardState) -> Dict[str, Any]:
        attachments = dict(state.attachments)
        attachments[state.field] = dict(state.value or {})
        errors = {k: v for k, v in state.errors.items() if k != state.field}
        return {"attachments": attachments, "errors": errors}

    @staticmethod
    def review_node(state: WizardState) -> Dict[str, Any]:
        return {"step": "review", "submit_error": None}

    @staticmethod
    def back_node(state: WizardState) -> Dict[str, Any]:
        return {"step": "form"}

    @staticmethod
    def begin_submit_node(state: WizardState) -> Dict[str, Any]:
        """
        Raise the in-flight flag. It is checkpointed before the request goes
        out, so a second submit on the same thread is dropped by route().
        """
        return {"submitting": True, "submit_error": None}

    def send_node(self, state: WizardState) -> Dict[str, Any]:
        registration = state.registration()
        try:
            result = self.submitter.submit(registration.to_payload())
        except SubmissionError as exc:
            return {"submitting": False, "submit_error": str(exc)}
        except Exception as exc:
            logger.exception("submission failed unexpectedly")
            return {"submitting": False, "submit_error": str(exc) or type(exc).__name__}

        logger.info("registration submitted for NIK %s", mask_nik(registration.nik))
        summary = {name: state.record.get(name, "") for name in SUMMARY_FIELDS}
        summary["updatedRange"] = result.get("updatedRange") or ""
        return {
            "step": "confirmation",
            "submitting": False,
            "submit_error": None,
            "used_niks": state.used_niks + [registration.nik],
            "last_submission": summary,
            "record": {},
            "attachments": {},
            "errors": {},
        }

    @staticmethod
    def reset_node(state: WizardState) -> Dict[str, Any]:
        return {
            "step": "form",
            "record": {},
            "attachments": {},
            "errors": {},
            "submitting": False,
            "submit_error": None,
            "last_submission": {},
        }

    def build(self) -> StateGraph:
        g = StateGraph(WizardState)

        g.add_node("edit_field", self.edit_node)
        g.add_node("attach_file", self.attach_node)
        g.add_node("validate", self.validator.validate_state)
        g.add_node("show_review", self.review_node)
        g.add_node("go_back", self.back_node)
        g.add_node("begin_submit", self.begin_submit_node)
        g.add_node("send", self.send_node)
        g.add_node("clear", self.reset_node)

        g.add_conditional_edges(
            START,
            self.route,
            {
                "edit": "edit_field",
                "attach": "attach_file",
                "next": "validate",
                "back": "go_back",
                "submit": "begin_submit",
                "reset": "clear",
                "ignore": END,
            },
        )
        g.add_conditional_edges(
            "validate",
            self.validator.should_review,
            {"end": END, "review": "show_review"},
        )
        g.add_edge("begin_submit", "send")

        for node in ("edit_field", "attach_file", "show_review", "go_back", "send", "clear"):
            g.add_edge(node, END)

        return g

    def compile(self, checkpointer: Optional[Any] = None):
        return self.build().compile(checkpointer=checkpointer)
