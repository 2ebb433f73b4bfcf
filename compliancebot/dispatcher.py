"""
compliancebot - Executes routed chat intents and produces outbound messages.
"""

import logging
from typing import Callable, Optional

from . import messages
from .assistant import ComplianceAssistant
from .commands import (
    AskAI,
    CommandRouter,
    Greet,
    Intent,
    ListPending,
    QueryStatus,
    ReviewDocument,
    SubmitDocument,
    Unrecognized,
    ViewReports,
)
from .exceptions import (
    AlreadyProcessedError,
    AuthorizationError,
    ComplianceBotError,
    ExternalServiceError,
    NotFoundError,
    StoreError,
    ValidationError,
)
from .models import ComplianceStatus, OutboundMessage, Role, canonical
from .reports import ReportAggregator
from .workflow import ComplianceWorkflowEngine

logger = logging.getLogger("compliancebot.dispatcher")


class CommandDispatcher:
    """Turns one inbound chat message into replies and notifications.

    Every error from the taxonomy is converted into a user-facing message;
    nothing raised by the workflow escapes ``handle``.
    """

    def __init__(
        self,
        router: CommandRouter,
        engine: ComplianceWorkflowEngine,
        aggregator: Optional[ReportAggregator] = None,
        assistant: Optional[ComplianceAssistant] = None,
        links: Optional[messages.Links] = None,
    ):
        self.router = router
        self.engine = engine
        self.aggregator = aggregator or ReportAggregator()
        self.assistant = assistant
        self.links = links or messages.Links()
        self._handlers: dict[type, Callable[..., list[OutboundMessage]]] = {
            Greet: self._greet,
            AskAI: self._ask,
            SubmitDocument: self._submit,
            ReviewDocument: self._review,
            ListPending: self._list_pending,
            ViewReports: self._view_reports,
            QueryStatus: self._status,
            Unrecognized: self._unrecognized,
        }

    @property
    def officer_address(self) -> str:
        return self.router.roles.officer_address

    @property
    def manager_address(self) -> str:
        return self.router.roles.manager_address

    def handle(self, text: Optional[str], sender: str) -> list[OutboundMessage]:
        sender = canonical(sender)
        role = self.router.roles.resolve(sender)
        intent = self.router.parse(text)

        try:
            self.router.authorize(intent, role)
        except AuthorizationError as e:
            logger.info("Rejected %s from %s (%s)", type(intent).__name__, sender, role.value)
            return [OutboundMessage(sender, messages.unauthorized(e.message))]

        handler = self._handlers[type(intent)]
        try:
            return handler(intent, sender, role)
        except StoreError as e:
            logger.error("Store unavailable while handling %s: %s", type(intent).__name__, e)
            return [OutboundMessage(sender, messages.SERVICE_UNAVAILABLE)]
        except ComplianceBotError as e:
            logger.warning("Error handling %s from %s: %s", type(intent).__name__, sender, e)
            return [OutboundMessage(sender, messages.processing_error(e.message))]

    # ==================== Handlers ====================

    def _greet(self, intent: Intent, sender: str, role: Role) -> list[OutboundMessage]:
        return [OutboundMessage(sender, messages.GREETINGS[role])]

    def _unrecognized(self, intent: Intent, sender: str, role: Role) -> list[OutboundMessage]:
        return [OutboundMessage(sender, messages.HELP[role])]

    def _ask(self, intent: AskAI, sender: str, role: Role) -> list[OutboundMessage]:
        if not intent.question:
            return [OutboundMessage(sender, messages.ASK_USAGE)]
        if self.assistant is None:
            return [OutboundMessage(sender, messages.AI_UNAVAILABLE)]
        try:
            answer = self.assistant.ask(intent.question, sender, intent.document_hash)
        except ExternalServiceError as e:
            logger.error("AI query failed: %s", e)
            return [OutboundMessage(sender, messages.AI_UNAVAILABLE)]
        return [OutboundMessage(sender, answer)]

    def _submit(self, intent: SubmitDocument, sender: str, role: Role) -> list[OutboundMessage]:
        fields = dict(intent.fields)
        fields["submitter"] = sender
        try:
            document = self.engine.submit(fields)
        except ValidationError:
            return [OutboundMessage(sender, messages.SUBMISSION_ERROR)]
        except AlreadyProcessedError as e:
            return [OutboundMessage(sender, messages.already_processed(e.message))]

        replies = []
        if self.officer_address:
            replies.append(
                OutboundMessage(self.officer_address, messages.new_submission(document, self.links))
            )
        replies.append(OutboundMessage(sender, messages.submission_received(document)))
        return replies

    def _review(self, intent: ReviewDocument, sender: str, role: Role) -> list[OutboundMessage]:
        if intent.command not in ("approve", "reject") or not intent.document_hash:
            return [OutboundMessage(sender, messages.REVIEW_USAGE)]

        decision = (
            ComplianceStatus.APPROVED if intent.command == "approve" else ComplianceStatus.REJECTED
        )
        try:
            outcome = self.engine.review(intent.document_hash, sender, decision, intent.reason)
        except NotFoundError:
            return [OutboundMessage(sender, messages.not_found(intent.document_hash))]
        except AlreadyProcessedError as e:
            return [OutboundMessage(sender, messages.already_processed(e.message))]
        except ValidationError as e:
            if e.field == "rejection_reason":
                return [OutboundMessage(sender, messages.MISSING_REASON)]
            return [OutboundMessage(sender, messages.REVIEW_USAGE)]

        document = outcome.document
        replies = []
        if document.submitter:
            replies.append(
                OutboundMessage(document.submitter, messages.decision_notice(document, self.links))
            )
        if self.manager_address:
            replies.append(
                OutboundMessage(self.manager_address, messages.decision_summary(document, self.links))
            )
        if outcome.attestation_error is not None:
            replies.append(
                OutboundMessage(
                    sender, messages.attestation_failed(document, outcome.attestation_error)
                )
            )
        else:
            replies.append(
                OutboundMessage(sender, messages.action_completed(document, self.links))
            )
        return replies

    def _list_pending(self, intent: ListPending, sender: str, role: Role) -> list[OutboundMessage]:
        pending = self.engine.list_documents(ComplianceStatus.PENDING_APPROVAL)
        return [OutboundMessage(sender, messages.pending_list(pending, self.links))]

    def _view_reports(self, intent: ViewReports, sender: str, role: Role) -> list[OutboundMessage]:
        documents = self.engine.list_documents()
        report = self.aggregator.aggregate(documents)
        groups = self.aggregator.partition(documents)
        return [OutboundMessage(sender, messages.compliance_report(report, groups, self.links))]

    def _status(self, intent: QueryStatus, sender: str, role: Role) -> list[OutboundMessage]:
        try:
            document = self.engine.get(intent.document_hash)
        except NotFoundError:
            return [OutboundMessage(sender, messages.not_found(intent.document_hash))]
        return [OutboundMessage(sender, messages.document_status(document, self.links))]
