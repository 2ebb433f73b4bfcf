"""
FastAPI application for the compliance bot server.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import Body, Depends, FastAPI, Header, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..assistant import ComplianceAssistant
from ..attestation import (
    AttestationRecorder,
    HttpAttestationRecorder,
    UnconfiguredAttestationRecorder,
)
from ..commands import CommandRouter
from ..dispatcher import CommandDispatcher
from ..exceptions import ComplianceBotError, ExternalServiceError, StoreError, ValidationError
from ..llm import Answerer, GeminiAnswerer
from ..messages import Links
from ..reports import ReportAggregator
from ..roles import RoleResolver
from ..workflow import ComplianceWorkflowEngine
from .config import ServerConfig
from .database import AIContextCache, DocumentStore, get_database

logger = logging.getLogger("compliancebot.server")


class DocumentCreate(BaseModel):
    document_hash: Optional[str] = None
    document_name: Optional[str] = None
    ipfs_cid: Optional[str] = None
    submitter: Optional[str] = None
    created_at: Optional[str] = None


class RecordRequest(BaseModel):
    documentHash: str
    attestor: str
    complianceStatus: str
    rejectionReason: Optional[str] = None


class AttestationRetryRequest(BaseModel):
    attestor: str


class AIQueryRequest(BaseModel):
    prompt: Optional[str] = None
    senderAddress: Optional[str] = None
    documentHash: Optional[str] = None


class CacheDocumentRequest(BaseModel):
    documentData: Optional[Dict[str, Any]] = None


class MessageRequest(BaseModel):
    sender: str
    text: str = ""


class Services:
    """Everything the routes need, built once per application."""

    def __init__(
        self,
        config: ServerConfig,
        recorder: Optional[AttestationRecorder] = None,
        answerer: Optional[Answerer] = None,
    ):
        db = get_database(config.database_url)
        self.store = DocumentStore(db)
        self.cache = AIContextCache(db)
        self.roles = RoleResolver(
            officer_address=config.compliance_officer_address,
            manager_address=config.manager_address,
        )

        if recorder is None:
            if config.attestation_url:
                recorder = HttpAttestationRecorder(
                    base_url=config.attestation_url,
                    api_key=config.attestation_api_key,
                    schema_id=config.attestation_schema_id,
                    indexing_value=config.attestation_signer or "",
                    timeout=config.external_timeout,
                )
            else:
                logger.warning("ATTESTATION_URL not set; decisions will not be attested")
                recorder = UnconfiguredAttestationRecorder()
        self.recorder = recorder

        if answerer is None and config.gemini_api_key:
            answerer = GeminiAnswerer(
                api_key=config.gemini_api_key,
                model_name=config.gemini_model,
                timeout=config.external_timeout,
            )
        self.assistant = (
            ComplianceAssistant(answerer, self.store, self.roles, cache=self.cache)
            if answerer is not None
            else None
        )

        self.engine = ComplianceWorkflowEngine(
            self.store, self.roles, recorder=self.recorder, cache=self.cache
        )
        self.aggregator = ReportAggregator()
        self.dispatcher = CommandDispatcher(
            CommandRouter(self.roles),
            self.engine,
            aggregator=self.aggregator,
            assistant=self.assistant,
            links=Links(
                ipfs_gateway=config.ipfs_gateway_url,
                attestation_explorer=config.attestation_explorer_url,
                tx_explorer=config.tx_explorer_url,
            ),
        )


def create_app(
    config: Optional[ServerConfig] = None,
    recorder: Optional[AttestationRecorder] = None,
    answerer: Optional[Answerer] = None,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    if config is None:
        config = ServerConfig.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.config = config
        app.state.services = Services(config, recorder=recorder, answerer=answerer)
        logger.info("Compliance Bot API ready")
        yield
        if isinstance(app.state.services.recorder, HttpAttestationRecorder):
            app.state.services.recorder.close()

    app = FastAPI(
        title="Compliance Bot API",
        description="Document compliance workflow: submission, review, attestation, reporting",
        version="0.1.0",
        debug=config.debug,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ComplianceBotError)
    async def compliance_error_handler(request: Request, exc: ComplianceBotError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "error": exc.message},
        )

    def get_services() -> Services:
        return app.state.services

    def authenticate_token(authorization: str = Header(None)) -> str:
        parts = (authorization or "").split(" ")
        token = parts[1] if len(parts) > 1 and parts[1] else None
        if token is None:
            raise HTTPException(status_code=401, detail="Token required")
        if token not in app.state.config.api_keys:
            raise HTTPException(status_code=403, detail="Invalid token")
        return token

    @app.get("/")
    async def index(token: str = Depends(authenticate_token)):
        return {"message": "Compliance Bot API is working!"}

    @app.get("/health")
    async def health(
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        try:
            services.store.ping()
        except StoreError as e:
            return JSONResponse(
                status_code=503,
                content={
                    "status": "unhealthy",
                    "store": "disconnected",
                    "redis": "disconnected",
                    "error": e.message,
                },
            )
        # "redis" is the legacy name of the "store" key.
        return {
            "status": "healthy",
            "store": "connected",
            "redis": "connected",
            "ai": "available" if services.assistant else "unconfigured",
        }

    # ==================== Documents ====================

    @app.get("/documents/user/{address}")
    async def list_user_documents(
        address: str,
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        documents = services.engine.list_by_submitter(address)
        return {"success": True, "documents": [d.to_dict() for d in documents]}

    @app.get("/documents/{document_hash}")
    async def get_document(
        document_hash: str,
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        document = services.engine.get(document_hash)
        return {"success": True, "document": document.to_dict()}

    @app.get("/documents")
    async def list_documents(
        status: Optional[str] = None,
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        documents = services.engine.list_documents(status)
        return {"success": True, "documents": [d.to_dict() for d in documents]}

    @app.post("/documents", status_code=201)
    async def create_document(
        request: DocumentCreate,
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        document = services.engine.submit(request.model_dump(exclude_none=True))
        return {"success": True, "documentHash": document.document_hash}

    @app.put("/documents/{document_hash}")
    async def update_document(
        document_hash: str,
        fields: Dict[str, Any] = Body(...),
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        document = services.engine.update(document_hash, fields)
        return {"success": True, "document": document.to_dict()}

    # ==================== Review & attestation ====================

    def _outcome_response(outcome) -> Any:
        document = outcome.document.to_dict()
        if outcome.attestation_error is not None:
            return JSONResponse(
                status_code=502,
                content={
                    "success": False,
                    "error": getattr(outcome.attestation_error, "message", str(outcome.attestation_error)),
                    "document": document,
                },
            )
        return {
            "success": True,
            "response": outcome.document.attestation.to_dict(),
            "document": document,
        }

    @app.post("/record")
    def record(
        request: RecordRequest,
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        outcome = services.engine.review(
            request.documentHash,
            request.attestor,
            request.complianceStatus,
            request.rejectionReason,
        )
        return _outcome_response(outcome)

    @app.post("/documents/{document_hash}/attestation")
    def retry_attestation(
        document_hash: str,
        request: AttestationRetryRequest,
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        outcome = services.engine.retry_attestation(document_hash, request.attestor)
        return _outcome_response(outcome)

    # ==================== AI ====================

    @app.post("/ai/query")
    def ai_query(
        request: AIQueryRequest,
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        if not request.prompt or not request.senderAddress:
            raise ValidationError("Prompt and senderAddress are required")
        if services.assistant is None:
            raise ExternalServiceError("AI assistant is not configured", service="ai")
        response = services.assistant.ask(
            request.prompt, request.senderAddress, request.documentHash
        )
        return {"success": True, "response": response}

    @app.post("/ai/cache-document")
    async def cache_document(
        request: CacheDocumentRequest,
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        data = request.documentData or {}
        if not data.get("document_hash"):
            raise ValidationError("Document data with hash is required", field="document_hash")
        services.cache.store_snapshot(data["document_hash"], data)
        return {"success": True}

    # ==================== Administration & reporting ====================

    @app.post("/flush")
    async def flush(
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        services.engine.flush()
        return {"success": True, "message": "Document store flushed successfully."}

    @app.get("/reports")
    async def reports(
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        documents = services.engine.list_documents()
        report = services.aggregator.aggregate(documents)
        return {
            "success": True,
            "documents": [d.to_dict() for d in documents],
            "report": report.to_dict(),
        }

    # ==================== Messaging ====================

    @app.post("/messages")
    def handle_message(
        request: MessageRequest,
        services: Services = Depends(get_services),
        token: str = Depends(authenticate_token),
    ):
        replies = services.dispatcher.handle(request.text, request.sender)
        return {"success": True, "replies": [r.to_dict() for r in replies]}

    return app


class ComplianceServer:
    """High-level server class for running the compliance bot API."""

    def __init__(
        self,
        host: str = "0.0.0.0",
        port: int = 3000,
        database_url: Optional[str] = None,
        api_keys: Optional[set] = None,
        **kwargs,
    ):
        self.config = ServerConfig(
            host=host,
            port=port,
            database_url=database_url,
            api_keys=api_keys or ServerConfig().api_keys,
            **kwargs,
        )
        self.app = create_app(self.config)

    def run(self):
        """Run the server (blocking)."""
        import uvicorn

        uvicorn.run(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level,
        )

    async def run_async(self):
        """Run the server asynchronously."""
        import uvicorn

        config = uvicorn.Config(
            self.app,
            host=self.config.host,
            port=self.config.port,
            log_level=self.config.log_level,
        )
        server = uvicorn.Server(config)
        await server.serve()
