"""
FastAPI backend: relationship contexts, interaction log, inbox import, deep links.
Run with uvicorn: uvicorn api.main:app --reload
"""

import logging
import threading
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime

from api.config import STORE_MEMORY, Settings, load_env_file, load_settings

load_env_file()

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from neo4j import GraphDatabase
from pydantic import BaseModel, Field

from relate.application import (
    CommitFailure,
    ContactDetail,
    ContactSummary,
    ContextUpdate,
    PermissionDenied,
    RelationshipService,
    RelationshipStore,
    UniquenessViolation,
    handle_deep_link,
    import_pending_interactions,
)
from relate.domain import ContactContext, Interaction, InteractionType, parse_tags
from relate.infrastructure import (
    InMemoryRelationshipStore,
    JsonFileContactDirectory,
    Neo4jRelationshipStore,
    PendingInteractionInbox,
    SharedDefaults,
    dial_link,
    email_link,
    ensure_contact_context_constraint,
    reminder_link,
)

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)

SETTINGS_HINT = "Enable contacts access in System Settings to use Relate CRM."


@dataclass
class Runtime:
    """Everything the endpoints need. Store mutations go through `lock`."""

    service: RelationshipService
    store: RelationshipStore
    inbox: PendingInteractionInbox
    url_scheme: str
    driver: object | None = None
    lock: threading.Lock = field(default_factory=threading.Lock)


def _get_driver(settings: Settings):
    return GraphDatabase.driver(
        settings.neo4j_uri, auth=(settings.neo4j_user, settings.neo4j_password)
    )


def build_runtime(settings: Settings) -> Runtime:
    driver = None
    if settings.store == STORE_MEMORY:
        store = InMemoryRelationshipStore()
    else:
        driver = _get_driver(settings)
        ensure_contact_context_constraint(driver)
        store = Neo4jRelationshipStore(driver)
    directory = JsonFileContactDirectory(settings.contacts_file)
    inbox = PendingInteractionInbox(SharedDefaults(settings.shared_dir, settings.app_group))
    return Runtime(
        service=RelationshipService(store, directory),
        store=store,
        inbox=inbox,
        url_scheme=settings.url_scheme,
        driver=driver,
    )


def get_runtime(app: FastAPI) -> Runtime:
    if getattr(app.state, "runtime", None) is None:
        app.state.runtime = build_runtime(load_settings())
    return app.state.runtime


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.runtime = None
    try:
        runtime = get_runtime(app)
        with runtime.lock:
            report = import_pending_interactions(runtime.inbox, runtime.store)
        logger.info("Launch import: %d imported, %d skipped", report.imported, report.skipped)
        yield
    finally:
        runtime = getattr(app.state, "runtime", None)
        if runtime is not None and runtime.driver is not None:
            runtime.driver.close()


app = FastAPI(title="Relate CRM API", lifespan=lifespan)


@app.exception_handler(PermissionDenied)
async def _permission_denied(request: Request, exc: PermissionDenied):
    return JSONResponse(
        status_code=403,
        content={"detail": str(exc), "status": exc.status.value, "hint": SETTINGS_HINT},
    )


@app.exception_handler(CommitFailure)
async def _commit_failure(request: Request, exc: CommitFailure):
    logger.error("Save failed: %s", exc)
    return JSONResponse(status_code=503, content={"detail": f"Save failed, please retry: {exc}"})


@app.exception_handler(UniquenessViolation)
async def _uniqueness_violation(request: Request, exc: UniquenessViolation):
    logger.error("Duplicate context creation: %s", exc)
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# --- response models ---


class InteractionItem(BaseModel):
    id: str
    date: datetime
    note: str
    type: str


class ContextItem(BaseModel):
    contact_identifier: str
    how_we_met: str
    notes: str
    tags: list[str]
    is_favorite: bool
    priority: int
    date_added: datetime
    last_modified: datetime


class ContactListItem(BaseModel):
    identifier: str
    display_name: str
    subtitle: str = ""
    is_favorite: bool = False
    tags: list[str] = []


class ContactDetailItem(BaseModel):
    identifier: str
    display_name: str
    organization: str
    phone_numbers: list[str]
    email_addresses: list[str]
    birthday: str | None = None
    note: str = ""
    has_photo: bool = False
    context: ContextItem | None = None
    interactions: list[InteractionItem] = []
    actions: dict[str, str] = {}


def _interaction_item(i: Interaction) -> InteractionItem:
    return InteractionItem(id=i.id, date=i.date, note=i.note, type=i.type.value)


def _context_item(ctx: ContactContext | None) -> ContextItem | None:
    if ctx is None:
        return None
    return ContextItem(
        contact_identifier=ctx.contact_identifier,
        how_we_met=ctx.how_we_met,
        notes=ctx.notes,
        tags=list(ctx.tags),
        is_favorite=ctx.is_favorite,
        priority=ctx.priority,
        date_added=ctx.date_added,
        last_modified=ctx.last_modified,
    )


def _list_item(s: ContactSummary) -> ContactListItem:
    return ContactListItem(
        identifier=s.contact.identifier,
        display_name=s.contact.display_name,
        subtitle=s.subtitle,
        is_favorite=s.is_favorite,
        # The list row only has room for two tags.
        tags=list(s.context.tags[:2]) if s.context else [],
    )


def _detail_item(d: ContactDetail) -> ContactDetailItem:
    c = d.contact
    actions = {"remind": reminder_link(c.display_name)}
    call = dial_link(c.primary_phone)
    if call:
        actions["call"] = call
    mail = email_link(c.primary_email)
    if mail:
        actions["email"] = mail
    return ContactDetailItem(
        identifier=c.identifier,
        display_name=c.display_name,
        organization=c.organization,
        phone_numbers=list(c.phone_numbers),
        email_addresses=list(c.email_addresses),
        birthday=c.birthday.isoformat() if c.birthday else None,
        note=c.note,
        has_photo=c.has_photo,
        context=_context_item(d.context),
        interactions=[_interaction_item(i) for i in d.interactions],
        actions=actions,
    )


# --- REST: health ---


@app.get("/health")
def health():
    return {"status": "ok"}


# --- REST: contacts ---


@app.get("/contacts")
def list_contacts(request: Request, q: str | None = None, favorites: bool = False):
    runtime = get_runtime(request.app)
    with runtime.lock:
        summaries = runtime.service.list_contacts(q, favorites_only=favorites)
    return [_list_item(s) for s in summaries]


@app.post("/contacts/access")
def request_access(request: Request):
    runtime = get_runtime(request.app)
    granted = runtime.service.request_access()
    return {"granted": granted, "status": runtime.service.authorization_status().value}


@app.get("/contacts/{contact_id}")
def get_contact(contact_id: str, request: Request):
    runtime = get_runtime(request.app)
    with runtime.lock:
        detail = runtime.service.contact_detail(contact_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Contact not found")
    return _detail_item(detail)


class EditContextBody(BaseModel):
    how_we_met: str | None = None
    notes: str | None = None
    tags: str | None = None
    priority: int | None = Field(default=None, ge=1, le=5)
    is_favorite: bool | None = None


@app.put("/contacts/{contact_id}/context")
def edit_context(contact_id: str, body: EditContextBody, request: Request):
    runtime = get_runtime(request.app)
    update = ContextUpdate(
        how_we_met=body.how_we_met,
        notes=body.notes,
        tags=parse_tags(body.tags) if body.tags is not None else None,
        priority=body.priority,
        is_favorite=body.is_favorite,
    )
    with runtime.lock:
        context = runtime.service.edit_context(contact_id, update)
    return _context_item(context)


@app.post("/contacts/{contact_id}/favorite")
def toggle_favorite(contact_id: str, request: Request):
    runtime = get_runtime(request.app)
    with runtime.lock:
        context = runtime.service.toggle_favorite(contact_id)
    return _context_item(context)


class LogInteractionBody(BaseModel):
    note: str = Field(min_length=1)
    type: InteractionType = InteractionType.NOTE
    date: datetime | None = None


@app.post("/contacts/{contact_id}/interactions")
def log_interaction(contact_id: str, body: LogInteractionBody, request: Request):
    runtime = get_runtime(request.app)
    when = body.date or datetime.now().astimezone()
    if when.tzinfo is None:
        when = when.astimezone()
    with runtime.lock:
        interaction = runtime.service.log_interaction(contact_id, when, body.note, body.type)
    return JSONResponse(
        content=_interaction_item(interaction).model_dump(mode="json"),
        status_code=201,
    )


@app.get("/contacts/{contact_id}/interactions")
def interaction_log(contact_id: str, request: Request):
    runtime = get_runtime(request.app)
    with runtime.lock:
        interactions = runtime.service.interaction_log(contact_id)
    return [_interaction_item(i) for i in interactions]


# --- inbox and deep links ---


@app.post("/inbox/import")
def import_inbox(request: Request):
    runtime = get_runtime(request.app)
    with runtime.lock:
        report = import_pending_interactions(runtime.inbox, runtime.store)
    return {
        "imported": report.imported,
        "skipped": report.skipped,
        "contact_ids": list(report.contact_ids),
    }


class OpenUrlBody(BaseModel):
    url: str


@app.post("/open")
def open_url(body: OpenUrlBody, request: Request):
    """Deep-link hand-off. Malformed links are ignored: navigate_to is null."""
    runtime = get_runtime(request.app)
    with runtime.lock:
        contact_id = handle_deep_link(
            body.url, runtime.inbox, runtime.store, scheme=runtime.url_scheme
        )
    return {"navigate_to": contact_id}
