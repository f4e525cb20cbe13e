from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, field_validator
from typing import Any, Callable, Dict, Optional
from datetime import datetime
from loguru import logger

from stylegenie.appointments.models import Appointment, AppointmentStatus
from stylegenie.appointments.tracker import AppointmentTracker, status_label, template_defaults
from stylegenie.billing.checkout import CheckoutClient
from stylegenie.config.business_rules import MAX_TIMER_MINUTES, REBOOK_WEEKS, DEFAULT_REBOOK_WEEKS, SERVICE_TEMPLATES
from stylegenie.config.settings import Settings
from stylegenie.health.health_check import HealthChecker
from stylegenie.memory.models import ConsultationForm
from stylegenie.memory.resolver import ClientMemoryResolver
from stylegenie.memory.session import ConsultationSession
from stylegenie.storage.appointment_repository import AppointmentRepository
from stylegenie.storage.local_storage import LocalStorage
from stylegenie.storage.session_cache import SessionCache
from stylegenie.store.gateway import StoreGateway
from stylegenie.store.memory_gateway import InMemoryStoreGateway
from stylegenie.store.supabase_gateway import SupabaseGateway
from stylegenie.utils.date_time_parser import DateTimeParser
from stylegenie.utils.error_handler import ErrorHandler
from stylegenie.utils.errors import StyleGenieError
from stylegenie.utils.helpers import safe_json_dumps

VERSION = "1.0.0"


# Request models
class AppointmentRequest(BaseModel):
    name: str
    date: str
    time: str
    formula: str = ""
    notes: str = ""
    service_key: Optional[str] = None


class StatusRequest(BaseModel):
    status: AppointmentStatus


class TimerRequest(BaseModel):
    minutes: float

    @field_validator('minutes')
    @classmethod
    def validate_minutes(cls, v):
        if not 0 < v <= MAX_TIMER_MINUTES:
            raise ValueError(f"Timer length must be between 0 and {MAX_TIMER_MINUTES} minutes")
        return v


class TranscriptRequest(BaseModel):
    transcript: str


class FormUpdateRequest(BaseModel):
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    client_email: Optional[str] = None
    service_type: Optional[str] = None
    voice_notes: Optional[str] = None
    cut_details: Optional[str] = None
    formulas: Optional[str] = None
    aftercare: Optional[str] = None
    hair_goals: Optional[str] = None
    extra_notes: Optional[str] = None


def build_gateway(settings: Settings) -> StoreGateway:
    if settings.store_configured:
        return SupabaseGateway(settings)
    logger.warning("SUPABASE_URL / SUPABASE_ANON_KEY not set; using the in-memory store")
    return InMemoryStoreGateway()


def appointment_view(tracker: AppointmentTracker, appointment: Appointment) -> Dict[str, Any]:
    view = appointment.model_dump(mode="json")
    timer = tracker.timer_info(appointment)
    view.update({
        "status_label": status_label(appointment.status),
        "display_date": DateTimeParser.format_date(appointment.date),
        "display_time": DateTimeParser.format_time(appointment.time),
        "timer": timer.model_dump() if timer else None,
    })
    return view


def session_view(session: ConsultationSession) -> Dict[str, Any]:
    return {
        "form": session.form.model_dump(),
        "last_visit": session.last_visit.model_dump(mode="json") if session.last_visit else None,
        "artifacts": session.artifacts.model_dump() if session.artifacts else None,
        "status_msg": session.status_msg,
        "error_msg": session.error_msg,
        "loading_memory": session.loading_memory,
        "saving": session.saving,
        "voice_enabled": session.voice_enabled,
    }


def create_app(settings: Optional[Settings] = None,
               gateway: Optional[StoreGateway] = None,
               storage: Optional[LocalStorage] = None,
               checkout: Optional[CheckoutClient] = None,
               clock: Callable[[], datetime] = datetime.now) -> FastAPI:
    """Build the application; every component receives the same settings object."""
    settings = settings or Settings()
    gateway = gateway or build_gateway(settings)
    storage = storage or LocalStorage.from_settings(settings)
    checkout = checkout or CheckoutClient(settings)

    resolver = ClientMemoryResolver(gateway, clock=clock)
    consultation = ConsultationSession(resolver, settings)
    tracker = AppointmentTracker(AppointmentRepository(storage), settings, clock=clock)
    session_cache = SessionCache(storage)
    health_checker = HealthChecker(settings, gateway, checkout)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Salon consultation memory and appointment tracker",
        version=VERSION,
        docs_url="/api/docs",
        openapi_url="/api/openapi.json",
    )
    app.state.settings = settings
    app.state.resolver = resolver
    app.state.consultation = consultation
    app.state.tracker = tracker
    app.state.session_cache = session_cache

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StyleGenieError)
    async def handle_workflow_error(request: Request, exc: StyleGenieError):
        payload = ErrorHandler.handle_error(exc, {"path": request.url.path, "method": request.method})
        return JSONResponse(status_code=exc.status_code, content=payload)

    @app.on_event("shutdown")
    async def shutdown_event():
        await gateway.close()
        await checkout.close()

    async def current_owner() -> str:
        owner = await gateway.current_user_email()
        if session_cache.cached_email() != owner:
            session_cache.remember_email(owner)
        return owner

    @app.get("/")
    async def root():
        return {"service": settings.APP_NAME, "version": VERSION, "docs": "/api/docs"}

    @app.get("/api/health")
    async def health_check():
        return await health_checker.check_health()

    @app.get("/api/session")
    async def session_info():
        return {
            "email": session_cache.cached_email(),
            "is_pro": session_cache.is_pro(),
        }

    @app.post("/api/session/logout")
    async def logout():
        session_cache.clear()
        consultation.reset(forget_owner=True)
        logger.info("👋 Session cleared")
        return {"email": None, "is_pro": False}

    # Client memory

    @app.get("/api/clients/lookup")
    async def lookup_client(name: str):
        owner = await current_owner()
        outcome = await resolver.lookup(owner, name)
        return {
            "found": outcome.client is not None,
            "query": outcome.query,
            "client": outcome.client.model_dump(mode="json") if outcome.client else None,
            "last_visit": outcome.last_visit.model_dump(mode="json") if outcome.last_visit else None,
        }

    @app.get("/api/consultations/form")
    async def get_form(wait: bool = False):
        """Current form state; `wait` holds the reply until a scheduled lookup settles"""
        if wait:
            await consultation.wait_for_prefill()
        return session_view(consultation)

    @app.patch("/api/consultations/form")
    async def edit_form(request: FormUpdateRequest):
        consultation.edit_form(request.model_dump(exclude_none=True))
        return session_view(consultation)

    @app.post("/api/consultations/form/save")
    async def save_form():
        await consultation.save_and_generate()
        return session_view(consultation)

    @app.delete("/api/consultations/form")
    async def reset_form():
        consultation.reset()
        return session_view(consultation)

    @app.post("/api/consultations/preview")
    async def preview_consultation(form: ConsultationForm):
        """Render both artifacts without writing anything"""
        owner = await current_owner()
        outcome = await resolver.lookup(owner, form.client_name)
        return resolver.build_artifacts(form, outcome.last_visit).model_dump()

    @app.post("/api/consultations")
    async def save_consultation(form: ConsultationForm):
        owner = await current_owner()
        outcome = await resolver.save_and_generate(owner, form)
        return {
            "message": "Saved. Client memory updated.",
            **outcome.model_dump(mode="json"),
        }

    # Appointments

    @app.get("/api/appointments")
    async def list_appointments():
        return {
            "today": [appointment_view(tracker, a) for a in tracker.todays_appointments()],
            "upcoming": [appointment_view(tracker, a) for a in tracker.upcoming_appointments()],
            "color_history": [
                {"id": a.id, "name": a.name, "formula": a.formula, "date": a.date}
                for a in tracker.color_history()
            ],
            "timers": [t.model_dump() for t in tracker.active_timers()],
            "voice_enabled": tracker.voice_enabled,
            "timestamp": clock().isoformat(),
        }

    @app.get("/api/appointments/templates")
    async def list_templates():
        return [
            {
                "key": key,
                "label": template["label"],
                "rebook_weeks": REBOOK_WEEKS.get(key, DEFAULT_REBOOK_WEEKS),
                **template_defaults(key),
            }
            for key, template in SERVICE_TEMPLATES.items()
        ]

    @app.get("/api/appointments/timers/stream")
    async def stream_timers():
        async def events():
            async for timers in tracker.timer_ticks():
                yield f"data: {safe_json_dumps({'timers': [t.model_dump() for t in timers]})}\n\n"

        return StreamingResponse(events(), media_type="text/event-stream")

    @app.post("/api/appointments")
    async def create_appointment(request: AppointmentRequest):
        appointment = tracker.create_appointment(**request.model_dump())
        return appointment_view(tracker, appointment)

    @app.get("/api/appointments/{appointment_id}")
    async def get_appointment(appointment_id: str):
        return appointment_view(tracker, tracker.get_appointment(appointment_id))

    @app.post("/api/appointments/{appointment_id}/status")
    async def update_status(appointment_id: str, request: StatusRequest):
        return appointment_view(tracker, tracker.update_status(appointment_id, request.status))

    @app.post("/api/appointments/{appointment_id}/timer")
    async def start_timer(appointment_id: str, request: TimerRequest):
        return appointment_view(tracker, tracker.start_timer(appointment_id, request.minutes))

    @app.delete("/api/appointments/{appointment_id}/timer")
    async def clear_timer(appointment_id: str):
        return appointment_view(tracker, tracker.clear_timer(appointment_id))

    @app.post("/api/appointments/{appointment_id}/notes")
    async def append_notes(appointment_id: str, request: TranscriptRequest):
        """Finalized dictation result captured by the client device"""
        return appointment_view(tracker, tracker.append_transcript(appointment_id, request.transcript))

    @app.post("/api/appointments/{appointment_id}/summary")
    async def summarize(appointment_id: str):
        return appointment_view(tracker, await tracker.summarize(appointment_id))

    # Checkout

    @app.post("/api/checkout")
    async def start_checkout():
        if session_cache.is_pro():
            return {"url": None, "is_pro": True}
        return {"url": await checkout.create_checkout_session(), "is_pro": False}

    @app.post("/api/checkout/success")
    async def checkout_success():
        CheckoutClient.mark_upgraded(session_cache)
        return {"is_pro": True}

    return app
