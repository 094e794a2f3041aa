# app/tutorado/main.py
from fastapi import FastAPI, Request
from contextlib import asynccontextmanager
import redis.asyncio as redis
import logging
import uvicorn

# Proje ayarlarını ve modüllerini import edelim
from .config.config import settings
from .logging.logging_config import setup_logging
from .api import attendances, auth, reports, students, users
from .api.schemas.user import HealthResponse

from .db.session_store import InMemorySessionStore, RedisSessionStore
from .db.store_client import RemoteStoreClient, StoreGateway, create_http_client
from .services.auth_service import AuthService
from .services.data_service import DataService
from .services.state_cache import AppStateCache

logger = logging.getLogger(__name__)

#adding empty cors for building frontend
from fastapi.middleware.cors import CORSMiddleware


def build_session_store():
    """Redis URL varsa Redis, yoksa süreç içi oturum deposu döndürür."""
    if not settings.SESSION_REDIS_URL:
        return InMemorySessionStore()
    try:
        pool = redis.ConnectionPool.from_url(settings.SESSION_REDIS_URL, decode_responses=True)
        return RedisSessionStore(pool=pool, key=settings.SESSION_KEY)
    except ValueError as e:
        logger.error(f"HATA: Redis oturum deposu kurulamadı, bellek içi depoya geçiliyor: {e}")
        return InMemorySessionStore()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Uygulama başlatıldığında ve durdurulduğunda çalışacak olan yaşam döngüsü yöneticisi.
    """
    setup_logging()
    logger.info("Uygulama başlatılıyor...")

    missing = settings.missing_store_settings()
    if missing:
        logger.error(f"[Supabase] Missing configuration: {', '.join(missing)}. Only the emergency login (ADM001) will work.")

    http_client = create_http_client(
        settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY, timeout=settings.STORE_REQUEST_TIMEOUT_SECONDS
    )
    gateway = StoreGateway(RemoteStoreClient(http_client, configured=not missing))
    session_store = build_session_store()
    cache = AppStateCache()
    service = DataService(gateway, cache, AuthService(session_store, cache, gateway))

    app.state.data_service = service
    app.state.missing_config = missing
    service.start(settings.STARTUP_LOAD_TIMEOUT_SECONDS)

    yield

    logger.info("Uygulama kapatılıyor...")
    await service.close()
    await session_store.aclose()
    await http_client.aclose()
    logger.info("Uzak depo istemcisi ve oturum deposu kapatıldı.")


# Ana FastAPI uygulamasını oluştur
app = FastAPI(
    title="Tutorado API",
    description="Tutoria painel: alunos, tutores e atendimentos",
    version="1.0.0",
    lifespan=lifespan
)

origins = [
   "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API router'larını uygulamaya dahil et
app.include_router(auth.router, prefix="/api/v1")
app.include_router(students.router, prefix="/api/v1")
app.include_router(users.router, prefix="/api/v1")
app.include_router(attendances.router, prefix="/api/v1")
app.include_router(reports.router, prefix="/api/v1")


@app.get("/health", tags=["System"], response_model=HealthResponse)
def health_check(request: Request):
    """Yükleme durumunu ve eksik ayarları raporlar."""
    service: DataService = request.app.state.data_service
    return HealthResponse(
        status="ok",
        loading=service.is_loading,
        offline=service.is_offline,
        missing_config=getattr(request.app.state, "missing_config", []),
        loaded=service.load_results,
    )


if __name__ == "__main__":
    uvicorn.run("app.tutorado.main:app", host="0.0.0.0", port=8000)
