"""
Uptime Report Service - FastAPI Application
Main entry point for the API server and the periodic report worker
"""

from contextlib import asynccontextmanager

import structlog
import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from uptime_report.api.routes import health, report
from uptime_report.clients.registry import EntityRegistry
from uptime_report.clients.status_store import StatusStoreClient
from uptime_report.core.config import Settings, settings
from uptime_report.core.logging import configure_logging
from uptime_report.database.connection import create_db_engine, create_session_factory, init_database
from uptime_report.services.report_service import ReportService
from uptime_report.sinks.database_sink import DatabaseReportSink, FanoutReportSink, ReportSink
from uptime_report.sinks.email_sink import EmailReportSink
from uptime_report.workers.report_worker import ReportWorker

# Configure structured logging
configure_logging(settings.log_level)

logger = structlog.get_logger(__name__)


def build_sink(config: Settings) -> ReportSink:
    """Assemble the configured report sinks"""
    sinks = []
    for name in config.report_sinks:
        if name == "email":
            sinks.append(EmailReportSink(
                username=config.mail_username,
                password=config.mail_password,
                host=config.smtp_host,
                port=config.smtp_port,
            ))
        elif name == "database":
            engine = create_db_engine(config.database_url, echo=config.debug)
            init_database(engine)
            sinks.append(DatabaseReportSink(create_session_factory(engine)))
    if len(sinks) == 1:
        return sinks[0]
    return FanoutReportSink(sinks)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Uptime Report Service")
    registry = EntityRegistry.from_settings(
        host=settings.redis_host,
        port=settings.redis_port,
        db=settings.redis_db,
        password=settings.redis_password,
        key=settings.registry_key,
    )
    status_store = StatusStoreClient(
        settings.elasticsearch_url,
        index=settings.elasticsearch_index,
        timeout=settings.elasticsearch_timeout,
    )
    report_service = ReportService(registry, status_store, build_sink(settings))
    worker = ReportWorker(report_service, settings.report_recipient, settings.report_interval)

    app.state.report_service = report_service
    worker.start()
    try:
        yield
    finally:
        # Shutdown
        await worker.stop()
        await status_store.close()
        await registry.close()
        logger.info("Uptime Report Service stopped gracefully")


# Create FastAPI application
app = FastAPI(
    title="Uptime Report Service",
    description="Periodic container uptime reports from Elasticsearch status records",
    version="1.0.0",
    lifespan=lifespan
)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(report.router, prefix="/api/v1", tags=["report"])


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler"""
    logger.error("Unhandled exception", exc_info=exc, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    uvicorn.run(
        "uptime_report.main:app",
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower()
    )
