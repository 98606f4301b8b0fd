from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
from workflow_composer.config import settings
from workflow_composer.api import automations, orchestrations, workflows
from workflow_composer.integrations.http_client import HttpClient

@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await HttpClient.close_client()

app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(orchestrations.router, prefix=f"{settings.API_V1_STR}/orchestrations", tags=["orchestrations"])
app.include_router(workflows.router, prefix=f"{settings.API_V1_STR}/workflows", tags=["workflows"])
app.include_router(automations.router, prefix=f"{settings.API_V1_STR}/automations", tags=["automations"])

@app.get("/")
async def root():
    return {"message": "Workflow Composer API is running"}

@app.get("/health")
async def health_check():
    return {"status": "healthy"}
