import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from taskcapture.api.routes.extraction import router as extraction_router
from taskcapture.config import settings

logging.basicConfig(level=settings.log_level.upper())

app = FastAPI(
    title="Task Capture API",
    description="Heuristic task extraction from voice transcripts and chat messages",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:3000",
    ],
    allow_origin_regex=r"http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(extraction_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
