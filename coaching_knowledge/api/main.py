from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coaching_knowledge.api.routes.knowledge import router as knowledge_router
from coaching_knowledge.api.routes.transcripts import router as transcripts_router

app = FastAPI(
    title="Coaching Knowledge API",
    description="Transcript ingestion and lexical retrieval for the thinking partner",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_origin_regex=r"https://.*\.vercel\.app|http://localhost:\d+",
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(knowledge_router)
app.include_router(transcripts_router)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "healthy"}
