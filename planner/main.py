# planner/main.py

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from planner import config

# ---------------- LOGGING ----------------
logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("planner")

app = FastAPI(title="Gantt Planner API", version="0.1.0")

# ---------------- CORS ----------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------- DATABASE INIT ----------------
from planner.database import init_db  # noqa: E402
from planner.realtime.change_feed import feed, install_session_hooks  # noqa: E402

logger.info("Checking database models...")
init_db()
install_session_hooks(feed)
logger.info("Database ready.")

# ---------------- ROUTERS ----------------
from planner.auth.auth_router import router as auth_router  # noqa: E402
from planner.gantt.gantt_router import router as gantt_router  # noqa: E402
from planner.profile.profile_router import router as profile_router  # noqa: E402
from planner.project.project_router import router as project_router  # noqa: E402
from planner.realtime.realtime_router import router as realtime_router  # noqa: E402
from planner.task.dependency_router import router as dependency_router  # noqa: E402
from planner.task.task_router import router as task_router  # noqa: E402

app.include_router(auth_router, prefix="/auth")
app.include_router(profile_router)
app.include_router(project_router)
app.include_router(task_router)
app.include_router(dependency_router)
app.include_router(gantt_router)
app.include_router(realtime_router)


# ---------------- ROOT ----------------
@app.get("/")
def read_root():
    return {"message": "Gantt planner backend running"}


def run():
    import uvicorn

    uvicorn.run("planner.main:app", host=config.UVICORN_HOST, port=config.UVICORN_PORT)
