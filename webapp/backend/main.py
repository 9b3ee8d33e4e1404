"""FastAPI application for the weekly Timetabler."""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers import schedule
from timetabler import __version__

app = FastAPI(
    title="Weekly Timetabler",
    description="Greedy weekly teacher timetable with a shared fairness ledger",
    version=__version__,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Allow all origins in development
    allow_credentials=False,  # Must be False when allow_origins is "*"
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(schedule.router, prefix="/api/schedule", tags=["schedule"])


@app.get("/")
def root():
    return {"message": "Weekly Timetabler API", "docs": "/docs"}
