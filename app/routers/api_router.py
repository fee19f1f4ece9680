from fastapi import APIRouter
from app.routers import resume, jobs, skills, interview, profile, dashboard, db_gateway

# Centralized API router hub
# Routers are aggregated here, and main.py only imports this single hub.
api_router = APIRouter()

api_router.include_router(resume.router, tags=["Resumes"])
api_router.include_router(jobs.router, tags=["Job Recommendations"])
api_router.include_router(skills.router, tags=["Skills"])
api_router.include_router(interview.router, tags=["Interview Questions"])
api_router.include_router(profile.router, tags=["Profile"])
api_router.include_router(dashboard.router, tags=["Dashboard"])
api_router.include_router(db_gateway.router, tags=["Persistence Gateway"])
