from fastapi import APIRouter

from app.api.v1.routes import users, savings_goals, personal_savings

api_router = APIRouter()

api_router.include_router(users.router)
api_router.include_router(savings_goals.router)
api_router.include_router(personal_savings.router)
