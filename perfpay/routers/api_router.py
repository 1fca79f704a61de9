from fastapi import APIRouter
from perfpay.routers import auth, parameters, performance, salary

# Centralized API router hub: main.py only imports this one
api_router = APIRouter()

api_router.include_router(auth.router, tags=["Authentication"])
api_router.include_router(parameters.router, tags=["Parameters"])
api_router.include_router(performance.router, tags=["Performance"])
api_router.include_router(salary.router, tags=["Salary"])
