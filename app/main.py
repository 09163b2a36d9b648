from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config.settings import settings
from app.middleware.security import SecurityMiddleware
from app.routes import auth_router, face_analysis_router, user_router, payment_router

app = FastAPI(title="ReflectAI API")

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(SecurityMiddleware)

app.include_router(auth_router, prefix="/auth", tags=["auth"])
app.include_router(face_analysis_router, prefix="/analysis", tags=["analysis"])
app.include_router(user_router, prefix="/user", tags=["user"])
app.include_router(payment_router, prefix="/payment", tags=["payment"])

@app.get("/")
async def root():
    return {"message": "ReflectAI API"}

@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "frontend_url": settings.FRONTEND_URL,
        "backend_url": settings.BACKEND_URL
    }
