from fastapi import FastAPI
from controllers.predict import BACKEND_URL, router as predict_router
from controllers.history import router as history_router
from controllers.auth import router as auth_router
from controllers.health import router as health_router
from database.db import init_db


app = FastAPI(title="SafeSkin")
init_db()
app.include_router(predict_router)
app.include_router(history_router)
app.include_router(auth_router)
app.include_router(health_router)


@app.on_event("startup")
async def _app_startup() -> None:
    print(f" [*] Relaying predictions to {BACKEND_URL}/predict")


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8080)
