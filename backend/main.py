from fastapi import FastAPI

from config import get_settings, setup_logging
from database import Base, engine
from middleware import setup_exception_handlers, setup_middleware
from models import Admin, User
from routers.admin import admin_router
from routers.auth import build_account_router
from routers.products import products_router
from routers.user_actions import user_actions_router

settings = get_settings()
setup_logging(settings)

app = FastAPI(title="Price Compare API")

# vytvoření tabulek (pokud nejsou)
Base.metadata.create_all(bind=engine)

setup_middleware(app, settings)
setup_exception_handlers(app)


@app.get("/health")
def health():
    return {"ok": True}


app.include_router(products_router)
app.include_router(build_account_router(User, "user"), prefix="/api/user")
app.include_router(build_account_router(Admin, "admin"), prefix="/api/admin")
app.include_router(user_actions_router)
app.include_router(admin_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True)
