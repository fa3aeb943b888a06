from fastapi import FastAPI

from tiktok_uploader.routes import uploadRouter


def mainRouter(app: FastAPI):
    app.include_router(uploadRouter.router, tags=['upload'])
