"""FastAPI application factory and wiring."""

import sys
from dataclasses import dataclass
from typing import Optional

from fastapi import FastAPI

from blueprint.adapters.llm import WhisperTranscriber, create_assistant
from blueprint.adapters.notify import LogNotifier
from blueprint.adapters.storage import JsonChatLog, JsonEntityStore, JsonStorage
from blueprint.adapters.web.chat_routes import chat_router
from blueprint.config import AppConfig, __version__
from blueprint.domain.dispatcher import ActionDispatcher
from blueprint.domain.models import DispatchReport
from blueprint.domain.session import ChatSession
from blueprint.domain.voice import VoiceCapture


def _log(msg: str):
    print(msg, file=sys.stderr)


@dataclass
class AppServices:
    config: AppConfig
    store: JsonEntityStore
    chat_log: JsonChatLog
    session: ChatSession
    transcriber: WhisperTranscriber
    voice: VoiceCapture


def _report_changes(report: DispatchReport):
    if report.changed:
        _log(f"[app] data changed: {len(report.applied)} applied, {len(report.failed)} failed")


def build_services(config: AppConfig) -> AppServices:
    storage = JsonStorage(config.data_dir)
    store = JsonEntityStore(storage)
    chat_log = JsonChatLog(storage)
    dispatcher = ActionDispatcher(store, category_color=config.chat.category_color)
    session = ChatSession(
        assistant=create_assistant(config.assistant),
        chat_log=chat_log,
        dispatcher=dispatcher,
        history_window=config.chat.history_window,
        history_limit=config.chat.history_limit,
        on_change=_report_changes,
    )
    transcriber = WhisperTranscriber(config.voice)
    voice = VoiceCapture(transcriber, session, LogNotifier())
    return AppServices(
        config=config,
        store=store,
        chat_log=chat_log,
        session=session,
        transcriber=transcriber,
        voice=voice,
    )


def create_app(services: Optional[AppServices] = None) -> FastAPI:
    if services is None:
        services = build_services(AppConfig.from_env())
    app = FastAPI(title="Blueprint Assistant", version=__version__)
    app.state.services = services
    app.include_router(chat_router)

    @app.on_event("startup")
    async def startup_event():
        _log(f"[app] data dir: {services.config.data_dir}")
        _log(f"[app] assistant: {services.config.assistant.provider} ({services.config.assistant.model})")
        if not services.config.assistant.is_configured:
            _log("[app] AI_API_KEY not set; chat replies will report the missing key")
        await services.session.load_history()
        _log("[app] ready")

    @app.get("/health")
    async def health():
        return {"status": "ok", "version": __version__}

    return app


def main():
    import uvicorn

    config = AppConfig.from_env()
    uvicorn.run(create_app(build_services(config)), host="127.0.0.1", port=config.port)


if __name__ == "__main__":
    main()
